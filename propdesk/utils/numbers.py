from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value, places=0):
    """Round like a spreadsheet does (2.5 -> 3), not banker's rounding"""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else rounded


def percentage(part, whole):
    if not whole:
        return 0
    return round_half_up(Decimal(part) * 100 / Decimal(whole))
