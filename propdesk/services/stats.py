from decimal import Decimal

from ..models import db, Building, Unit, Tenant, VACANCY_AVAILABLE, VACANCY_UNAVAILABLE, STATUS_ACTIVE
from ..utils.numbers import percentage, round_half_up


def building_stats():
    total_units = Unit.query.count()
    occupied = Unit.query.filter(Unit.vacancy == VACANCY_UNAVAILABLE).count()
    return {
        "total_buildings": Building.query.count(),
        "total_units": total_units,
        "average_occupancy": percentage(occupied, total_units),
    }


def unit_stats():
    total = Unit.query.count()
    occupied = Unit.query.filter(Unit.vacancy == VACANCY_UNAVAILABLE).count()
    return {
        "total_units": total,
        "available_units": Unit.query.filter(Unit.vacancy == VACANCY_AVAILABLE).count(),
        "occupancy_rate": percentage(occupied, total),
    }


def tenant_stats():
    active = Tenant.query.filter(Tenant.status == STATUS_ACTIVE)
    average = db.session.query(db.func.avg(Tenant.rent)).filter(Tenant.status == STATUS_ACTIVE).scalar()
    average = round_half_up(average, 2) if average is not None else Decimal("0.00")
    return {
        "total_tenants": Tenant.query.count(),
        "active_tenants": active.count(),
        "average_rent": f"{average:.2f}",
    }
