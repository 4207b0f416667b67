import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from ..errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

_MISSING = object()


def validate_email(email: str) -> bool:
    """Validate email format"""
    return bool(EMAIL_PATTERN.match(email or ""))


class FormValidator:
    """
    Collects field errors for one submitted payload.

    Each check stores the cleaned value under the field name; ``validate()``
    raises a ValidationError carrying every error at once, or returns the
    cleaned values.
    """

    def __init__(self, data):
        self.data = dict(data or {})
        self.errors = {}
        self.cleaned = {}

    def _raw(self, field):
        value = self.data.get(field, _MISSING)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            return _MISSING
        return value

    def add_error(self, field, message):
        self.errors.setdefault(field, message)

    def has(self, field):
        return self._raw(field) is not _MISSING

    def string(self, field, required=False, max_length=255):
        value = self._raw(field)
        if value is _MISSING:
            if required:
                self.add_error(field, f"{field} is required")
            self.cleaned[field] = None
            return None
        value = str(value)
        if len(value) > max_length:
            self.add_error(field, f"{field} must be at most {max_length} characters")
        self.cleaned[field] = value
        return value

    def email(self, field, required=True):
        value = self.string(field, required=required)
        if value is not None:
            value = value.lower()
            if not validate_email(value):
                self.add_error(field, f"{field} must be a valid email address")
            self.cleaned[field] = value
        return value

    def choice(self, field, choices, default=_MISSING):
        value = self._raw(field)
        if value is _MISSING:
            if default is _MISSING:
                self.add_error(field, f"{field} is required")
                return None
            value = default
        if value not in choices:
            self.add_error(field, f"{field} must be one of: {', '.join(choices)}")
        self.cleaned[field] = value
        return value

    def date(self, field):
        value = self._raw(field)
        if value is _MISSING:
            self.cleaned[field] = None
            return None
        try:
            parsed = datetime.strptime(str(value), '%Y-%m-%d').date()
        except ValueError:
            self.add_error(field, f"{field} must be in YYYY-MM-DD format")
            return None
        self.cleaned[field] = parsed
        return parsed

    def decimal(self, field, required=False, default=None, minimum=None, maximum=None):
        value = self._raw(field)
        if value is _MISSING:
            if required:
                self.add_error(field, f"{field} is required")
            self.cleaned[field] = default
            return default
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            self.add_error(field, f"{field} must be a valid number")
            return None
        if not number.is_finite():
            self.add_error(field, f"{field} must be a valid number")
            return None
        if minimum is not None and number < minimum:
            self.add_error(field, f"{field} must be at least {minimum}")
        if maximum is not None and number > maximum:
            self.add_error(field, f"{field} may not be greater than {maximum}")
        number = number.quantize(Decimal('0.01'))
        self.cleaned[field] = number
        return number

    def integer(self, field, required=False, minimum=None, maximum=None):
        value = self._raw(field)
        if value is _MISSING:
            if required:
                self.add_error(field, f"{field} is required")
            self.cleaned[field] = None
            return None
        try:
            number = int(str(value))
        except ValueError:
            self.add_error(field, f"{field} must be an integer")
            return None
        if minimum is not None and number < minimum:
            self.add_error(field, f"{field} must be at least {minimum}")
        if maximum is not None and number > maximum:
            self.add_error(field, f"{field} may not be greater than {maximum}")
        self.cleaned[field] = number
        return number

    def validate(self):
        if self.errors:
            raise ValidationError(self.errors, self.data)
        return self.cleaned
