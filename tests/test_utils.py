from decimal import Decimal

import pytest

from propdesk.errors import ValidationError
from propdesk.utils.numbers import percentage, round_half_up
from propdesk.utils.slugs import slugify
from propdesk.utils.validation import FormValidator


@pytest.mark.parametrize("text, expected", [
    ("Riverside", "riverside"),
    ("Tower A-123 Main St", "tower-a-123-main-st"),
    ("Café  Royal", "cafe-royal"),
    ("  spaced__out--name ", "spaced-out-name"),
    ("!!!", ""),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(Decimal("37.5")) == 38
    assert round_half_up(1250.505, 2) == Decimal("1250.51")


def test_percentage():
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(5, 0) == 0


def test_form_validator_collects_all_errors():
    form = FormValidator({"name": "  ", "email": "Someone@Example.COM", "rent": "abc", "start": "01/02/2025"})
    form.string("name", required=True)
    assert form.email("email") == "someone@example.com"
    form.decimal("rent")
    form.date("start")

    with pytest.raises(ValidationError) as exc:
        form.validate()

    assert set(exc.value.errors) == {"name", "rent", "start"}


def test_form_validator_returns_cleaned_values():
    form = FormValidator({"year": "2024", "kind": "a"})
    form.integer("year", minimum=1900)
    form.choice("kind", ("a", "b"))
    form.choice("other", ("x", "y"), default="x")

    assert form.validate() == {"year": 2024, "kind": "a", "other": "x"}


def test_password_fields_are_not_echoed():
    error = ValidationError({"email": "bad"}, {"email": "x", "password": "secret", "new_password": "s"})
    assert error.to_dict()["input"] == {"email": "x"}
