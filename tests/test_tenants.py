from decimal import Decimal
from datetime import date

import pytest

from propdesk.errors import ValidationError
from propdesk.models import db, Tenant
from propdesk.services.tenants import update_tenant

from conftest import make_tenant, make_unit


def test_duplicate_email_fails_validation(unit, building):
    make_tenant(unit)
    other = make_unit(building, name="Apt 2")

    with pytest.raises(ValidationError) as exc:
        make_tenant(other, first_name="Janet", email="JANE@example.com")

    assert exc.value.errors["email"] == "email has already been taken"
    assert Tenant.query.count() == 1


def test_required_fields_and_echoed_input(unit):
    with pytest.raises(ValidationError) as exc:
        make_tenant(unit, first_name="", email="not-an-email")

    errors = exc.value.errors
    assert "first_name" in errors
    assert "email" in errors
    assert exc.value.to_dict()["input"]["last_name"] == "Doe"


def test_rent_defaults_and_bounds(unit, building):
    tenant = make_tenant(unit, rent="").entity
    assert tenant.rent == Decimal("0.00")

    with pytest.raises(ValidationError) as exc:
        make_tenant(make_unit(building, name="Apt 2"), email="x@example.com", rent="-1")
    assert "rent" in exc.value.errors


def test_lease_end_must_follow_start(unit):
    with pytest.raises(ValidationError) as exc:
        make_tenant(unit, lease_start_date="2025-06-01", lease_end_date="2025-05-01")
    assert "lease_end_date" in exc.value.errors


def test_update_keeps_status_and_checks_email(unit, building):
    jane = make_tenant(unit).entity
    make_tenant(make_unit(building, name="Apt 2"), first_name="John", last_name="Roe", email="john@example.com")

    result = update_tenant(jane, {"phone": "07700 900000", "rent": "1350", "status": "terminated"})
    assert result.ok
    jane = db.session.get(Tenant, jane.id)
    assert jane.phone == "07700 900000"
    assert jane.rent == Decimal("1350.00")
    assert jane.status == "active"

    with pytest.raises(ValidationError):
        update_tenant(jane, {"email": "john@example.com"})


def test_lease_and_rent_flags(unit):
    tenant = make_tenant(
        unit, lease_end_date="2026-11-10", rent_due_date="2026-10-01",
    ).entity
    today = date(2026, 10, 19)

    assert tenant.lease_expiring_soon(today)
    assert not tenant.lease_expiring_soon(date(2026, 9, 1))
    assert not tenant.lease_expiring_soon(date(2026, 11, 10))
    assert tenant.rent_overdue(today)
    assert not tenant.rent_overdue(date(2026, 9, 30))

    data = tenant.serialize(today=today)
    assert data["rent"] == "1200.00"
    assert data["lease_expiring_soon"] is True
    assert data["building_name"] == "Tower A"
    assert data["zone_name"] == "Riverside"


class TestTenantEndpoints:
    def test_scenario_through_api(self, client, manager_headers, unit):
        resp = client.post(f"/api/units/{unit.slug}/tenants", headers=manager_headers, json={
            "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com", "status": "active",
        })
        assert resp.status_code == 201
        assert resp.get_json()["tenant"]["full_name"] == "Jane Doe"

        resp = client.post(f"/api/units/{unit.slug}/tenants", headers=manager_headers, json={
            "first_name": "John", "last_name": "Roe", "email": "john@example.com", "status": "active",
        })
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["ok"] is False
        assert body["error"] == "unit_occupied"

        resp = client.get(f"/api/units/{unit.slug}", headers=manager_headers)
        assert resp.get_json()["unit"]["vacancy"] == "unavailable"

    def test_status_endpoint_recomputes_vacancy(self, client, manager_headers, unit):
        jane = make_tenant(unit).entity

        resp = client.patch(f"/api/tenants/{jane.id}/status", headers=manager_headers, json={"status": "terminated"})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Tenant status updated from active to terminated."
        assert body["unit_vacancy"] == "available"

    def test_validation_error_shape(self, client, manager_headers, unit):
        resp = client.post(f"/api/units/{unit.slug}/tenants", headers=manager_headers, json={
            "first_name": "Jane", "email": "jane@example.com",
        })

        assert resp.status_code == 422
        body = resp.get_json()
        assert body["error"] == "validation_error"
        assert "last_name" in body["errors"]
        assert body["input"]["first_name"] == "Jane"

    def test_delete_tenant(self, client, manager_headers, unit):
        jane = make_tenant(unit).entity

        resp = client.delete(f"/api/tenants/{jane.id}", headers=manager_headers)

        assert resp.status_code == 200
        assert resp.get_json()["unit_vacancy"] == "available"
        assert client.get(f"/api/tenants/{jane.id}", headers=manager_headers).status_code == 404
