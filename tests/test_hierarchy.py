import pytest

from propdesk.errors import ValidationError
from propdesk.models import Zone, Building, Unit, Tenant, Document, User
from propdesk.services.documents import upload_document
from propdesk.services import hierarchy
from propdesk.services.hierarchy import create_zone, create_building, delete_owner, zone_units, zone_tenants
from propdesk.services.portal import create_portal_access
from propdesk.storage import get_storage

from conftest import make_zone, make_building, make_unit, make_tenant, upload


def test_slugs_follow_the_chain(zone, building, unit):
    assert zone.slug == "riverside"
    assert building.slug == "tower-a-123-main-st"
    assert unit.slug == "apt-1-tower-a-123-main-st"


def test_slug_collisions_get_numbered(zone):
    first = make_building(zone, "Tower A", "123 Main St")
    second = make_building(zone, "Tower A", "123 Main St")
    third = make_building(zone, "Tower  A!", "123 Main St.")

    assert first.slug == "tower-a-123-main-st"
    assert second.slug == "tower-a-123-main-st-2"
    assert third.slug == "tower-a-123-main-st-3"


def test_unsluggable_names_fall_back(app):
    assert make_zone("!!!").slug == "zone"
    assert make_zone("???").slug == "zone-2"


def test_zone_names_are_unique(zone):
    with pytest.raises(ValidationError) as exc:
        make_zone("riverside")
    assert exc.value.errors["name"] == "name has already been taken"


def test_zone_transitive_queries(zone, building, unit):
    other = make_building(zone, "The Mews", "8 Mill Lane")
    cottage = make_unit(other, "Cottage")
    elsewhere = make_unit(make_building(make_zone("Hillside"), "Oak Court"), "Studio")
    make_tenant(unit)
    make_tenant(cottage, "Ann", "Lee", "ann@example.com")
    make_tenant(elsewhere, "Bob", "Ray", "bob@example.com")

    assert sorted(u.name for u in zone_units(zone)) == ["Apt 1", "Cottage"]
    assert [t.first_name for t in zone_tenants(zone)] == ["Jane", "Ann"]


def test_deleting_zone_cascades_everything(zone, building, unit):
    jane = make_tenant(unit).entity
    create_portal_access(jane)
    docs = [
        upload_document(zone, upload("minutes.pdf")).entity,
        upload_document(building, upload("insurance.pdf")).entity,
        upload_document(unit, upload("lease.pdf")).entity,
    ]
    paths = [d.path for d in docs]

    result = delete_owner(zone)

    assert result.ok
    assert result.data["documents_removed"] == 3
    for model in (Zone, Building, Unit, Tenant, Document, User):
        assert model.query.count() == 0
    storage = get_storage()
    assert not any(storage.exists(p) for p in paths)


def test_deleting_unit_keeps_building_documents(building, unit):
    kept = upload_document(building, upload("insurance.pdf")).entity
    upload_document(unit, upload("lease.pdf"))

    delete_owner(unit)

    assert [d.id for d in Document.query.all()] == [kept.id]
    assert Building.query.count() == 1


def test_create_endpoints(client, manager_headers):
    resp = client.post("/api/zones", headers=manager_headers, json={"name": "Riverside"})
    assert resp.status_code == 201
    assert resp.get_json()["zone"]["slug"] == "riverside"

    resp = client.post("/api/zones/riverside/buildings", headers=manager_headers,
                       json={"name": "Tower A", "street": "123 Main St"})
    assert resp.get_json()["building"]["slug"] == "tower-a-123-main-st"

    resp = client.post("/api/buildings/tower-a-123-main-st/units", headers=manager_headers,
                       json={"name": "Apt 1", "vacancy": "pending"})
    assert resp.status_code == 201
    assert resp.get_json()["unit"]["vacancy"] == "pending"

    resp = client.patch("/api/units/apt-1-tower-a-123-main-st/vacancy", headers=manager_headers,
                        json={"vacancy": "available"})
    assert resp.status_code == 200
    assert resp.get_json()["unit"]["vacancy_label"] == "Available"

    assert client.get("/api/zones/nowhere", headers=manager_headers).status_code == 404
    resp = client.delete("/api/zones/riverside", headers=manager_headers)
    assert resp.status_code == 200


def test_slug_lost_to_a_concurrent_insert_is_a_validation_error(monkeypatch, zone, building):
    # unique_slug saw the slug as free, but another request committed it first
    monkeypatch.setattr(hierarchy, "unique_slug", lambda model, text, fallback: {
        Zone: zone.slug, Building: building.slug,
    }[model])

    with pytest.raises(ValidationError) as exc:
        create_zone({"name": "Riverside North"})
    assert exc.value.errors["name"] == "name has already been taken"

    with pytest.raises(ValidationError) as exc:
        create_building(zone, {"name": "Tower B"})
    assert "name" in exc.value.errors

    assert Zone.query.count() == 1
    assert Building.query.count() == 1
