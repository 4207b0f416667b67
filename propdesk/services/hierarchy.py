from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ValidationError
from ..models import db, Zone, Building, Unit, Tenant, VACANCY_AVAILABLE, VACANCY_PENDING
from ..storage import get_storage
from ..utils.slugs import unique_slug
from ..utils.validation import FormValidator
from .results import OperationResult


# ---------------- Transitive lookups ----------------
def zone_units(zone):
    """All units in any building of the zone"""
    return (
        Unit.query.join(Building, Unit.building_id == Building.id)
        .filter(Building.zone_id == zone.id)
        .order_by(Unit.name)
    )


def zone_tenants(zone):
    """All tenants of any unit in the zone"""
    return (
        Tenant.query.join(Unit, Tenant.unit_id == Unit.id)
        .join(Building, Unit.building_id == Building.id)
        .filter(Building.zone_id == zone.id)
        .order_by(Tenant.last_name, Tenant.first_name)
    )


def subtree_documents(owner):
    """Documents owned by ``owner`` or anything below it"""
    if isinstance(owner, Zone):
        docs = list(owner.documents)
        for building in owner.buildings:
            docs.extend(subtree_documents(building))
        return docs
    if isinstance(owner, Building):
        docs = list(owner.documents)
        for unit in owner.units:
            docs.extend(unit.documents)
        return docs
    return list(owner.documents)


# ---------------- Creation ----------------
def _commit_new(errors, data):
    """Commit an insert; a name or slug taken by a concurrent request becomes a field error"""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(errors, data)


def create_zone(data):
    form = FormValidator(data)
    name = form.string("name", required=True)
    if name and "name" not in form.errors and Zone.query.filter(db.func.lower(Zone.name) == name.lower()).first():
        form.add_error("name", "name has already been taken")
    form.validate()

    zone = Zone(name=name, slug=unique_slug(Zone, name, "zone"))
    db.session.add(zone)
    _commit_new({"name": "name has already been taken"}, data)
    current_app.logger.info("Zone %s created", zone.slug)
    return OperationResult.success("Zone created successfully!", entity=zone)


def create_building(zone, data):
    form = FormValidator(data)
    name = form.string("name", required=True)
    street = form.string("street")
    form.validate()

    building = Building(
        name=name,
        street=street,
        zone_id=zone.id,
        slug=unique_slug(Building, f"{name}-{street or ''}", "building"),
    )
    db.session.add(building)
    _commit_new({"name": "a building with this name and street was just added, please retry"}, data)
    current_app.logger.info("Building %s created in zone %s", building.slug, zone.slug)
    return OperationResult.success(f'Building "{building.name}" added successfully!', entity=building)


def create_unit(building, data):
    form = FormValidator(data)
    name = form.string("name", required=True)
    form.string("type")
    form.string("address")
    form.string("postcode", max_length=10)
    # A new unit has no tenants, so it can only start available or on hold
    form.choice("vacancy", (VACANCY_AVAILABLE, VACANCY_PENDING), default=VACANCY_AVAILABLE)
    cleaned = form.validate()

    unit = Unit(
        building_id=building.id,
        slug=unique_slug(Unit, f"{name}-{building.slug}", "unit"),
        **cleaned,
    )
    db.session.add(unit)
    _commit_new({"name": "a unit with this name was just added, please retry"}, data)
    current_app.logger.info("Unit %s created in building %s", unit.slug, building.slug)
    return OperationResult.success(f'Unit "{unit.name}" added successfully!', entity=unit)


# ---------------- Deletion ----------------
def delete_owner(owner):
    """
    Delete a zone, building or unit with everything below it. Document rows go
    with their owner through the ORM cascade; their files are removed once the
    delete has committed.
    """
    label = f"{type(owner).__name__} {owner.slug}"
    paths = [doc.path for doc in subtree_documents(owner)]

    db.session.delete(owner)
    db.session.commit()

    storage = get_storage()
    for path in paths:
        try:
            storage.delete(path)
        except OSError as e:
            current_app.logger.warning("Could not remove %s after deleting %s: %s", path, label, e)

    current_app.logger.info("%s deleted with %d documents", label, len(paths))
    return OperationResult.success(f"{label} deleted.", documents_removed=len(paths))
