"""
Search, filter and sort composition for the building, unit and tenant lists.

Search terms match case-insensitively against any of a list's text columns;
filters are combined with AND. Every list is capped at ``LIST_PAGE_SIZE``.
"""
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import case, func, or_

from ..errors import ValidationError
from ..models import db, Zone, Building, Unit, Tenant, User, VACANCY_STATES, VACANCY_UNAVAILABLE, TENANT_STATUSES
from ..utils.validation import FormValidator

ASC = "asc"
DESC = "desc"

PORTAL_HAS_USER = "has_user"
PORTAL_NO_USER = "no_user"


@dataclass
class SortState:
    field: str
    direction: str = ASC

    def toggle(self, field):
        """Clicking the current column flips direction; a new column starts ascending."""
        if field == self.field:
            return SortState(field, DESC if self.direction == ASC else ASC)
        return SortState(field, ASC)


@dataclass
class ListPage:
    items: list
    total: int
    sort: SortState


def _sort_state(params, allowed, default):
    """
    Sort from ``sort``/``direction``. A ``toggle`` column header click is
    applied on top of that current state.
    """
    field = (params.get("sort") or default).strip()
    direction = (params.get("direction") or ASC).strip().lower()
    toggle = (params.get("toggle") or "").strip()
    errors = {}
    if field not in allowed:
        errors["sort"] = f"sort must be one of: {', '.join(allowed)}"
    if direction not in (ASC, DESC):
        errors["direction"] = "direction must be asc or desc"
    if toggle and toggle not in allowed:
        errors["toggle"] = f"toggle must be one of: {', '.join(allowed)}"
    if errors:
        raise ValidationError(errors, {"sort": field, "direction": direction, "toggle": toggle})
    sort = SortState(field, direction)
    return sort.toggle(toggle) if toggle else sort


def _ordered(columns, direction):
    return [c.desc() if direction == DESC else c.asc() for c in columns]


def _search_term(params):
    term = (params.get("search") or "").strip()
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _matching(term, *columns):
    """Columns containing ``term`` literally, ignoring case"""
    return or_(*(column.ilike(term, escape="\\") for column in columns))


def _page(query, sort, columns, tiebreak):
    total = query.order_by(None).count()
    limit = current_app.config["LIST_PAGE_SIZE"]
    items = query.order_by(*_ordered(columns, sort.direction), tiebreak).limit(limit).all()
    return ListPage(items=items, total=total, sort=sort)


# ---------------- Buildings ----------------
BUILDING_SORTS = ("name", "street", "created_at", "zone", "units_count", "occupancy")


def _unit_counts_subquery():
    occupied = func.sum(case((Unit.vacancy == VACANCY_UNAVAILABLE, 1), else_=0))
    return (
        db.session.query(
            Unit.building_id.label("building_id"),
            func.count(Unit.id).label("units_count"),
            (occupied * 100.0 / func.count(Unit.id)).label("occupancy"),
        )
        .group_by(Unit.building_id)
        .subquery()
    )


def list_buildings(params=None):
    params = params or {}
    sort = _sort_state(params, BUILDING_SORTS, "name")
    form = FormValidator(params)
    zone_id = form.integer("zone", minimum=1)
    form.validate()

    counts = _unit_counts_subquery()
    query = (
        Building.query.join(Zone, Building.zone_id == Zone.id)
        .outerjoin(counts, counts.c.building_id == Building.id)
    )

    term = _search_term(params)
    if term:
        query = query.filter(_matching(term, Building.name, Building.street, Zone.name))
    if zone_id:
        query = query.filter(Building.zone_id == zone_id)

    columns = {
        "name": [Building.name],
        "street": [Building.street],
        "created_at": [Building.created_at],
        "zone": [Zone.name],
        "units_count": [func.coalesce(counts.c.units_count, 0)],
        "occupancy": [func.coalesce(counts.c.occupancy, 0)],
    }[sort.field]
    return _page(query, sort, columns, Building.id)


# ---------------- Units ----------------
UNIT_SORTS = ("name", "type", "vacancy", "postcode", "created_at", "building", "zone")


def list_units(params=None):
    params = params or {}
    sort = _sort_state(params, UNIT_SORTS, "name")
    form = FormValidator(params)
    building_id = form.integer("building", minimum=1)
    zone_id = form.integer("zone", minimum=1)
    vacancy = form.choice("vacancy", VACANCY_STATES) if form.has("vacancy") else None
    unit_type = form.string("type")
    form.validate()

    query = (
        Unit.query.join(Building, Unit.building_id == Building.id)
        .join(Zone, Building.zone_id == Zone.id)
    )

    term = _search_term(params)
    if term:
        query = query.filter(_matching(term, Unit.name, Unit.address, Unit.postcode, Building.name))
    if building_id:
        query = query.filter(Unit.building_id == building_id)
    if zone_id:
        query = query.filter(Building.zone_id == zone_id)
    if vacancy:
        query = query.filter(Unit.vacancy == vacancy)
    if unit_type:
        query = query.filter(Unit.type == unit_type)

    columns = {
        "name": [Unit.name],
        "type": [Unit.type],
        "vacancy": [Unit.vacancy],
        "postcode": [Unit.postcode],
        "created_at": [Unit.created_at],
        "building": [Building.name],
        "zone": [Zone.name],
    }[sort.field]
    return _page(query, sort, columns, Unit.id)


def unit_types():
    """Distinct unit types for the type filter"""
    rows = (
        db.session.query(Unit.type)
        .filter(Unit.type.isnot(None), Unit.type != "")
        .distinct()
        .order_by(Unit.type)
    )
    return [t for (t,) in rows]


# ---------------- Tenants ----------------
TENANT_SORTS = (
    "first_name", "last_name", "email", "rent", "status", "lease_end_date",
    "created_at", "full_name", "unit", "building", "zone",
)


def list_tenants(params=None):
    params = params or {}
    sort = _sort_state(params, TENANT_SORTS, "last_name")
    form = FormValidator(params)
    building_id = form.integer("building", minimum=1)
    zone_id = form.integer("zone", minimum=1)
    status = form.choice("status", TENANT_STATUSES) if form.has("status") else None
    portal = form.choice("portal", (PORTAL_HAS_USER, PORTAL_NO_USER)) if form.has("portal") else None
    form.validate()

    query = (
        Tenant.query.join(Unit, Tenant.unit_id == Unit.id)
        .join(Building, Unit.building_id == Building.id)
        .join(Zone, Building.zone_id == Zone.id)
    )

    term = _search_term(params)
    if term:
        query = query.filter(_matching(
            term, Tenant.first_name, Tenant.last_name, Tenant.email, Unit.name, Building.name,
        ))
    if building_id:
        query = query.filter(Unit.building_id == building_id)
    if zone_id:
        query = query.filter(Building.zone_id == zone_id)
    if status:
        query = query.filter(Tenant.status == status)
    if portal:
        has_user = db.session.query(User.id).filter(User.tenant_id == Tenant.id).exists()
        query = query.filter(has_user if portal == PORTAL_HAS_USER else ~has_user)

    columns = {
        "first_name": [Tenant.first_name],
        "last_name": [Tenant.last_name],
        "email": [Tenant.email],
        "rent": [Tenant.rent],
        "status": [Tenant.status],
        "lease_end_date": [Tenant.lease_end_date],
        "created_at": [Tenant.created_at],
        "full_name": [Tenant.first_name, Tenant.last_name],
        "unit": [Unit.name],
        "building": [Building.name],
        "zone": [Zone.name],
    }[sort.field]
    return _page(query, sort, columns, Tenant.id)
