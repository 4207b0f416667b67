from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ValidationError
from ..models import db, Tenant, TENANT_STATUSES, STATUS_ACTIVE, VACANCY_UNAVAILABLE
from ..utils.validation import FormValidator
from .results import OperationResult, UNIT_OCCUPIED
from .vacancy import lock_unit, active_tenant_count, recompute_vacancy

UNIT_OCCUPIED_MESSAGE = (
    "This unit already has an active tenant. Please terminate the existing lease first."
)

EDITABLE_FIELDS = (
    "title", "first_name", "last_name", "email", "phone", "rent",
    "lease_start_date", "lease_end_date", "rent_due_date",
)


def _email_taken(email, exclude_tenant_id=None):
    query = Tenant.query.filter(db.func.lower(Tenant.email) == email.lower())
    if exclude_tenant_id is not None:
        query = query.filter(Tenant.id != exclude_tenant_id)
    return db.session.query(query.exists()).scalar()


def validate_tenant_payload(data, tenant=None):
    """
    Validate a tenant form. With ``tenant`` given only the submitted fields are
    checked (partial update) and lease dates are compared against stored ones.
    """
    partial = tenant is not None
    form = FormValidator(data)

    def wanted(field):
        return not partial or field in form.data

    if wanted("title"):
        form.string("title", max_length=10)
    if wanted("first_name"):
        form.string("first_name", required=True)
    if wanted("last_name"):
        form.string("last_name", required=True)
    if wanted("email"):
        email = form.email("email")
        if email and "email" not in form.errors and _email_taken(email, tenant.id if tenant else None):
            form.add_error("email", "email has already been taken")
    if wanted("phone"):
        form.string("phone", max_length=20)
    if wanted("rent"):
        form.decimal(
            "rent", default=Decimal("0.00"),
            minimum=Decimal("0"), maximum=Decimal("999999.99"),
        )
    if wanted("lease_start_date"):
        form.date("lease_start_date")
    if wanted("lease_end_date"):
        form.date("lease_end_date")
    if wanted("rent_due_date"):
        form.date("rent_due_date")
    if not partial:
        form.choice("status", TENANT_STATUSES, default=STATUS_ACTIVE)

    start = form.cleaned.get("lease_start_date", tenant.lease_start_date if tenant else None)
    end = form.cleaned.get("lease_end_date", tenant.lease_end_date if tenant else None)
    if start and end and end < start:
        form.add_error("lease_end_date", "lease_end_date must be on or after lease_start_date")

    return form.validate()


def _integrity_failure(email, data, exclude_tenant_id=None):
    """Map a constraint violation lost to a concurrent request back to its business rule."""
    db.session.rollback()
    if email and _email_taken(email, exclude_tenant_id):
        raise ValidationError({"email": "email has already been taken"}, data)
    return OperationResult.failure(UNIT_OCCUPIED, UNIT_OCCUPIED_MESSAGE)


def create_tenant(unit, data):
    """Add a tenant to a unit; an active tenant makes the unit unavailable."""
    cleaned = validate_tenant_payload(data)

    unit = lock_unit(unit.id)
    if cleaned["status"] == STATUS_ACTIVE and active_tenant_count(unit.id) > 0:
        db.session.rollback()
        current_app.logger.info("Rejected active tenant for occupied unit %s", unit.slug)
        return OperationResult.failure(UNIT_OCCUPIED, UNIT_OCCUPIED_MESSAGE)

    tenant = Tenant(unit_id=unit.id, **cleaned)
    db.session.add(tenant)
    if tenant.status == STATUS_ACTIVE:
        unit.vacancy = VACANCY_UNAVAILABLE

    try:
        db.session.commit()
    except IntegrityError:
        return _integrity_failure(cleaned["email"], data)

    current_app.logger.info("Tenant %s added to unit %s", tenant.id, unit.slug)
    return OperationResult.success(
        f'Tenant "{tenant.full_name}" added successfully!', entity=tenant
    )


def change_tenant_status(tenant, new_status):
    """Move a tenant between active/inactive/terminated and re-derive the unit's vacancy."""
    if new_status not in TENANT_STATUSES:
        raise ValidationError(
            {"status": f"status must be one of: {', '.join(TENANT_STATUSES)}"},
            {"status": new_status},
        )

    old_status = tenant.status
    unit = lock_unit(tenant.unit_id)

    if (new_status == STATUS_ACTIVE and old_status != STATUS_ACTIVE
            and active_tenant_count(unit.id, exclude_tenant_id=tenant.id) > 0):
        db.session.rollback()
        return OperationResult.failure(UNIT_OCCUPIED, UNIT_OCCUPIED_MESSAGE)

    tenant.status = new_status
    recompute_vacancy(unit)

    try:
        db.session.commit()
    except IntegrityError:
        return _integrity_failure(None, {"status": new_status})

    current_app.logger.info(
        "Tenant %s status %s -> %s; unit %s is %s",
        tenant.id, old_status, new_status, unit.slug, unit.vacancy,
    )
    return OperationResult.success(
        f"Tenant status updated from {old_status} to {new_status}.", entity=tenant
    )


def update_tenant(tenant, data):
    """Edit contact, rent and lease fields. Status changes go through change_tenant_status."""
    data = {k: v for k, v in (data or {}).items() if k in EDITABLE_FIELDS}
    cleaned = validate_tenant_payload(data, tenant=tenant)
    for field, value in cleaned.items():
        setattr(tenant, field, value)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError({"email": "email has already been taken"}, data)

    return OperationResult.success(f'Tenant "{tenant.full_name}" updated.', entity=tenant)


def delete_tenant(tenant):
    name = tenant.full_name
    unit = lock_unit(tenant.unit_id)
    db.session.delete(tenant)
    recompute_vacancy(unit)
    db.session.commit()
    current_app.logger.info("Tenant %s removed from unit %s", name, unit.slug)
    return OperationResult.success(f'Tenant "{name}" deleted.', entity=unit)
