"""
Unit vacancy derivation.

A unit is ``unavailable`` exactly when it has at least one active tenant.
``pending`` is a manual hold that the next tenant status change overrides.
"""
from flask import current_app

from ..errors import ValidationError
from ..models import db, Unit, Tenant, VACANCY_STATES, VACANCY_AVAILABLE, VACANCY_UNAVAILABLE, STATUS_ACTIVE
from ..models.unit import VACANCY_LABELS
from .results import OperationResult


def lock_unit(unit_id):
    """Load the unit row with a write lock held until the transaction ends"""
    stmt = (
        db.select(Unit)
        .where(Unit.id == unit_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.session.execute(stmt).scalar_one()


def active_tenant_count(unit_id, exclude_tenant_id=None):
    query = db.session.query(db.func.count(Tenant.id)).filter(
        Tenant.unit_id == unit_id,
        Tenant.status == STATUS_ACTIVE,
    )
    if exclude_tenant_id is not None:
        query = query.filter(Tenant.id != exclude_tenant_id)
    return query.scalar() or 0


def derive_vacancy(active_count):
    return VACANCY_UNAVAILABLE if active_count > 0 else VACANCY_AVAILABLE


def recompute_vacancy(unit):
    """Set the unit's vacancy from its current active tenant count"""
    db.session.flush()
    unit.vacancy = derive_vacancy(active_tenant_count(unit.id))
    return unit.vacancy


def set_unit_vacancy(unit, vacancy):
    """Manual vacancy edit; only states consistent with the tenant list are accepted."""
    if vacancy not in VACANCY_STATES:
        raise ValidationError(
            {"vacancy": f"vacancy must be one of: {', '.join(VACANCY_STATES)}"},
            {"vacancy": vacancy},
        )

    unit = lock_unit(unit.id)
    occupied = active_tenant_count(unit.id) > 0

    if occupied and vacancy != VACANCY_UNAVAILABLE:
        db.session.rollback()
        raise ValidationError(
            {"vacancy": "This unit has an active tenant, so it stays unavailable"},
            {"vacancy": vacancy},
        )
    if not occupied and vacancy == VACANCY_UNAVAILABLE:
        db.session.rollback()
        raise ValidationError(
            {"vacancy": "A unit without an active tenant can only be available or pending"},
            {"vacancy": vacancy},
        )

    unit.vacancy = vacancy
    db.session.commit()
    current_app.logger.info("Unit %s vacancy set to %s", unit.slug, vacancy)
    return OperationResult.success(
        f"Unit vacancy set to {VACANCY_LABELS[vacancy]}.", entity=unit
    )
