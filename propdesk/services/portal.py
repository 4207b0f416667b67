import secrets
import string

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..models import db, Tenant, User, ROLE_TENANT
from .results import OperationResult, PORTAL_ACCESS_EXISTS, PORTAL_ACCESS_MISSING, EMAIL_TAKEN

PORTAL_ACCESS_EXISTS_MESSAGE = "This tenant already has portal access."
PORTAL_ACCESS_MISSING_MESSAGE = "This tenant does not have portal access."

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length=None):
    length = length or current_app.config.get("TEMP_PASSWORD_LENGTH", 12)
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def lock_tenant(tenant_id):
    stmt = (
        db.select(Tenant)
        .where(Tenant.id == tenant_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.session.execute(stmt).scalar_one()


def _user_email_taken(email):
    return db.session.query(
        User.query.filter(db.func.lower(User.email) == email.lower()).exists()
    ).scalar()


def create_portal_access(tenant):
    """
    Give a tenant a portal login. The temporary password is only ever handed
    back in the result; the account must change it on first login.
    """
    tenant = lock_tenant(tenant.id)
    if tenant.user is not None:
        db.session.rollback()
        return OperationResult.failure(PORTAL_ACCESS_EXISTS, PORTAL_ACCESS_EXISTS_MESSAGE)

    if _user_email_taken(tenant.email):
        db.session.rollback()
        return OperationResult.failure(
            EMAIL_TAKEN, f"A user account with the email {tenant.email} already exists."
        )

    password = generate_temporary_password()
    user = User(
        name=tenant.full_name,
        email=tenant.email,
        role=ROLE_TENANT,
        tenant_id=tenant.id,
        is_verified=True,
        must_change_password=True,
    )
    user.set_password(password)
    db.session.add(user)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # Lost a race: either another request linked this tenant or took the email
        if db.session.query(User.query.filter(User.tenant_id == tenant.id).exists()).scalar():
            return OperationResult.failure(PORTAL_ACCESS_EXISTS, PORTAL_ACCESS_EXISTS_MESSAGE)
        return OperationResult.failure(
            EMAIL_TAKEN, f"A user account with the email {tenant.email} already exists."
        )

    current_app.logger.info("Portal access created for tenant %s (user %s)", tenant.id, user.id)
    return OperationResult.success(
        f"Portal access created successfully! Temporary password: {password}",
        entity=user,
        temporary_password=password,
        user=user.serialize(),
    )


def remove_portal_access(tenant):
    tenant = lock_tenant(tenant.id)
    user = tenant.user
    if user is None:
        db.session.rollback()
        return OperationResult.failure(PORTAL_ACCESS_MISSING, PORTAL_ACCESS_MISSING_MESSAGE)

    user_id = user.id
    tenant.user = None  # delete-orphan removes the account
    db.session.commit()
    current_app.logger.info("Portal access removed for tenant %s (user %s)", tenant.id, user_id)
    return OperationResult.success("Portal access removed successfully.", entity=tenant)
