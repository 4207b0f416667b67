from flask import Blueprint, jsonify, request

from ..models import Tenant
from ..security import manager_required
from ..services.listing import list_tenants
from ..services.portal import create_portal_access, remove_portal_access
from ..services.stats import tenant_stats
from ..services.tenants import change_tenant_status, update_tenant, delete_tenant
from . import request_data, render_result, get_or_404, serialize_tenant

bp = Blueprint("tenants", __name__)


@bp.get("/tenants")
@manager_required
def index():
    page = list_tenants(request.args)
    return jsonify(
        tenants=[serialize_tenant(t) for t in page.items],
        total=page.total,
        sort={"field": page.sort.field, "direction": page.sort.direction},
        stats=tenant_stats(),
    )


@bp.get("/tenants/<int:tenant_id>")
@manager_required
def tenant_detail(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    return jsonify(
        tenant=serialize_tenant(tenant),
        unit=tenant.unit.serialize(),
        user=tenant.user.serialize() if tenant.user else None,
    )


@bp.patch("/tenants/<int:tenant_id>")
@manager_required
def edit_tenant(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    result = update_tenant(tenant, request_data())
    return render_result(result, tenant=serialize_tenant(result.entity))


@bp.patch("/tenants/<int:tenant_id>/status")
@manager_required
def update_status(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    result = change_tenant_status(tenant, request_data().get("status"))
    if not result.ok:
        return render_result(result)
    return render_result(
        result,
        tenant=serialize_tenant(result.entity),
        unit_vacancy=result.entity.unit.vacancy,
    )


@bp.delete("/tenants/<int:tenant_id>")
@manager_required
def remove_tenant(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    result = delete_tenant(tenant)
    return render_result(result, unit_vacancy=result.entity.vacancy)


@bp.post("/tenants/<int:tenant_id>/portal-access")
@manager_required
def grant_portal_access(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    return render_result(create_portal_access(tenant), created=True)


@bp.delete("/tenants/<int:tenant_id>/portal-access")
@manager_required
def revoke_portal_access(tenant_id):
    tenant = get_or_404(Tenant, tenant_id)
    return render_result(remove_portal_access(tenant))
