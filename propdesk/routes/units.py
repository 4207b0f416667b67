from flask import Blueprint, jsonify, request

from ..models import Unit
from ..security import manager_required
from ..services import documents as document_service
from ..services.hierarchy import delete_owner
from ..services.listing import list_units, unit_types
from ..services.stats import unit_stats
from ..services.tenants import create_tenant
from ..services.vacancy import set_unit_vacancy
from . import request_data, render_result, get_by_slug_or_404, serialize_tenant, serialize_document

bp = Blueprint("units", __name__)


@bp.get("/units")
@manager_required
def index():
    page = list_units(request.args)
    return jsonify(
        units=[u.serialize() for u in page.items],
        total=page.total,
        sort={"field": page.sort.field, "direction": page.sort.direction},
        types=unit_types(),
        stats=unit_stats(),
    )


@bp.get("/units/<slug>")
@manager_required
def unit_detail(slug):
    unit = get_by_slug_or_404(Unit, slug)
    return jsonify(
        unit=unit.serialize(),
        tenants=[serialize_tenant(t) for t in unit.tenants],
    )


@bp.patch("/units/<slug>/vacancy")
@manager_required
def update_vacancy(slug):
    unit = get_by_slug_or_404(Unit, slug)
    result = set_unit_vacancy(unit, request_data().get("vacancy"))
    return render_result(result, unit=result.entity.serialize())


@bp.delete("/units/<slug>")
@manager_required
def remove_unit(slug):
    return render_result(delete_owner(get_by_slug_or_404(Unit, slug)))


@bp.post("/units/<slug>/tenants")
@manager_required
def add_tenant(slug):
    unit = get_by_slug_or_404(Unit, slug)
    result = create_tenant(unit, request_data())
    if not result.ok:
        return render_result(result)
    return render_result(result, created=True, tenant=serialize_tenant(result.entity))


@bp.get("/units/<slug>/documents")
@manager_required
def unit_documents(slug):
    unit = get_by_slug_or_404(Unit, slug)
    docs = document_service.owner_documents(unit)
    return jsonify(documents=[serialize_document(d) for d in docs])


@bp.post("/units/<slug>/documents")
@manager_required
def upload_unit_document(slug):
    unit = get_by_slug_or_404(Unit, slug)
    result = document_service.upload_document(unit, request.files.get("file"), request.form.to_dict())
    return render_result(result, created=True)
