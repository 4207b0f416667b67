from flask import Blueprint, jsonify, request

from ..models import Building
from ..security import manager_required
from ..services import documents as document_service
from ..services.hierarchy import create_unit, delete_owner
from ..services.listing import list_buildings
from ..services.stats import building_stats
from . import request_data, render_result, get_by_slug_or_404, serialize_document

bp = Blueprint("buildings", __name__)


@bp.get("/buildings")
@manager_required
def index():
    page = list_buildings(request.args)
    return jsonify(
        buildings=[b.serialize() for b in page.items],
        total=page.total,
        sort={"field": page.sort.field, "direction": page.sort.direction},
        stats=building_stats(),
    )


@bp.get("/buildings/<slug>")
@manager_required
def building_detail(slug):
    building = get_by_slug_or_404(Building, slug)
    return jsonify(
        building=building.serialize(),
        units=[u.serialize() for u in building.units],
    )


@bp.delete("/buildings/<slug>")
@manager_required
def remove_building(slug):
    return render_result(delete_owner(get_by_slug_or_404(Building, slug)))


@bp.post("/buildings/<slug>/units")
@manager_required
def add_unit(slug):
    building = get_by_slug_or_404(Building, slug)
    result = create_unit(building, request_data())
    return render_result(result, created=True, unit=result.entity.serialize())


@bp.get("/buildings/<slug>/documents")
@manager_required
def building_documents(slug):
    building = get_by_slug_or_404(Building, slug)
    docs = document_service.owner_documents(building)
    return jsonify(documents=[serialize_document(d) for d in docs])


@bp.post("/buildings/<slug>/documents")
@manager_required
def upload_building_document(slug):
    building = get_by_slug_or_404(Building, slug)
    result = document_service.upload_document(building, request.files.get("file"), request.form.to_dict())
    return render_result(result, created=True)
