from flask import Blueprint, jsonify, request

from ..errors import ValidationError
from ..models import Zone
from ..security import manager_required
from ..services import documents as document_service
from ..services.hierarchy import create_zone, create_building, delete_owner, zone_units, zone_tenants
from . import (
    request_data, render_result, get_by_slug_or_404,
    serialize_tenant, serialize_document,
)

bp = Blueprint("zones", __name__)


@bp.get("/zones")
@manager_required
def list_zones():
    zones = Zone.query.order_by(Zone.name).all()
    return jsonify(zones=[z.serialize() for z in zones])


@bp.post("/zones")
@manager_required
def add_zone():
    result = create_zone(request_data())
    return render_result(result, created=True, zone=result.entity.serialize())


@bp.get("/zones/<slug>")
@manager_required
def zone_detail(slug):
    zone = get_by_slug_or_404(Zone, slug)
    return jsonify(
        zone=zone.serialize(),
        buildings=[b.serialize() for b in zone.buildings],
    )


@bp.delete("/zones/<slug>")
@manager_required
def remove_zone(slug):
    return render_result(delete_owner(get_by_slug_or_404(Zone, slug)))


@bp.post("/zones/<slug>/buildings")
@manager_required
def add_building(slug):
    zone = get_by_slug_or_404(Zone, slug)
    result = create_building(zone, request_data())
    return render_result(result, created=True, building=result.entity.serialize())


@bp.get("/zones/<slug>/units")
@manager_required
def units_in_zone(slug):
    zone = get_by_slug_or_404(Zone, slug)
    return jsonify(units=[u.serialize() for u in zone_units(zone)])


@bp.get("/zones/<slug>/tenants")
@manager_required
def tenants_in_zone(slug):
    zone = get_by_slug_or_404(Zone, slug)
    return jsonify(tenants=[serialize_tenant(t) for t in zone_tenants(zone)])


@bp.get("/zones/<slug>/documents")
@manager_required
def zone_documents(slug):
    zone = get_by_slug_or_404(Zone, slug)
    folder = request.args.get("folder", "all")
    if folder not in document_service.FOLDER_VIEWS:
        raise ValidationError(
            {"folder": f"folder must be one of: {', '.join(document_service.FOLDER_VIEWS)}"},
            {"folder": folder},
        )
    docs = document_service.owner_documents(zone, folder)
    return jsonify(folder=folder, documents=[serialize_document(d) for d in docs])


@bp.post("/zones/<slug>/documents")
@manager_required
def upload_zone_document(slug):
    zone = get_by_slug_or_404(Zone, slug)
    result = document_service.upload_document(zone, request.files.get("file"), request.form.to_dict())
    return render_result(result, created=True)
