from flask import Blueprint, abort, jsonify

from ..models import Document, OwnerKind
from ..security import current_user, tenant_required
from ..services.documents import tenant_visible_documents
from . import get_or_404, serialize_tenant, send_document

bp = Blueprint("portal", __name__)


def _portal_tenant():
    user = current_user()
    if user is None or user.tenant is None:
        abort(403)
    return user.tenant


@bp.get("/portal/me")
@tenant_required
def me():
    tenant = _portal_tenant()
    return jsonify(
        tenant=serialize_tenant(tenant),
        unit=tenant.unit.serialize(),
        must_change_password=tenant.user.must_change_password,
    )


@bp.get("/portal/documents")
@tenant_required
def documents():
    tenant = _portal_tenant()
    return jsonify(documents=[d.serialize() for d in tenant_visible_documents(tenant)])


@bp.get("/portal/documents/<int:document_id>/download")
@tenant_required
def download(document_id):
    tenant = _portal_tenant()
    document = get_or_404(Document, document_id)
    # Hidden documents and other units' documents look the same as missing ones
    if (not document.is_visible_to_tenants
            or document.owner_kind is not OwnerKind.UNIT
            or document.documentable_id != tenant.unit_id):
        abort(404)
    return send_document(document)
