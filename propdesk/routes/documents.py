from flask import Blueprint, abort, send_file

from ..models import Document
from ..security import manager_required
from ..services.documents import toggle_visibility, delete_document
from ..storage import get_storage
from . import render_result, get_or_404, send_document

bp = Blueprint("documents", __name__)

# Stored files, served at STORAGE_URL_PREFIX
media_bp = Blueprint("media", __name__)


@bp.post("/documents/<int:document_id>/visibility")
@manager_required
def visibility(document_id):
    document = get_or_404(Document, document_id)
    return render_result(toggle_visibility(document))


@bp.get("/documents/<int:document_id>/download")
@manager_required
def download(document_id):
    return send_document(get_or_404(Document, document_id))


@bp.delete("/documents/<int:document_id>")
@manager_required
def remove(document_id):
    return render_result(delete_document(get_or_404(Document, document_id)))


@media_bp.get("/<path:filepath>")
@manager_required
def media(filepath):
    storage = get_storage()
    if not storage.exists(filepath):
        abort(404)
    return send_file(storage.get_path(filepath))
