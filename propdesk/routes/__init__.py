from flask import abort, current_app, jsonify, request, send_file

from ..models import db
from ..storage import get_storage


def request_data():
    """JSON body, falling back to form fields"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def render_result(result, created=False, **extra):
    body = result.to_dict()
    body.update(extra)
    status = 201 if created and result.ok else result.status_code
    return jsonify(body), status


def get_by_slug_or_404(model, slug):
    return model.query.filter_by(slug=slug).first_or_404()


def get_or_404(model, ident):
    return db.get_or_404(model, ident)


def serialize_tenant(tenant):
    return tenant.serialize(warning_days=current_app.config["LEASE_EXPIRY_WARNING_DAYS"])


def serialize_document(document):
    return document.serialize(url=get_storage().get_url(document.path))


def send_document(document):
    storage = get_storage()
    if not storage.exists(document.path):
        current_app.logger.error("Document %s missing from storage at %s", document.id, document.path)
        abort(404)
    return send_file(
        storage.get_path(document.path),
        mimetype=document.type or None,
        as_attachment=True,
        download_name=document.name,
    )
