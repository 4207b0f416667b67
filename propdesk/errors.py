# propdesk/errors.py
from flask import jsonify, request


class ValidationError(Exception):
    """Field-level input errors; the request is answered with the input echoed back."""

    def __init__(self, errors, data=None):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors
        self.data = data or {}

    def to_dict(self):
        return {
            "error": "validation_error",
            "errors": self.errors,
            "input": {k: v for k, v in self.data.items() if "password" not in k},
        }


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def _validation_error(e):
        return jsonify(e.to_dict()), 422

    @app.errorhandler(400)
    def _bad_request(e):
        msg = getattr(e, "description", "Bad Request")
        return jsonify({"error": "Bad Request", "message": msg}), 400

    @app.errorhandler(401)
    def _unauthorized(e):
        return jsonify({"error": "unauthorized"}), 401

    @app.errorhandler(403)
    def _forbidden(e):
        return jsonify({"error": "forbidden"}), 403

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "Not Found", "path": request.path}), 404

    @app.errorhandler(413)
    def _too_large(e):
        limit_mb = app.config["MAX_UPLOAD_BYTES"] // (1024 * 1024)
        return jsonify({
            "error": "payload_too_large",
            "message": f"Uploads are limited to {limit_mb} MB",
        }), 413

    @app.errorhandler(500)
    def _server_error(e):
        app.logger.exception("Unhandled exception: %s", e)
        return jsonify({"error": "Internal Server Error"}), 500
