# propdesk/routes/auth.py
from datetime import datetime, timedelta

from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import create_access_token, jwt_required

from ..models import db, User
from ..security import current_user, validate_password
from . import request_data

bp = Blueprint("auth", __name__)


@bp.post("/auth/login")
def login():
    data = request_data()
    email = str(data.get("email") or "").strip().lower()
    password = str(data.get("password") or "")

    if not email or not password:
        return jsonify({"error": "Bad Request", "message": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        current_app.logger.info("Failed login for %s", email)
        return jsonify({"error": "unauthorized", "message": "Invalid credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "forbidden", "message": "Account is disabled"}), 403

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims=user.jwt_claims(),
        expires_delta=timedelta(hours=8),
    )
    user.last_login = datetime.utcnow()
    db.session.commit()

    current_app.logger.info("User %s logged in as %s", user.id, user.role)
    return jsonify(
        access_token=access_token,
        user=user.serialize(),
        must_change_password=user.must_change_password,
    )


@bp.post("/auth/password")
@jwt_required()
def change_password():
    data = request_data()
    current_password = str(data.get("current_password") or "")
    new_password = str(data.get("new_password") or "")

    if not current_password or not new_password:
        return jsonify({"error": "Bad Request", "message": "Current and new passwords are required"}), 400

    is_valid, msg = validate_password(new_password)
    if not is_valid:
        return jsonify({"error": "validation_error", "errors": {"new_password": msg}, "input": {}}), 422

    user = current_user()
    if user is None or not user.check_password(current_password):
        return jsonify({"error": "unauthorized", "message": "Current password is incorrect"}), 401

    user.set_password(new_password)
    user.must_change_password = False
    db.session.commit()
    current_app.logger.info("User %s changed password", user.id)
    return jsonify({"ok": True, "message": "Password updated successfully."})


@bp.get("/auth/me")
@jwt_required()
def me():
    user = current_user()
    if user is None:
        return jsonify({"error": "unauthorized"}), 401
    return jsonify(user=user.serialize())
