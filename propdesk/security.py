# propdesk/security.py
import re
from functools import wraps

from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from .models import db, User, ROLE_MANAGER, ROLE_TENANT


def validate_password(password: str) -> tuple[bool, str]:
    """Validate password strength"""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if not re.search(r'[A-Z]', password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r'[a-z]', password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r'\d', password):
        return False, "Password must contain at least one number"
    return True, "Password is valid"


def current_user():
    """The User behind the request's access token, or None"""
    identity = get_jwt_identity()
    if identity is None:
        return None
    return db.session.get(User, int(identity))


def roles_required(*allowed, verified=False):
    """Usage: @roles_required("manager")"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            if claims.get("role") not in allowed:
                return jsonify({"error": "forbidden", "message": "Insufficient permissions"}), 403
            if verified and not claims.get("verified"):
                return jsonify({"error": "forbidden", "message": "Account is not verified"}), 403
            user = current_user()
            if user is None or not user.is_active:
                return jsonify({"error": "unauthorized", "message": "Account is disabled"}), 401
            return fn(*args, **kwargs)
        return wrapper
    return deco


def manager_required(fn):
    return roles_required(ROLE_MANAGER, verified=True)(fn)


def tenant_required(fn):
    return roles_required(ROLE_TENANT)(fn)
