from functools import wraps
from flask import current_app, g, jsonify
from flask_jwt_extended import get_jwt


def tenant_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        tenant = getattr(g, "current_tenant", None)
        if not tenant:
            return jsonify({"error": "Tenant context missing"}), 400

        claims = get_jwt()
        if claims.get("tenant_id") != tenant["id"]:
            return jsonify({"error": "Tenant mismatch"}), 403

        return current_app.ensure_sync(fn)(*args, **kwargs)
    return wrapper


def roles_required(*allowed_roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims = get_jwt()

            if claims.get("role") not in allowed_roles:
                return jsonify({"error": "Insufficient permissions"}), 403

            return current_app.ensure_sync(fn)(*args, **kwargs)
        return wrapper
    return decorator
