from functools import wraps

from flask import current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from app.utils.auth import current_identity


def role_required(*roles):
    """
    Require a valid JWT whose `role` claim is one of `roles`.
    A token without a role claim counts as a Reader.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            identity = current_identity()
            if identity.role not in roles:
                current_app.logger.warning(
                    f"[Auth] {identity.reader_id} ({identity.role}) denied {request.method} {request.path}"
                )
                return jsonify({
                    "success": False,
                    "message": f"Forbidden: requires role {' or '.join(roles)}",
                }), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator
