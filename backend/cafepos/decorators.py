# Overview: Response envelope helpers and the error-mapping decorator for API routes.

from functools import wraps
from flask import current_app, jsonify

from .extensions import db
from .validation import AuthenticationError, ConflictError, NotFoundError, ValidationError


def success(payload: dict | None = None, status: int = 200):
    """{"success": true, ...payload} with the given status."""
    body = {"success": True}
    if payload:
        body.update(payload)
    return jsonify(body), status


def failure(message: str, status: int):
    """{"success": false, "error": message} with the given status."""
    return jsonify({"success": False, "error": message}), status


def api_errors(failure_message: str):
    """
    Map service exceptions to JSON error envelopes.

    - ValidationError     -> 400
    - AuthenticationError -> 401
    - NotFoundError       -> 404
    - ConflictError       -> 409
    - anything else       -> 500 with failure_message; the exception is logged
      and never echoed to the client.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return failure(str(e), 400)
            except AuthenticationError as e:
                return failure(str(e), 401)
            except NotFoundError as e:
                return failure(str(e), 404)
            except ConflictError as e:
                return failure(str(e), 409)
            except Exception:
                db.session.rollback()
                current_app.logger.exception(failure_message)
                return failure(failure_message, 500)

        return decorated_function

    return decorator
