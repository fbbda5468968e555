"""Helpers shared by the Flask controllers."""
from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = "is_admin"


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_endpoint(view):
    """Map domain errors to JSON responses; log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return json_error(str(e), 400)
        except AuthenticationError as e:
            return json_error(str(e), 401)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except InvalidTransitionError as e:
            return json_error(str(e), 409)
        except PersistenceError:
            logger.exception("Storage error in %s", view.__name__)
            return json_error("Storage is unavailable, please try again later", 503)
        except DomainError as e:
            return json_error(str(e), 400)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return json_error("Internal server error", 500)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get(ADMIN_SESSION_KEY):
            return json_error("Admin login required", 401)
        return view(*args, **kwargs)

    return wrapper
