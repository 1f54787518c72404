"""JSON envelope shared by every API controller.

Success bodies are plain objects; failures are always {"error": "..."}.
"""
from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (UpstreamError, 502),
)


def status_for(exc: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def json_endpoint(view):
    """Turn domain errors into the JSON error envelope; log anything unexpected as 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            status = status_for(e)
            if status >= 500:
                logger.warning("%s %s -> %s: %s", request.method, request.path, status, e)
            return error_response(str(e), status)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return error_response("Internal server error", 500)

    return wrapper


def json_body(*, allow_list: bool = False):
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be JSON")
    if isinstance(data, list) and allow_list:
        return data
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
