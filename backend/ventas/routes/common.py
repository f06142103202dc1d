# Overview: Shared helpers for route modules; error translation and degraded list responses.

from flask import current_app, jsonify, request

from ..extensions import db
from ..validation import ConflictError, NotFoundError, ValidationError


def error_response(exc: ValueError):
    """
    Translate a domain error into a JSON response.

    NotFoundError -> 404, ConflictError -> 409, anything else -> 400.
    Errors carrying details (SaleError) include them.
    """
    body = {"error": str(exc)}
    details = getattr(exc, "details", None)
    if details:
        body["details"] = details

    if isinstance(exc, NotFoundError):
        return jsonify(body), 404
    if isinstance(exc, ConflictError):
        return jsonify(body), 409
    return jsonify(body), 400


def degraded(key: str, fallback):
    """
    Response for a screen whose data could not be loaded.

    The screen still renders with an empty list or default stats.
    """
    current_app.logger.exception("Failed to load %s for %s", key, request.path)
    db.session.rollback()
    return jsonify({key: fallback, "degraded": True}), 200


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data
