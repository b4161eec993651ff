"""
Response envelope helpers.

Every response body has the shape {success, message?, data?, errors?}.
Views and error handlers build bodies only through these two functions.
"""

from typing import Any, Optional

from flask import jsonify


def success(
    data: Any = None,
    message: Optional[str] = None,
    status: int = 200,
    **extra: Any,
):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def failure(
    message: str,
    status: int,
    errors: Optional[list[str]] = None,
    error: Optional[str] = None,
):
    """A failed response; `error` carries diagnostic detail in debug mode only."""
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if error:
        body["error"] = error
    return jsonify(body), status
