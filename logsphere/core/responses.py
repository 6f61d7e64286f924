"""Helpers for building JSON API responses."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from .types import APIResponse


def api_response(data: Any = None, message: str = "", status: int = 200) -> Any:
    """Wrap a payload in the standard success envelope."""
    body: APIResponse = {"success": True, "message": message, "data": data}
    return jsonify(body), status


def api_error(message: str, status: int) -> Any:
    """Wrap an error message in the standard failure envelope."""
    body: APIResponse = {"success": False, "message": message, "data": None}
    return jsonify(body), status
