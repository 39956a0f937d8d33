"""
Shared helpers used across blueprints.

Request-body validation, ownership checks and JSON error responses live here
so every route answers errors in the same shape.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, NoReturn, Optional, TypeVar

from flask import abort, current_app, jsonify, make_response, request, session as flask_session
from flask_login import current_user
from pydantic import BaseModel, ValidationError

from auth import login_manager

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def current_user_id() -> int:
    """Return the signed-in user's id (0 for guests and anonymous callers)."""
    if current_user.is_authenticated:
        return current_user.id
    return 0


def login_or_guest(f: Callable) -> Callable:
    """Allow both authenticated users and guest sessions."""
    @wraps(f)
    def decorated(*args: Any, **kwargs: Any) -> Any:
        if current_user.is_authenticated:
            return f(*args, **kwargs)
        if flask_session.get("guest") and current_app.config.get("GUEST_MODE_ENABLED", True):
            return f(*args, **kwargs)
        return login_manager.unauthorized()
    return decorated


def json_abort(status: int, message: str, **extra: Any) -> NoReturn:
    """Stop the request with a JSON ``{"message": ...}`` body."""
    abort(make_response(jsonify({"message": message, **extra}), status))


def parse_body(schema: type[SchemaT], entity: str) -> SchemaT:
    """Validate the JSON request body against ``schema`` or answer 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        json_abort(400, f"Invalid {entity} data", errors=[{"msg": "Request body must be a JSON object"}])
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        json_abort(
            400,
            f"Invalid {entity} data",
            errors=exc.errors(include_url=False, include_context=False, include_input=False),
        )


def check_owner(resource: Optional[Any], entity: str, action: str = "access",
                owner_id: Optional[int] = None) -> Any:
    """404 when ``resource`` is missing, 403 when the caller does not own it."""
    if resource is None:
        json_abort(404, f"{entity} not found")
    uid = current_user_id() if owner_id is None else owner_id
    if resource.user_id != uid:
        json_abort(403, f"Not authorized to {action} this {entity.lower()}")
    return resource
