from __future__ import annotations

from ..core.constants import GLOBAL_SCOPE_KEY
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_non_negative_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_coordinate(value, field_name: str, limit: float) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not -limit <= number <= limit:
        raise ValidationError(f"{field_name} out of range [-{limit:g}, {limit:g}]")
    return number


def require_role(current_role: Role, *allowed: Role) -> None:
    if current_role not in allowed:
        raise AuthorizationError("You do not have permission for this action")


def require_team_name(value: str, field_name: str = "Team") -> str:
    name = require_non_empty(value, field_name)
    if name == GLOBAL_SCOPE_KEY:
        raise ValidationError(f"{GLOBAL_SCOPE_KEY!r} is reserved and cannot be used as a team name")
    return name
