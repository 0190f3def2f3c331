from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.enums import APPROVER_ROLES, Role
from ..core.exceptions import AuthorizationError, ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    text = optional_text(value, field_name)
    if text is None:
        raise ValidationError(f"{field_name} is required")
    return text


def optional_text(value: Optional[str], field_name: str = "value") -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip() or None


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_approver(role: Role) -> None:
    if role not in APPROVER_ROLES:
        raise AuthorizationError("Only managers or admins can approve requests")


def require_admin(role: Role) -> None:
    if role != Role.ADMIN:
        raise AuthorizationError("Only admins can perform this action")
