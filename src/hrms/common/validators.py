from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Type, Union

from ..core.exceptions import ValidationError

_CENT = Decimal("0.01")


def require_non_empty(
    value: Optional[str],
    field_name: str,
    *,
    error: Type[ValidationError] = ValidationError,
    message: Optional[str] = None,
) -> str:
    """Return ``value`` stripped; blank or non-string values are rejected."""
    if not isinstance(value, str) or not value.strip():
        raise error(message or f"{field_name} is required", field_name)
    return value.strip()


def require_max_length(
    value: Optional[str],
    field_name: str,
    max_len: int,
    *,
    error: Type[ValidationError] = ValidationError,
) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise error(f"{field_name} must be text", field_name)
    if len(value) > max_len:
        raise error(f"{field_name} cannot exceed {max_len} characters", field_name)
    return value


def round2(value: Union[int, float, Decimal]) -> Decimal:
    """Round half-up to 2 decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)
