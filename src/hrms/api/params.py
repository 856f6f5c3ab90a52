"""Request parsing helpers shared by the JSON controllers.

Malformed input is reported as ``ValidationError`` so it renders as a 400.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from flask import request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..core.exceptions import ValidationError


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format", field_name) from None


def required_date(value: Optional[str], field_name: str) -> date:
    parsed = optional_date(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required", field_name)
    return parsed


def optional_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp", field_name) from None


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", field_name) from None


def required_int(value: Any, field_name: str) -> int:
    parsed = optional_int(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required", field_name)
    return parsed
