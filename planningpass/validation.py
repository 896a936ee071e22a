from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import ValidationError

REQUIRED_FIELDS = (
    'homeType',
    'projectType',
    'sketch',
    'address',
    'postcode',
    'name',
    'email',
)


def _is_missing(value: Any) -> bool:
    if isinstance(value, Mapping):
        return len(value) == 0
    if isinstance(value, str):
        return not value.strip()
    return not value


def validate_questionnaire(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError('No data provided')
    for field in REQUIRED_FIELDS:
        if _is_missing(data.get(field)):
            raise ValidationError(f'Missing required field: {field}', field=field)
    return dict(data)


def require_payload(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping) or len(data) == 0:
        raise ValidationError('No data provided')
    return dict(data)
