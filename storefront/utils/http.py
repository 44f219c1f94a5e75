"""Request parsing helpers shared by the JSON blueprints."""
from typing import Any, Dict

from flask import request

from storefront.exceptions import ValidationError


def request_payload() -> Dict[str, Any]:
    """JSON body, or the form fields for plain form posts."""
    if request.is_json:
        payload = request.get_json(silent=True)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise ValidationError('Request body must be a JSON object', code='invalid_payload')
        return payload
    return request.form.to_dict()


def parse_int(value: Any, field: str, default: Any = None) -> int:
    """Integer field from a payload ('2' and 2 are accepted)."""
    if value is None or value == '':
        if default is not None:
            return default
        raise ValidationError(f'{field} is required', code='missing_field', payload={'field': field})
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer', code='invalid_field', payload={'field': field})
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', code='invalid_field', payload={'field': field})
