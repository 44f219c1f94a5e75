"""Promo code model."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping
import enum

from storefront.utils.number_format import as_json_number, parse_decimal


class PromoType(str, enum.Enum):
    """Discount kinds. Only PERCENT is applied to totals."""
    PERCENT = 'percent'


@dataclass(frozen=True)
class Promo:
    """Discount code supplied by the settings document."""
    code: str
    type: str
    value: Decimal

    @property
    def is_percent(self) -> bool:
        return self.type == PromoType.PERCENT.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Promo':
        """
        Raises:
            ValueError: if the code is empty or the value is not a 0-100 number.
        """
        code = str(data.get('code') or '').strip()
        if not code:
            raise ValueError('Promo without code')
        value = parse_decimal(data.get('value'))
        if value < 0 or value > 100:
            raise ValueError(f'Promo {code} value out of range: {value}')
        return cls(
            code=code,
            type=str(data.get('type') or '').strip().lower(),
            value=value,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'type': self.type, 'value': as_json_number(self.value)}
