"""Derived cart totals (never stored)."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from storefront.utils.number_format import as_json_number


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    item_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subtotal': as_json_number(self.subtotal),
            'shipping': as_json_number(self.shipping),
            'total': as_json_number(self.total),
            'itemCount': self.item_count,
        }
