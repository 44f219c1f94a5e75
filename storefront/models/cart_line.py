"""Cart line model - one purchasable unit in the cart."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from storefront.utils.number_format import as_json_number, parse_decimal

LineKey = Tuple[str, Optional[str], Optional[str]]


def _variant(value: Any) -> Optional[str]:
    """Empty variant labels mean 'no variant chosen'."""
    if value is None:
        return None
    label = str(value).strip()
    return label or None


@dataclass
class CartLine:
    """
    Cart line keyed by product and chosen variant.

    ``price`` is the unit price snapshot taken when the line was created;
    it only changes when the admin edits the product.
    """
    product_id: str
    title: str
    price: Decimal
    image: str = ''
    color: Optional[str] = None
    size: Optional[str] = None
    qty: int = 1

    def __post_init__(self):
        self.color = _variant(self.color)
        self.size = _variant(self.size)

    @property
    def key(self) -> LineKey:
        """Merge key: two additions with the same key share one line."""
        return (self.product_id, self.color, self.size)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.qty

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CartLine':
        """
        Rebuild a stored line.

        Accepts the legacy ``id`` key for the product id.

        Raises:
            ValueError: if the product id, price or quantity is unusable.
        """
        product_id = str(data.get('productId') or data.get('id') or '').strip()
        if not product_id:
            raise ValueError('Cart line without product id')
        qty = data.get('qty')
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise ValueError(f'Cart line with invalid qty: {qty!r}')
        return cls(
            product_id=product_id,
            title=str(data.get('title') or ''),
            price=parse_decimal(data.get('price')),
            image=str(data.get('image') or ''),
            color=data.get('color'),
            size=data.get('size'),
            qty=qty,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product_id,
            'title': self.title,
            'price': as_json_number(self.price),
            'image': self.image,
            'color': self.color,
            'size': self.size,
            'qty': self.qty,
        }

    def __repr__(self):
        return f"<CartLine(product_id='{self.product_id}', color={self.color!r}, size={self.size!r}, qty={self.qty})>"
