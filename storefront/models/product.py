"""Product model."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from storefront.utils.number_format import as_json_number, parse_decimal_or


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _option_labels(values: Any) -> List[str]:
    """Ordered, de-duplicated option labels (colors, sizes)."""
    if not isinstance(values, (list, tuple)):
        return []
    labels = []
    for value in values:
        label = _text(value)
        if label and label not in labels:
            labels.append(label)
    return labels


def _optional_number(value: Any) -> Optional[Decimal]:
    return parse_decimal_or(value, None)


def _optional_int(value: Any) -> Optional[int]:
    number = parse_decimal_or(value, None)
    return int(number) if number is not None else None


@dataclass
class Product:
    """
    Catalog entity.

    ``id`` is the admin-chosen primary key. Display metadata (rating,
    review and sold counts) is optional and never validated.
    """
    id: str
    title: str
    price: Decimal
    image: str = ''
    brand: str = ''
    category: str = ''
    currency: str = 'MAD'
    colors: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    rating: Optional[Decimal] = None
    review_count: Optional[int] = None
    sold_count: Optional[int] = None

    def __post_init__(self):
        self.colors = _option_labels(self.colors)
        self.sizes = _option_labels(self.sizes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_currency: str = 'MAD') -> 'Product':
        """
        Build a product from a catalog document entry.

        Lenient: unparseable prices become 0 so a bad document entry still
        shows up for the admin to fix. Validation lives in the catalog store.
        """
        return cls(
            id=_text(data.get('id')),
            title=_text(data.get('title')),
            price=parse_decimal_or(data.get('price'), Decimal('0')),
            image=_text(data.get('image')),
            brand=_text(data.get('brand')),
            category=_text(data.get('category')),
            currency=_text(data.get('currency')) or default_currency,
            colors=data.get('colors') or [],
            sizes=data.get('sizes') or [],
            rating=_optional_number(data.get('rating')),
            review_count=_optional_int(data.get('reviewCount')),
            sold_count=_optional_int(data.get('soldCount')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the catalog document shape."""
        data = {
            'id': self.id,
            'title': self.title,
            'brand': self.brand,
            'category': self.category,
            'price': as_json_number(self.price),
            'currency': self.currency,
            'image': self.image,
            'colors': list(self.colors),
            'sizes': list(self.sizes),
        }
        if self.rating is not None:
            data['rating'] = as_json_number(self.rating)
        if self.review_count is not None:
            data['reviewCount'] = self.review_count
        if self.sold_count is not None:
            data['soldCount'] = self.sold_count
        return data

    def __repr__(self):
        return f"<Product(id='{self.id}', title='{self.title}', price={self.price})>"
