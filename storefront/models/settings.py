"""Shop settings parsed from the settings document."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Mapping, Optional
import logging

from storefront.models.promo import Promo
from storefront.utils.number_format import parse_decimal_or

logger = logging.getLogger(__name__)

DEFAULT_SHIPPING_FLAT = Decimal('30')
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal('500')
DEFAULT_CURRENCY = 'MAD'


@dataclass
class ShopSettings:
    """Shipping rules, promo table and owner contact for one storefront."""
    shipping_flat: Decimal = DEFAULT_SHIPPING_FLAT
    free_shipping_threshold: Decimal = DEFAULT_FREE_SHIPPING_THRESHOLD
    promo_codes: List[Promo] = field(default_factory=list)
    owner_phone: Optional[str] = None
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_document(cls, data: Optional[Mapping[str, Any]], defaults: Optional['ShopSettings'] = None) -> 'ShopSettings':
        """
        Parse a settings document; every field is optional.

        Missing or malformed fields take the value from ``defaults``
        (or the built-in defaults). Malformed promo entries are skipped.
        """
        base = defaults or cls()
        if not isinstance(data, Mapping):
            return cls(
                shipping_flat=base.shipping_flat,
                free_shipping_threshold=base.free_shipping_threshold,
                promo_codes=list(base.promo_codes),
                owner_phone=base.owner_phone,
                currency=base.currency,
            )

        promos = []
        raw_promos = data.get('promoCodes')
        for entry in raw_promos if isinstance(raw_promos, list) else []:
            if not isinstance(entry, Mapping):
                logger.warning(f"[SETTINGS] Skipping promo entry that is not an object: {entry!r}")
                continue
            try:
                promos.append(Promo.from_dict(entry))
            except ValueError as e:
                logger.warning(f"[SETTINGS] Skipping invalid promo entry: {e}")

        return cls(
            shipping_flat=parse_decimal_or(data.get('shippingFlatMAD'), base.shipping_flat),
            free_shipping_threshold=parse_decimal_or(
                data.get('freeShippingThresholdMAD'), base.free_shipping_threshold
            ),
            promo_codes=promos,
            owner_phone=str(data.get('ownerPhoneE164') or '').strip() or base.owner_phone,
            currency=str(data.get('currency') or '').strip() or base.currency,
        )
