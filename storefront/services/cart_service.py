"""Cart engine - line items, promo and totals for one client (persisted)."""

from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Tuple
import logging

from storefront.services.metrics_service import cart_mutations_total, promo_attempts_total
from storefront.exceptions import CartIndexError, ValidationError
from storefront.models import CartLine, Product, Promo, ShopSettings, Totals
from storefront.services.events import product_updated, product_deleted, catalog_reset
from storefront.services.promo_service import PromoResult, PromoStatus, apply_promo_code
from storefront.services.state_store import ClientState, STORAGE_KEYS
from storefront.utils.number_format import quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def compute_totals(lines: Iterable[CartLine], settings: Optional[ShopSettings] = None, promo: Optional[Promo] = None) -> Totals:
    """
    Subtotal, shipping and total for a set of lines.

    Shipping is free once the subtotal reaches the threshold. A percent
    promo scales subtotal plus shipping. Pure: reads the lines only.
    """
    settings = settings or ShopSettings()
    lines = list(lines)

    subtotal = sum((line.price * line.qty for line in lines), ZERO)
    shipping = ZERO if subtotal >= settings.free_shipping_threshold else settings.shipping_flat
    total = subtotal + shipping
    if promo is not None and promo.is_percent:
        total = total * (1 - promo.value / Decimal('100'))

    return Totals(
        subtotal=quantize_money(subtotal),
        shipping=quantize_money(shipping),
        total=quantize_money(total),
        item_count=sum(line.qty for line in lines),
    )


def _merge_duplicates(lines: List[CartLine]) -> List[CartLine]:
    """Collapse lines sharing a merge key, keeping the first position."""
    merged: List[CartLine] = []
    by_key = {}
    for line in lines:
        existing = by_key.get(line.key)
        if existing:
            existing.qty += line.qty
        else:
            by_key[line.key] = line
            merged.append(line)
    return merged


class CartEngine:
    """
    Owns the cart lines and the active promo.

    Every mutation persists ``{cart, promo}`` under the cart key. A failed
    write is logged by the state store and the in-memory cart stays as is.
    """

    def __init__(self, state: Optional[ClientState] = None):
        self._state = state
        self._lines: List[CartLine] = []
        self.promo: Optional[Promo] = None

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def item_count(self) -> int:
        return sum(line.qty for line in self._lines)

    def __len__(self):
        return len(self._lines)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Restore lines and promo; malformed entries are dropped."""
        if self._state is None:
            return
        stored = self._state.load(STORAGE_KEYS['cart'], {})

        lines = []
        raw_lines = stored.get('cart')
        for entry in raw_lines if isinstance(raw_lines, list) else []:
            if not isinstance(entry, Mapping):
                logger.warning(f"[CART] Dropping stored line that is not an object: {entry!r}")
                continue
            try:
                lines.append(CartLine.from_dict(entry))
            except ValueError as e:
                logger.warning(f"[CART] Dropping stored line: {e}")
        self._lines = _merge_duplicates(lines)

        self.promo = None
        raw_promo = stored.get('promo')
        if isinstance(raw_promo, Mapping):
            try:
                self.promo = Promo.from_dict(raw_promo)
            except ValueError as e:
                logger.warning(f"[CART] Dropping stored promo: {e}")

    def to_snapshot(self) -> dict:
        return {
            'cart': [line.to_dict() for line in self._lines],
            'promo': self.promo.to_dict() if self.promo else None,
        }

    def _persist(self) -> bool:
        if self._state is None:
            return False
        return self._state.save(STORAGE_KEYS['cart'], self.to_snapshot())

    def _line_at(self, line_index: Any) -> CartLine:
        if isinstance(line_index, bool) or not isinstance(line_index, int) \
                or not 0 <= line_index < len(self._lines):
            raise CartIndexError(line_index, len(self._lines))
        return self._lines[line_index]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_line(self, product: Product, qty: int = 1, color: Optional[str] = None, size: Optional[str] = None) -> int:
        """
        Add ``qty`` units of a product variant.

        Merges into the line with the same (product id, color, size) key,
        otherwise appends a new line with a price snapshot of the product.
        Returns how many lines the cart now holds for this product.
        """
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError(f'Quantity must be a positive integer, got {qty!r}', code='invalid_qty')

        candidate = CartLine(
            product_id=product.id,
            title=product.title,
            price=product.price,
            image=product.image,
            color=color,
            size=size,
            qty=qty,
        )
        existing = next((line for line in self._lines if line.key == candidate.key), None)
        if existing:
            existing.qty += qty
        else:
            self._lines.append(candidate)

        cart_mutations_total.labels(operation='add').inc()
        self._persist()
        return sum(1 for line in self._lines if line.product_id == product.id)

    def change_qty(self, line_index: int, delta: int) -> Optional[CartLine]:
        """
        Add ``delta`` to a line's quantity.

        A result of zero or less removes the line; returns the line, or None
        when it was removed.
        """
        line = self._line_at(line_index)
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(f'Quantity change must be an integer, got {delta!r}', code='invalid_qty')

        new_qty = line.qty + delta
        if new_qty <= 0:
            del self._lines[line_index]
            line = None
        else:
            line.qty = new_qty

        cart_mutations_total.labels(operation='change_qty').inc()
        self._persist()
        return line

    def remove_line(self, line_index: int) -> CartLine:
        line = self._line_at(line_index)
        del self._lines[line_index]
        cart_mutations_total.labels(operation='remove').inc()
        self._persist()
        return line

    def clear(self) -> None:
        self._lines = []
        cart_mutations_total.labels(operation='clear').inc()
        self._persist()

    def apply_promo(self, code_text: Optional[str], settings: Optional[ShopSettings] = None) -> PromoResult:
        """
        Validate a typed code and store the outcome.

        A match becomes the active promo, an unknown code clears it, and an
        empty entry leaves everything untouched.
        """
        settings = settings or ShopSettings()
        result = apply_promo_code(code_text, settings.promo_codes)
        promo_attempts_total.labels(outcome=result.status.value).inc()
        if result.status == PromoStatus.EMPTY:
            return result

        self.promo = result.promo
        self._persist()
        return result

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def compute_totals(self, settings: Optional[ShopSettings] = None, promo: Optional[Promo] = None) -> Totals:
        return compute_totals(self._lines, settings, promo)

    def totals(self, settings: Optional[ShopSettings] = None) -> Totals:
        """Totals with the active promo."""
        return compute_totals(self._lines, settings, self.promo)

    # ------------------------------------------------------------------
    # Catalog subscriptions
    # ------------------------------------------------------------------

    def connect_catalog(self, catalog: Any) -> None:
        product_updated.connect(self._on_product_updated, sender=catalog)
        product_deleted.connect(self._on_product_deleted, sender=catalog)
        catalog_reset.connect(self._on_catalog_reset, sender=catalog)

    def _on_product_updated(self, sender, old_id: str, product: Product) -> None:
        """Rekey lines to the product's id and refresh their display fields."""
        touched = False
        for line in self._lines:
            if line.product_id == old_id:
                line.product_id = product.id
                line.title = product.title
                line.price = product.price
                line.image = product.image
                touched = True
        if touched:
            self._lines = _merge_duplicates(self._lines)
            self._persist()

    def _on_product_deleted(self, sender, product_id: str) -> None:
        remaining = [line for line in self._lines if line.product_id != product_id]
        if len(remaining) != len(self._lines):
            self._lines = remaining
            self._persist()

    def _on_catalog_reset(self, sender) -> None:
        self.clear()
