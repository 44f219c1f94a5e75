"""Promo code validation against the settings promo table."""
from dataclasses import dataclass
from typing import Iterable, Optional
import enum

from storefront.models import Promo


class PromoStatus(str, enum.Enum):
    APPLIED = 'applied'
    NOT_FOUND = 'not_found'
    EMPTY = 'empty'


@dataclass(frozen=True)
class PromoResult:
    status: PromoStatus
    promo: Optional[Promo] = None

    @property
    def applied(self) -> bool:
        return self.status == PromoStatus.APPLIED


def apply_promo_code(code_text: Optional[str], available_codes: Iterable[Promo]) -> PromoResult:
    """
    Look up a typed promo code.

    The input is trimmed and matched case-insensitively. Returns EMPTY when
    nothing was typed and NOT_FOUND when no code matches, so the caller can
    word its message; neither is an error.
    """
    wanted = (code_text or '').strip().casefold()
    if not wanted:
        return PromoResult(PromoStatus.EMPTY)

    for promo in available_codes or ():
        if promo.code.casefold() == wanted:
            return PromoResult(PromoStatus.APPLIED, promo)
    return PromoResult(PromoStatus.NOT_FOUND)
