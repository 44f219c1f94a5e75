"""Cart blueprint - line items, promo code and totals (JSON endpoints)."""
from typing import Optional
import logging

from flask import Blueprint, jsonify, Response

from storefront.services.promo_service import PromoStatus
from storefront.services.shop_session import ShopSession, get_shop_session
from storefront.utils.formatters import format_money
from storefront.utils.http import request_payload, parse_int
from storefront.utils.number_format import as_json_number

logger = logging.getLogger(__name__)

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')

PROMO_MESSAGES = {
    PromoStatus.APPLIED: 'Promo applied: {code}',
    PromoStatus.NOT_FOUND: 'Invalid promo',
    PromoStatus.EMPTY: 'Enter a promo code',
}


def cart_state(shop: ShopSession, message: Optional[str] = None, **extra) -> Response:
    """Lines, promo and freshly computed totals for the caller to render."""
    totals = shop.totals()
    currency = shop.settings.currency
    lines = []
    for index, line in enumerate(shop.cart.lines):
        data = line.to_dict()
        data['index'] = index
        data['lineTotal'] = as_json_number(line.line_total)
        lines.append(data)

    return jsonify({
        'status': 'ok',
        'ready': shop.ready,
        'lines': lines,
        'promo': shop.cart.promo.to_dict() if shop.cart.promo else None,
        'totals': totals.to_dict(),
        'display': {
            'subtotal': format_money(totals.subtotal, currency),
            'shipping': format_money(totals.shipping, currency),
            'total': format_money(totals.total, currency),
        },
        'message': message,
        **extra,
    })


@cart_bp.route('', methods=['GET'])
def view_cart() -> Response:
    return cart_state(get_shop_session())


@cart_bp.route('/add', methods=['POST'])
def add_to_cart() -> Response:
    """Add a product variant; repeated adds of the same variant merge."""
    shop = get_shop_session()
    payload = request_payload()

    product = shop.catalog.require(payload.get('productId') or payload.get('id'))
    qty = parse_int(payload.get('qty'), 'qty', default=1)
    shop.cart.add_line(product, qty=qty, color=payload.get('color'), size=payload.get('size'))

    return cart_state(shop, 'Added to cart')


@cart_bp.route('/qty', methods=['POST'])
def change_quantity() -> Response:
    shop = get_shop_session()
    payload = request_payload()

    index = parse_int(payload.get('index'), 'index')
    delta = parse_int(payload.get('delta'), 'delta')
    shop.cart.change_qty(index, delta)

    return cart_state(shop)


@cart_bp.route('/remove', methods=['POST'])
def remove_from_cart() -> Response:
    shop = get_shop_session()
    payload = request_payload()

    shop.cart.remove_line(parse_int(payload.get('index'), 'index'))
    return cart_state(shop)


@cart_bp.route('/clear', methods=['POST'])
def clear_cart() -> Response:
    shop = get_shop_session()
    shop.cart.clear()
    return cart_state(shop)


@cart_bp.route('/promo', methods=['POST'])
def apply_promo() -> Response:
    """Apply a typed promo code; an unknown code clears the active promo."""
    shop = get_shop_session()
    payload = request_payload()

    result = shop.cart.apply_promo(payload.get('code'), shop.settings)
    message = PROMO_MESSAGES[result.status].format(code=result.promo.code if result.promo else '')
    if result.status == PromoStatus.NOT_FOUND:
        logger.info(f"[CART] Rejected promo code for client {shop.client_id}")

    return cart_state(shop, message, promoStatus=result.status.value)
