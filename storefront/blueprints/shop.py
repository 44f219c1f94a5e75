"""Storefront blueprint - product grid, wishlist and theme preference."""
from flask import Blueprint, jsonify, request, Response

from storefront.services.shop_session import get_shop_session
from storefront.utils.http import request_payload

shop_bp = Blueprint('shop', __name__)


@shop_bp.route('/products', methods=['GET'])
def list_products() -> Response:
    """Products filtered by ?category= (default 'all') and ?q= search term."""
    shop = get_shop_session()
    products = shop.visible_products(
        request.args.get('category', 'all'),
        request.args.get('q', ''),
    )
    wishlist = shop.wishlist
    return jsonify({
        'status': 'ok',
        'ready': shop.ready,
        'products': [dict(p.to_dict(), wishlisted=p.id in wishlist) for p in products],
    })


@shop_bp.route('/products/<product_id>', methods=['GET'])
def product_detail(product_id: str) -> Response:
    shop = get_shop_session()
    product = shop.catalog.require(product_id)
    return jsonify({
        'status': 'ok',
        'product': dict(product.to_dict(), wishlisted=product.id in shop.wishlist),
    })


@shop_bp.route('/wishlist', methods=['GET'])
def view_wishlist() -> Response:
    shop = get_shop_session()
    ids = shop.wishlist.ids
    return jsonify({
        'status': 'ok',
        'ids': ids,
        'products': [p.to_dict() for p in shop.catalog.products if p.id in ids],
    })


@shop_bp.route('/wishlist/toggle', methods=['POST'])
def toggle_wishlist() -> Response:
    shop = get_shop_session()
    payload = request_payload()
    product = shop.catalog.require(payload.get('productId') or payload.get('id'))
    member = shop.wishlist.toggle(product.id)
    return jsonify({'status': 'ok', 'id': product.id, 'wishlisted': member, 'count': len(shop.wishlist)})


@shop_bp.route('/preferences/theme', methods=['GET'])
def get_theme() -> Response:
    return jsonify({'status': 'ok', 'theme': get_shop_session().theme.load()})


@shop_bp.route('/preferences/theme/toggle', methods=['POST'])
def toggle_theme() -> Response:
    return jsonify({'status': 'ok', 'theme': get_shop_session().theme.toggle()})
