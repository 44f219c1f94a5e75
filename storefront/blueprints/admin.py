"""Admin blueprint - catalog editing, export and import (JSON endpoints)."""
import json
import logging
from datetime import date

from flask import Blueprint, g, jsonify, request, Response

from storefront.exceptions import ValidationError
from storefront.services.filter_service import filter_admin
from storefront.services.shop_session import get_shop_session, remember_edit_session
from storefront.utils.http import request_payload

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/admin/products')


@admin_bp.after_request
def keep_edit_session(response: Response) -> Response:
    """Persist the edit session in the client cookie after every admin call."""
    shop = g.get('shop_session')
    if shop is not None:
        remember_edit_session(shop)
    return response


@admin_bp.route('', methods=['GET'])
def search_products() -> Response:
    """Admin list; ?q= searches titles, or ids with ?mode=id."""
    shop = get_shop_session()
    products = filter_admin(shop.catalog.products, request.args.get('q', ''), request.args.get('mode', 'name'))
    return jsonify({
        'status': 'ok',
        'editing': shop.catalog.editing_id,
        'products': [p.to_dict() for p in products],
    })


@admin_bp.route('', methods=['POST'])
def create_product() -> Response:
    shop = get_shop_session()
    product = shop.catalog.create(request_payload())
    return jsonify({'status': 'ok', 'product': product.to_dict()}), 201


@admin_bp.route('/<product_id>', methods=['PUT', 'PATCH'])
def update_product(product_id: str) -> Response:
    """Edit a product; a new 'id' in the body renames it everywhere."""
    shop = get_shop_session()
    product = shop.catalog.update(product_id, request_payload())
    return jsonify({'status': 'ok', 'product': product.to_dict()})


@admin_bp.route('/<product_id>', methods=['DELETE'])
def delete_product(product_id: str) -> Response:
    shop = get_shop_session()
    deleted = shop.catalog.delete(product_id)
    return jsonify({'status': 'ok', 'deleted': deleted})


@admin_bp.route('/<product_id>/edit', methods=['POST'])
def begin_edit(product_id: str) -> Response:
    shop = get_shop_session()
    product = shop.catalog.begin_edit(product_id)
    return jsonify({'status': 'ok', 'editing': product.id, 'product': product.to_dict()})


@admin_bp.route('/edit', methods=['DELETE'])
def cancel_edit() -> Response:
    shop = get_shop_session()
    shop.catalog.cancel_edit()
    return jsonify({'status': 'ok', 'editing': None})


@admin_bp.route('/export', methods=['GET'])
def export_catalog() -> Response:
    """Download the catalog as a products document."""
    shop = get_shop_session()
    body = json.dumps({'products': shop.catalog.export_snapshot()}, ensure_ascii=False, indent=2)
    filename = f"products-{date.today().isoformat()}.json"
    return Response(
        body,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@admin_bp.route('/import', methods=['POST'])
def import_catalog() -> Response:
    """Append the products of an uploaded {products: [...]} document."""
    shop = get_shop_session()

    upload = request.files.get('file')
    if upload is not None:
        try:
            document = json.load(upload.stream)
        except ValueError:
            raise ValidationError('Uploaded file is not valid JSON', code='invalid_document')
    else:
        document = request_payload()

    products = document.get('products') if isinstance(document, dict) else None
    if not isinstance(products, list):
        raise ValidationError('Document must contain a products list', code='invalid_document')

    count = shop.catalog.bulk_import(products)
    logger.info(f"[ADMIN] Client {shop.client_id} imported {count} products")
    return jsonify({'status': 'ok', 'imported': count, 'total': len(shop.catalog)})
