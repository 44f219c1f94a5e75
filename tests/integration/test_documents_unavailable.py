"""
Integration tests for a storefront whose catalog document cannot be loaded.
"""

import json

import pytest

from config import Config
from storefront import create_app


@pytest.fixture
def offline_app(app, tmp_path):
    """Same state database as ``app``, but the catalog document is missing."""
    class OfflineConfig(Config):
        TESTING = True
        SECRET_KEY = 'test-secret'
        ENV = 'testing'
        STATE_BACKEND = 'sql'
        SQLALCHEMY_ECHO = False

    OfflineConfig.SQLALCHEMY_DATABASE_URI = app.config['SQLALCHEMY_DATABASE_URI']
    OfflineConfig.CATALOG_SOURCE = str(tmp_path / 'missing-products.json')
    OfflineConfig.SETTINGS_SOURCE = app.config['SETTINGS_SOURCE']
    return create_app(OfflineConfig)


@pytest.fixture
def offline_client(offline_app):
    return offline_app.test_client()


def test_products_are_empty_and_not_ready(offline_client):
    data = offline_client.get('/products').get_json()

    assert data['ready'] is False
    assert data['products'] == []


def test_cart_uses_default_settings(offline_client):
    data = offline_client.get('/cart').get_json()

    assert data['ready'] is False
    assert data['totals'] == {'subtotal': 0, 'shipping': 30, 'total': 30, 'itemCount': 0}


def test_adding_unknown_product_is_not_found(offline_client):
    response = offline_client.post('/cart/add', json={'productId': 'P1'})
    assert response.status_code == 404


def test_catalog_edits_are_unavailable(offline_client):
    response = offline_client.post('/admin/products', json={
        'id': 'NEW', 'title': 'New', 'price': 10, 'image': 'new.jpg',
    })

    assert response.status_code == 503
    assert response.get_json()['code'] == 'documents_unavailable'

    response = offline_client.post('/admin/products/import', json={'products': []})
    assert response.status_code == 503

    assert offline_client.get('/admin/products').get_json()['products'] == []


def test_cli_import_is_refused(offline_app, tmp_path):
    source = tmp_path / 'import.json'
    source.write_text(json.dumps({'products': [
        {'id': 'CLI-1', 'title': 'Imported', 'price': 99, 'image': 'cli.jpg'},
    ]}), encoding='utf-8')

    result = offline_app.test_cli_runner().invoke(
        args=['import-catalog', '--client', 'cli-offline', str(source)]
    )

    assert result.exit_code == 1


def test_state_health_is_unaffected(offline_client):
    assert offline_client.get('/health/state').get_json()['status'] == 'ok'
