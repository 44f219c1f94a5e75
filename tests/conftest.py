import copy
import json
import uuid

import pytest

from config import Config
from storefront import create_app
from storefront.models import ShopSettings
from storefront.services.document_service import StorefrontDocuments
from storefront.services.shop_session import ShopSession
from storefront.services.state_store import ClientState, get_state_store


CATALOG_DOCUMENT = {
    'products': [
        {
            'id': 'P1',
            'title': 'Shadow Hoodie',
            'brand': 'ShadowWear',
            'category': 'Hoodies',
            'price': 200,
            'currency': 'MAD',
            'image': 'https://cdn.example.com/p1.jpg',
            'colors': ['Black', 'Grey'],
            'sizes': ['M', 'L'],
            'rating': 4.5,
            'reviewCount': 12,
            'soldCount': 40,
        },
        {
            'id': 'P2',
            'title': 'Night Cap',
            'brand': 'Nocturne',
            'category': 'Accessories',
            'price': 79.9,
            'image': 'https://cdn.example.com/p2.jpg',
        },
        {
            'id': 'TEE-01',
            'title': 'Basic Tee',
            'brand': 'ShadowWear',
            'category': 'T-Shirts',
            'price': 120,
            'image': 'https://cdn.example.com/tee.jpg',
            'sizes': ['S', 'M'],
        },
    ]
}

SETTINGS_DOCUMENT = {
    'shippingFlatMAD': 30,
    'freeShippingThresholdMAD': 500,
    'promoCodes': [
        {'code': 'SAVE10', 'type': 'percent', 'value': 10},
        {'code': 'HALF', 'type': 'percent', 'value': 50},
    ],
    'ownerPhoneE164': '212600000000',
    'currency': 'MAD',
}


@pytest.fixture(scope='session')
def documents_dir(tmp_path_factory):
    """Catalog and settings documents on disk."""
    directory = tmp_path_factory.mktemp('documents')
    (directory / 'products.json').write_text(json.dumps(CATALOG_DOCUMENT), encoding='utf-8')
    (directory / 'settings.json').write_text(json.dumps(SETTINGS_DOCUMENT), encoding='utf-8')
    return directory


@pytest.fixture(scope='session')
def app(tmp_path_factory, documents_dir):
    """Create application instance for testing."""
    db_path = tmp_path_factory.mktemp('state') / 'state.db'

    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = 'test-secret'
        ENV = 'testing'
        STATE_BACKEND = 'sql'
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'
        SQLALCHEMY_ECHO = False
        CATALOG_SOURCE = str(documents_dir / 'products.json')
        SETTINGS_SOURCE = str(documents_dir / 'settings.json')

    return create_app(TestConfig)


@pytest.fixture(scope='function')
def client(app):
    """Create test client (a fresh cookie jar, so a fresh storefront client)."""
    return app.test_client()


@pytest.fixture(scope='function')
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def documents():
    return StorefrontDocuments(
        products=copy.deepcopy(CATALOG_DOCUMENT['products']),
        settings=copy.deepcopy(SETTINGS_DOCUMENT),
    )


@pytest.fixture(scope='function')
def client_id():
    return f'test-{uuid.uuid4().hex[:12]}'


@pytest.fixture(scope='function')
def client_state(app_context, client_id):
    """Durable state bound to a unique client id."""
    return ClientState(get_state_store(), client_id)


@pytest.fixture(scope='function')
def shop(app_context, client_id, documents):
    """Loaded shop session for a unique client."""
    return ShopSession(get_state_store(), client_id, ShopSettings()).load(documents)


@pytest.fixture(scope='function')
def reopen(app_context, documents):
    """Build a second session for the same client, as a new page load would."""
    def _reopen(shop):
        return ShopSession(get_state_store(), shop.client_id, ShopSettings()).load(documents)
    return _reopen
