"""Initial load of the catalog and settings documents."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import logging

import requests
from flask import Flask, current_app

from storefront.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)


@dataclass
class StorefrontDocuments:
    """Both documents, available only once both have resolved."""
    products: List[Any] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)


def fetch_json(source: str, timeout: float = 10) -> Any:
    """
    Read a JSON document from an http(s) URL or a file path.

    Raises:
        DocumentLoadError: on any transport or parse failure.
    """
    try:
        if source.startswith(('http://', 'https://')):
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            return response.json()
        with open(source, encoding='utf-8') as fh:
            return json.load(fh)
    except (requests.RequestException, OSError, ValueError) as e:
        raise DocumentLoadError(f'Could not load {source}: {e}')


def load_documents(catalog_source: str, settings_source: str, timeout: float = 10) -> StorefrontDocuments:
    """
    Fetch both documents concurrently; either may finish first.

    Raises:
        DocumentLoadError: if either document fails or has the wrong shape.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        catalog_future = pool.submit(fetch_json, catalog_source, timeout)
        settings_future = pool.submit(fetch_json, settings_source, timeout)
        catalog = catalog_future.result()
        settings = settings_future.result()

    if not isinstance(catalog, dict):
        raise DocumentLoadError(f'Catalog document {catalog_source} must be an object')
    if not isinstance(settings, dict):
        raise DocumentLoadError(f'Settings document {settings_source} must be an object')

    products = catalog.get('products') or []
    if not isinstance(products, list):
        raise DocumentLoadError(f'Catalog document {catalog_source} has no product list')

    logger.info(f"[DOCS] ✓ Loaded {len(products)} products and settings")
    return StorefrontDocuments(products=products, settings=settings)


def init_documents(app: Flask) -> None:
    app.extensions['storefront_documents'] = None


def get_documents() -> Optional[StorefrontDocuments]:
    """
    Documents for the running app, loaded on first use.

    Returns None while they cannot be loaded; callers then behave as if the
    catalog and settings were absent. A later call retries.
    """
    documents = current_app.extensions.get('storefront_documents')
    if documents is not None:
        return documents
    try:
        documents = load_documents(
            current_app.config['CATALOG_SOURCE'],
            current_app.config['SETTINGS_SOURCE'],
            current_app.config.get('DOCUMENT_TIMEOUT', 10),
        )
    except DocumentLoadError as e:
        logger.warning(f"[DOCS] ✗ {e.message}")
        return None
    current_app.extensions['storefront_documents'] = documents
    return documents
