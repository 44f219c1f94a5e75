"""
Flask CLI commands for catalog maintenance.

Commands:
- flask export-catalog: Write a client's catalog as a products document
- flask import-catalog: Append a products document to a client's catalog
"""

import json

import click

from storefront.exceptions import DocumentLoadError
from storefront.services.document_service import get_documents
from storefront.services.shop_session import ShopSession, default_settings
from storefront.services.state_store import get_state_store


def _open_shop(app, client_id: str) -> ShopSession:
    return ShopSession(get_state_store(), client_id, default_settings(app.config)).load(get_documents())


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('export-catalog')
    @click.option('--client', 'client_id', required=True, help='Client id whose catalog to export')
    @click.option('--output', type=click.File('w', encoding='utf-8'), default='-', help='Target file (default stdout)')
    def export_catalog(client_id, output):
        """Export a client's catalog as {"products": [...]}."""
        shop = _open_shop(app, client_id)
        json.dump({'products': shop.catalog.export_snapshot()}, output, ensure_ascii=False, indent=2)
        output.write('\n')
        click.echo(click.style(f'✅ Exported {len(shop.catalog)} products', fg='green'), err=True)

    @app.cli.command('import-catalog')
    @click.option('--client', 'client_id', required=True, help='Client id whose catalog receives the products')
    @click.argument('source', type=click.File('r', encoding='utf-8'))
    def import_catalog(client_id, source):
        """Append the products of a {"products": [...]} document."""
        try:
            document = json.load(source)
        except ValueError as e:
            click.echo(click.style(f'❌ Invalid JSON: {e}', fg='red'), err=True)
            raise SystemExit(1)

        products = document.get('products') if isinstance(document, dict) else None
        if not isinstance(products, list):
            click.echo(click.style('❌ Document must contain a products list', fg='red'), err=True)
            raise SystemExit(1)

        shop = _open_shop(app, client_id)
        try:
            count = shop.catalog.bulk_import(products)
        except DocumentLoadError as e:
            click.echo(click.style(f'❌ {e.message}', fg='red'), err=True)
            raise SystemExit(1)
        click.echo(click.style(f'✅ Imported {count} products ({len(shop.catalog)} in catalog)', fg='green'))
