"""Main blueprint with health check endpoints."""
from flask import Blueprint, jsonify
from sqlalchemy import text
from storefront.database import get_session

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates the state database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        session = get_session()
        row = session.execute(text("SELECT 1 as health_check")).fetchone()

        if row and row[0] == 1:
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Database connection successful'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 500

    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Failed to connect to database'
        }), 500


@main_bp.route('/health/state')
def health_state():
    """
    Durable state store health check.

    Never returns 500: when the store is down the storefront keeps working
    from memory, so the status is only "degraded".
    """
    from storefront.services.state_store import get_state_store
    store = get_state_store()

    if not store.is_available():
        return jsonify({
            'status': 'degraded',
            'backend': store.backend,
            'message': 'State store unavailable (changes are kept in memory only)'
        }), 200

    key = store.build_key('system', 'health_check')
    if store.save(key, {'test': 'ok'}) and store.load(key, {}).get('test') == 'ok':
        store.delete(key)
        return jsonify({
            'status': 'ok',
            'backend': store.backend,
            'message': 'State store is working correctly'
        }), 200

    return jsonify({
        'status': 'degraded',
        'backend': store.backend,
        'message': 'State store reachable but operations failing'
    }), 200
