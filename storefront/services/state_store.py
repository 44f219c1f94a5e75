"""
Durable state store for per-client storefront state.

Typed read/write of JSON values under namespaced keys, with graceful
degradation: a failed write is logged and reported, never raised, and a
missing or corrupt entry loads as the caller's fallback.
"""

import logging
import json
from typing import Any, Optional, Dict, Tuple, Union, Type
from datetime import datetime, date
from decimal import Decimal

import redis
from redis.exceptions import RedisError, ConnectionError, TimeoutError
from sqlalchemy.exc import SQLAlchemyError
from flask import Flask

from storefront.services.metrics_service import state_write_failures_total
from storefront.database import get_session
from storefront.models import StoredState

logger = logging.getLogger(__name__)

# Entry names inside a client namespace
STORAGE_KEYS = {
    'cart': 'cart',
    'wishlist': 'wishlist',
    'theme': 'theme',
    'catalog': 'catalog',
}


def _record_write_failure(backend: str) -> None:
    state_write_failures_total.labels(backend=backend).inc()


class StateStore:
    """
    Base state store.

    Keys pattern: {prefix}:client:{client_id}:{name}
    Subclasses implement ``_read_raw`` / ``_write_raw`` / ``_delete_raw``.
    """

    backend = 'base'

    def __init__(self, prefix: str = 'shadowwear'):
        self._prefix = prefix

    def is_available(self) -> bool:
        return True

    def build_key(self, client_id: str, name: str) -> str:
        """Build client-isolated storage key."""
        return f"{self._prefix}:client:{client_id}:{name}"

    def _serialize(self, value: Any) -> str:
        """Serialize Python object to JSON string with Decimal precision."""
        def default_handler(obj: Any) -> Any:
            if isinstance(obj, (datetime, date)):
                return obj.isoformat()
            elif isinstance(obj, Decimal):
                return {"__decimal__": str(obj)}
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
        return json.dumps(value, default=default_handler)

    def _deserialize(self, value: str) -> Any:
        """Deserialize JSON string to Python object, reconstructing Decimals."""
        def object_hook(dct: Dict[str, Any]) -> Any:
            if "__decimal__" in dct:
                return Decimal(dct["__decimal__"])
            return dct
        return json.loads(value, object_hook=object_hook)

    def save(self, key: str, value: Any) -> bool:
        """
        Serialize ``value`` and write it under ``key``.

        Returns False when the store is unavailable or the write fails; the
        caller's in-memory state stays authoritative either way.
        """
        if not self.is_available():
            logger.warning(f"[STATE] ✗ Store unavailable, not saved: {key}")
            _record_write_failure(self.backend)
            return False
        try:
            serialized = self._serialize(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"[STATE] ✗ Serialize error for {key}: {e}")
            _record_write_failure(self.backend)
            return False
        if not self._write_raw(key, serialized):
            _record_write_failure(self.backend)
            return False
        return True

    def load(self, key: str, fallback: Any, expected_type: Union[Type, Tuple[Type, ...], None] = None) -> Any:
        """
        Read and deserialize ``key``.

        Returns ``fallback`` on a missing key, unavailable store, malformed
        content, or a value that is not an instance of ``expected_type``
        (which defaults to the fallback's type when the fallback is not None).
        """
        if expected_type is None and fallback is not None:
            expected_type = type(fallback)
        if not self.is_available():
            return fallback
        raw = self._read_raw(key)
        if raw is None:
            return fallback
        try:
            value = self._deserialize(raw)
        except (ValueError, TypeError, ArithmeticError, RecursionError) as e:
            logger.warning(f"[STATE] ✗ Malformed entry {key}: {e}")
            return fallback
        if expected_type is not None and not isinstance(value, expected_type):
            logger.warning(
                f"[STATE] ✗ Type mismatch for {key}: expected {expected_type}, got {type(value).__name__}"
            )
            return fallback
        return value

    def delete(self, key: str) -> bool:
        if not self.is_available():
            return False
        return self._delete_raw(key)

    def _read_raw(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write_raw(self, key: str, serialized: str) -> bool:
        raise NotImplementedError

    def _delete_raw(self, key: str) -> bool:
        raise NotImplementedError


class SqlStateStore(StateStore):
    """State store backed by the ``stored_state`` table."""

    backend = 'sql'

    def is_available(self) -> bool:
        return get_session() is not None

    def _read_raw(self, key: str) -> Optional[str]:
        session = get_session()
        try:
            entry = session.get(StoredState, key)
            return entry.value if entry else None
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning(f"[STATE] ✗ Read error for {key}: {e}")
            return None

    def _write_raw(self, key: str, serialized: str) -> bool:
        session = get_session()
        try:
            entry = session.get(StoredState, key)
            if entry:
                entry.value = serialized
            else:
                session.add(StoredState(key=key, value=serialized))
            session.commit()
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning(f"[STATE] ✗ Write error for {key}: {e}")
            return False

    def _delete_raw(self, key: str) -> bool:
        session = get_session()
        try:
            session.query(StoredState).filter(StoredState.key == key).delete()
            session.commit()
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning(f"[STATE] ✗ Delete error for {key}: {e}")
            return False


class RedisStateStore(StateStore):
    """State store backed by Redis (entries never expire)."""

    backend = 'redis'

    def __init__(self, redis_url: str, prefix: str = 'shadowwear', socket_timeout: float = 3):
        super().__init__(prefix)
        self.client: Optional[redis.Redis] = None
        try:
            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=socket_timeout,
                socket_timeout=socket_timeout,
                socket_keepalive=True,
                retry_on_timeout=True,
                health_check_interval=30
            )
            self.client.ping()
            logger.info(f"[STATE] ✓ Redis connected: {redis_url}")
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"[STATE] ⚠ Redis connection failed: {e}. Durable state DISABLED.")
            self.client = None

    def is_available(self) -> bool:
        """Check if Redis is reachable."""
        if not self.client:
            return False
        try:
            self.client.ping()
            return True
        except (ConnectionError, RedisError):
            return False

    def _read_raw(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except RedisError as e:
            logger.warning(f"[STATE] ✗ Get error: {e}")
            return None

    def _write_raw(self, key: str, serialized: str) -> bool:
        try:
            self.client.set(key, serialized)
            return True
        except RedisError as e:
            logger.warning(f"[STATE] ✗ Set error: {e}")
            return False

    def _delete_raw(self, key: str) -> bool:
        try:
            self.client.delete(key)
            return True
        except RedisError as e:
            logger.warning(f"[STATE] ✗ Delete error: {e}")
            return False


class ClientState:
    """State store view bound to one client id."""

    def __init__(self, store: StateStore, client_id: str):
        self.store = store
        self.client_id = client_id

    def save(self, name: str, value: Any) -> bool:
        return self.store.save(self.store.build_key(self.client_id, name), value)

    def load(self, name: str, fallback: Any, expected_type=None) -> Any:
        return self.store.load(self.store.build_key(self.client_id, name), fallback, expected_type)

    def delete(self, name: str) -> bool:
        return self.store.delete(self.store.build_key(self.client_id, name))


_state_store: Optional[StateStore] = None


def create_state_store(config: Dict[str, Any]) -> StateStore:
    """Build the configured backend."""
    prefix = config.get('STATE_KEY_PREFIX', 'shadowwear')
    backend = config.get('STATE_BACKEND', 'sql')
    if backend == 'redis':
        return RedisStateStore(
            config.get('REDIS_URL', 'redis://localhost:6379/0'),
            prefix=prefix,
            socket_timeout=config.get('REDIS_SOCKET_TIMEOUT', 3),
        )
    if backend != 'sql':
        logger.warning(f"[STATE] Unknown STATE_BACKEND '{backend}', using sql")
    return SqlStateStore(prefix=prefix)


def init_state_store(app: Flask) -> None:
    """Initialize state store singleton."""
    global _state_store
    _state_store = create_state_store(app.config)
    if not hasattr(app, 'extensions'):
        app.extensions = {}
    app.extensions['state_store'] = _state_store


def get_state_store() -> StateStore:
    """Get state store instance."""
    if _state_store is None:
        raise RuntimeError("State store not initialized.")
    return _state_store
