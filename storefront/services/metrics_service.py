"""
Prometheus registry and storefront domain counters.

Services record into these counters; the metrics blueprint only exposes them.
"""
from prometheus_client import Counter, CollectorRegistry, multiprocess, REGISTRY
import os

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

# Use multiprocess registry in production with Gunicorn
if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

metric_registry = registry if not MULTIPROCESS_MODE else None

cart_mutations_total = Counter(
    'storefront_cart_mutations_total',
    'Cart mutations by operation',
    ['operation'],
    registry=metric_registry
)

promo_attempts_total = Counter(
    'storefront_promo_attempts_total',
    'Promo code attempts by outcome',
    ['outcome'],
    registry=metric_registry
)

state_write_failures_total = Counter(
    'storefront_state_write_failures_total',
    'Durable state writes that failed (state kept in memory)',
    ['backend'],
    registry=metric_registry
)
