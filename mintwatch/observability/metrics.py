# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics Exporter

Metrics:
- Poll outcomes, snapshot size
- Alerts handed to the notifier
- Activation transactions by outcome
"""

import logging

from prometheus_client import Counter, Gauge, CollectorRegistry, start_http_server

logger = logging.getLogger(__name__)

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# POLLER METRICS
# ═══════════════════════════════════════════════════════════════════

polls_total = Counter(
    'mintwatch_polls_total',
    'Validator polls by outcome',
    ['outcome'],   # primary / secondary / unreachable
    registry=metrics_registry
)

snapshot_candidates = Gauge(
    'mintwatch_snapshot_candidates',
    'Candidates in the live snapshot',
    registry=metrics_registry
)

snapshot_validators = Gauge(
    'mintwatch_snapshot_validators',
    'Candidates with validator status in the live snapshot',
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# ALERT / TX METRICS
# ═══════════════════════════════════════════════════════════════════

alerts_total = Counter(
    'mintwatch_alerts_total',
    'Alerts handed to the notifier',
    registry=metrics_registry
)

transactions_total = Counter(
    'mintwatch_transactions_total',
    'Candidate on/off transactions by outcome',
    ['outcome'],   # sent / rejected / error
    registry=metrics_registry
)


def start_metrics_server(port: int, addr: str = "0.0.0.0") -> None:
    """Serves metrics_registry on http://addr:port/metrics."""
    start_http_server(port, addr=addr, registry=metrics_registry)
    logger.info(f"Metrics available on {addr}:{port}")
