# MIT License
# Copyright (c) 2025 Hashborn

"""
Observability Module

Prometheus metrics for the poll loop, alerts and transactions.
"""

from .metrics import metrics_registry, start_metrics_server

__all__ = ['metrics_registry', 'start_metrics_server']
