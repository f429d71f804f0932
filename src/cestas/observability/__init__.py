"""
Cestas Observability Module.

Provides in-process metrics collection for remote calls and errors.
"""

from cestas.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
