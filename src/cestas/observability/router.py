"""
Cestas Metrics Endpoint.

Exposes observability metrics for monitoring and debugging.
"""

from fastapi import APIRouter

from cestas.observability.metrics import get_metrics_store

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def get_metrics() -> dict:
    """
    Get current metrics summary.

    Returns, per remote operation (``<table>.<operation>``), the call count,
    latency percentiles and error counts by code, plus global error counts.

    Example response:
    ```json
    {
      "uptime_seconds": 3600.5,
      "collected_at": "2026-01-10T19:00:00Z",
      "remote": {
        "tabelas_card.list_by_card": {
          "call_count": 42,
          "p50_ms": 85.1,
          "p99_ms": 310.4,
          "errors": {"REMOTE_TIMEOUT": 1}
        }
      },
      "global_errors": {"VALIDATION_ERROR": 3}
    }
    ```
    """
    return get_metrics_store().get_summary()
