from __future__ import annotations

import logging

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def instrument_metrics(app: FastAPI) -> bool:
    """Expose Prometheus metrics at ``/metrics`` when the ``metrics`` extra is installed."""
    try:
        from prometheus_fastapi_instrumentator import Instrumentator
    except ImportError:
        logger.debug("prometheus-fastapi-instrumentator not installed; /metrics disabled")
        return False

    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return True
