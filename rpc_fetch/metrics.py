"""
Prometheus Metrics for rpc_fetch

Host application should expose the prometheus_client registry.
"""

import logging
from prometheus_client import Counter, Histogram

logger = logging.getLogger("rpc_fetch.metrics")

# Outcome is "ok" or the RpcErrorKind value
REQUEST_COUNT = Counter(
    "rpc_fetch_requests_total",
    "Total number of RPC calls",
    ["method", "outcome"],
)

REQUEST_LATENCY = Histogram(
    "rpc_fetch_request_latency_seconds",
    "RPC call latency in seconds",
    ["method"],
)


def metrics_request(method: str, outcome: str, latency: float) -> None:
    """
    Record metrics for one RPC call.

    Args:
        method: HTTP method
        outcome: "ok" or an error kind ("timeout", "network", "server", "user")
        latency: Call duration in seconds
    """
    try:
        REQUEST_COUNT.labels(method=method, outcome=outcome).inc()
        REQUEST_LATENCY.labels(method=method).observe(latency)
    except Exception as e:
        # Metrics failures should not break the call
        logger.debug("Failed to record metrics: %s", e)
