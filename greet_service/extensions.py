from flask import current_app
from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector


def create_metrics_registry() -> CollectorRegistry:
    """Creates a per-app Prometheus registry with the process and platform collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry


def get_metrics_registry() -> CollectorRegistry:
    return current_app.extensions["metrics_registry"]
