"""
Health checks for the greet service.

Each check returns a dict with its name, an UP/DOWN state and the data it
looked at, so /health can report why the service is considered unhealthy.
"""
import logging
from typing import Any, Dict, List

import psutil

logger = logging.getLogger(__name__)

STATE_UP = "UP"
STATE_DOWN = "DOWN"


def check_disk_space(path: str = "/", threshold_percent: float = 99.999) -> Dict[str, Any]:
    """
    Check that the disk holding ``path`` is below the usage threshold.

    Returns:
        dict: Check result with disk usage in GB and percent
    """
    try:
        disk = psutil.disk_usage(path)
    except (psutil.Error, OSError) as e:
        logger.error(f"Error collecting disk usage for {path}: {e}", exc_info=True)
        return {"name": "diskSpace", "state": STATE_DOWN, "data": {"error": str(e)}}

    return {
        "name": "diskSpace",
        "state": STATE_UP if disk.percent < threshold_percent else STATE_DOWN,
        "data": {
            "path": path,
            "total_gb": disk.total / (1024 * 1024 * 1024),
            "free_gb": disk.free / (1024 * 1024 * 1024),
            "percent": disk.percent,
            "threshold_percent": threshold_percent,
        },
    }


def check_memory(threshold_percent: float = 98.0) -> Dict[str, Any]:
    """
    Check that memory usage is below the threshold.

    Returns:
        dict: Check result with memory usage in MB and percent
    """
    try:
        memory = psutil.virtual_memory()
    except (psutil.Error, OSError) as e:
        logger.error(f"Error collecting memory usage: {e}", exc_info=True)
        return {"name": "memory", "state": STATE_DOWN, "data": {"error": str(e)}}

    return {
        "name": "memory",
        "state": STATE_UP if memory.percent < threshold_percent else STATE_DOWN,
        "data": {
            "total_mb": memory.total / (1024 * 1024),
            "available_mb": memory.available / (1024 * 1024),
            "percent": memory.percent,
            "threshold_percent": threshold_percent,
        },
    }


def run_health_checks(config) -> List[Dict[str, Any]]:
    return [
        check_disk_space(
            config.get("HEALTH_DISK_PATH", "/"),
            config.get("HEALTH_DISK_THRESHOLD_PERCENT", 99.999),
        ),
        check_memory(config.get("HEALTH_MEMORY_THRESHOLD_PERCENT", 98.0)),
    ]
