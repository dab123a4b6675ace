from __future__ import annotations

import platform
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .registry import PeerRegistry

STATUS_OK = "OK"


def health_report(
    registry: PeerRegistry,
    *,
    name: str,
    version: str,
    started_at: Optional[float] = None,
) -> Dict[str, Any]:
    """Snapshot used by GET /health."""

    report: Dict[str, Any] = {
        "status": STATUS_OK,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "component": {"name": name, "version": version},
        "system": {
            "version": platform.python_version(),
            "threads_count": threading.active_count(),
        },
        "registry": {
            "count": registry.count,
            "capacity": registry.capacity,
        },
    }
    if started_at is not None:
        report["system"]["uptime_seconds"] = int(time.time() - started_at)
    return report


__all__ = ["health_report", "STATUS_OK"]
