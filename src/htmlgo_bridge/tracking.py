"""Optional instrumentation for conversion and editor events.

The controller behaves identically whichever tracker is injected.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Mapping, Protocol

from .constants import APP_VERSION

logger = logging.getLogger(__name__)


class Tracker(Protocol):
    def track(self, event: str, data: Mapping[str, Any] | None = None) -> None:  # pragma: no cover - interface
        ...


class NullTracker:
    def track(self, event: str, data: Mapping[str, Any] | None = None) -> None:
        return None


class LoggingTracker:
    """Emits events on the ``htmlgo_bridge.tracking`` logger."""

    def __init__(self, environment: str, version: str = APP_VERSION, max_events: int = 200) -> None:
        self.environment = environment
        self.version = version
        self.events: deque[tuple[str, dict[str, Any]]] = deque(maxlen=max_events)

    def prepare_event_data(self, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        payload = dict(data or {})
        payload["environment"] = self.environment
        payload["version"] = self.version
        return payload

    def track(self, event: str, data: Mapping[str, Any] | None = None) -> None:
        payload = self.prepare_event_data(data)
        self.events.append((event, payload))
        logger.info("event=%s data=%s", event, payload)


__all__ = ["LoggingTracker", "NullTracker", "Tracker"]
