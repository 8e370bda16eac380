"""Process-wide readiness state.

The flag flips from "loading" to "ready" exactly once, when the recognition
backend finishes loading its models. Route handlers only read it.
"""

import logging
import time
from datetime import datetime, timezone

from ..models.types import HealthState

logger = logging.getLogger(__name__)


class ReadinessState:
    """One-way "models loaded" flag plus the process start clock."""

    def __init__(self, ready: bool = False):
        self._ready = ready
        self._started = time.monotonic()

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def status(self) -> HealthState:
        return 'ready' if self._ready else 'loading'

    def mark_ready(self) -> None:
        """Record that models are loaded. Later calls are no-ops."""
        if self._ready:
            return
        self._ready = True
        logger.info(f"Models loaded after {self.uptime_seconds()}s")

    def uptime_seconds(self) -> int:
        """Whole seconds since the state was created."""
        return int(time.monotonic() - self._started)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
