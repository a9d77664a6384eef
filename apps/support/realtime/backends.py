# apps/support/realtime/backends.py
import logging

logger = logging.getLogger(__name__)


class LoggingBackend:
    """Logs events instead of pushing them (DEBUG / tests / no socket bridge)."""

    def emit(self, event, payload, rooms):
        logger.info("[realtime] event=%s rooms=%s keys=%s", event, rooms or ["*"], sorted(payload))


class NullBackend:
    def emit(self, event, payload, rooms):
        return None
