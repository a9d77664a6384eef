# apps/support/realtime/services.py
"""
Real-time fan-out: fire-and-forget notifications to connected clients.

- Backend: settings.REALTIME_BACKEND (dotted path to a class with ``emit``)
- Default backend only logs; a socket bridge can be plugged in without
  touching domain code.
- Delivery failures are logged and never break the calling request.
"""

import logging
from functools import lru_cache

from django.conf import settings
from django.dispatch import Signal
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

# In-process listeners (tests, admin hooks) receive event=..., payload=..., rooms=...
realtime_event = Signal()

SESSION_UPDATED = "session:update"
ATTENDANCE_SAVED = "attendance:saved"
STOCK_UPDATE = "stockUpdate"
ORDER_NEW = "order:new"
ORDER_UPDATE = "order:update"

DEFAULT_BACKEND = "apps.support.realtime.backends.LoggingBackend"


@lru_cache(maxsize=1)
def get_backend():
    path = getattr(settings, "REALTIME_BACKEND", "") or DEFAULT_BACKEND
    return import_string(path)()


def role_room(role: str) -> str:
    return f"role:{role}"


def user_room(user_id) -> str:
    return f"user:{user_id}"


def publish(event: str, payload: dict, rooms=None) -> None:
    """
    Emit ``event`` to ``rooms`` (all clients when empty).
    """
    rooms = list(rooms or [])
    realtime_event.send(sender=None, event=event, payload=payload, rooms=rooms)
    try:
        get_backend().emit(event, payload, rooms)
    except Exception as e:
        logger.warning("[realtime] emit failed event=%s rooms=%s error=%s", event, rooms, e)
