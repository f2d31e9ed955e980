"""Input event source used by the stream session.

The UI layer owns the real input callbacks (touch, generic motion, ...) and
forwards every sample to ``dispatch``. Several callback paths may forward the
same physical gesture; samples are not deduplicated here.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from .models import InputSample

logger = logging.getLogger(__name__)

SampleListener = Callable[[InputSample], bool]


class InputSource(Protocol):
    def subscribe(self, listener: SampleListener) -> Callable[[], None]: ...


class InputEventSource:
    """Fan input samples out to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[SampleListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: SampleListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def dispatch(self, sample: InputSample) -> bool:
        """Deliver one sample; True if any listener consumed it."""
        with self._lock:
            listeners = list(self._listeners)
        consumed = False
        for listener in listeners:
            consumed = bool(listener(sample)) or consumed
        return consumed
