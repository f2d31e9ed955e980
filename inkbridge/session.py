"""Stream session: one sink, one codec, one lifecycle.

State machine::

    IDLE -> CONNECTING -> ACTIVE -> CLOSED
              |
              +-> IDLE (connect failed, may retry)

CLOSED is terminal; reconnecting needs a new session. Any write failure while
ACTIVE closes the session and is reported once through ``on_failed``.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .codec import FrameCodec
from .config import StreamSettings
from .discovery import AccessoryDiscovery
from .error_codes import ErrorCode
from .exceptions import ConnectError, InkbridgeError, SessionStateError, WriteError
from .models import AccessoryConfig, InputSample, SocketConfig
from .source import InputSource
from .transport import AccessoryManager, DevNodeAccessoryManager, Sink, open_sink

logger = logging.getLogger(__name__)

SinkOpener = Callable[..., Sink]


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class SessionStats:
    """Counters for one session."""

    frames_written: int = 0
    frames_rejected: int = 0
    bytes_written: int = 0
    connected_at: Optional[float] = None
    last_error: Optional[str] = None

    @property
    def uptime_seconds(self) -> float:
        if self.connected_at is None:
            return 0.0
        return time.time() - self.connected_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_written": self.frames_written,
            "frames_rejected": self.frames_rejected,
            "bytes_written": self.bytes_written,
            "uptime_seconds": round(self.uptime_seconds, 1),
            "last_error": self.last_error,
        }


class StreamSession:
    """Owns the sink for one connection and frames every input sample into it.

    ``handle_sample`` may be called from several input callback paths at once;
    encoding into the shared scratch buffer and writing it happen under a
    single lock so frames are never interleaved on the wire.
    """

    def __init__(
        self,
        source: InputSource,
        *,
        swap_axes: bool = False,
        settings: StreamSettings | None = None,
        accessory_manager: AccessoryManager | None = None,
        on_warning: Optional[Callable[[str], None]] = None,
        on_connected: Optional[Callable[[str], None]] = None,
        on_failed: Optional[Callable[[InkbridgeError], None]] = None,
        sink_opener: SinkOpener = open_sink,
    ) -> None:
        self._source = source
        self._settings = settings or StreamSettings()
        self._accessory_manager = accessory_manager
        self._on_warning = on_warning
        self._on_connected = on_connected
        self._on_failed = on_failed
        self._open_sink = sink_opener

        self._codec = FrameCodec(swap_axes=swap_axes)
        self._state = SessionState.IDLE
        self._sink: Sink | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._discovery: AccessoryDiscovery | None = None
        self._cancel = threading.Event()
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._stats = SessionStats()

    # --- properties ---
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def sink(self) -> Sink | None:
        return self._sink

    @property
    def swap_axes(self) -> bool:
        return self._codec.swap_axes

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def discovery(self) -> AccessoryDiscovery | None:
        return self._discovery

    # --- lifecycle ---
    def start(self, config: SocketConfig | AccessoryConfig) -> bool:
        """Connect and begin streaming.

        Blocks while discovering the accessory or connecting the socket, so it
        must not run on the input delivery thread.

        Returns:
            True once ACTIVE, False if ``stop()`` was called while connecting.

        Raises:
            SessionStateError: the session is not IDLE
            ConnectError: the sink could not be opened (session back to IDLE)
        """
        self.begin_connect(config)
        return self.finish_connect(config)

    def begin_connect(self, config: SocketConfig | AccessoryConfig) -> None:
        """IDLE -> CONNECTING without blocking.

        Lets a caller claim the session before handing ``finish_connect`` to
        another thread.
        """
        if not isinstance(config, (SocketConfig, AccessoryConfig)):
            raise TypeError(f"unsupported transport config: {type(config).__name__}")
        with self._lock:
            if self._state is not SessionState.IDLE:
                raise SessionStateError(
                    ErrorCode.SESSION_INVALID_STATE,
                    f"cannot start a session in state {self._state.value}",
                )
            self._state = SessionState.CONNECTING
        logger.info("Session connecting via %s", config.kind)

    def finish_connect(self, config: SocketConfig | AccessoryConfig) -> bool:
        """Open the sink for a session claimed by ``begin_connect``.

        Same results as ``start``.
        """
        with self._lock:
            if self._state is SessionState.CLOSED:
                logger.info("Session stopped before connecting")
                return False
            if self._state is not SessionState.CONNECTING:
                raise SessionStateError(
                    ErrorCode.SESSION_INVALID_STATE,
                    f"cannot connect a session in state {self._state.value}",
                )

        try:
            sink = self._connect(config)
        except ConnectError as exc:
            if not self._back_to_idle():
                logger.info("Connect aborted by stop(): %s", exc)
                return False
            self._stats.last_error = str(exc)
            logger.warning("Session connect failed: %s", exc)
            raise
        except Exception:
            self._back_to_idle()
            raise

        if sink is None:
            return False

        with self._lock:
            if self._state is SessionState.CONNECTING:
                self._sink = sink
                self._state = SessionState.ACTIVE
                self._stats.connected_at = time.time()
                sink = None
        if sink is not None:
            # stop() won the race with the connect
            self._close_sink(sink)
            return False

        unsubscribe = self._source.subscribe(self.handle_sample)
        with self._lock:
            if self._state is SessionState.ACTIVE:
                self._unsubscribe = unsubscribe
                unsubscribe = None
        if unsubscribe is not None:
            self._call_quietly(unsubscribe)
            return False

        logger.info("Session active: %s (swap_axes=%s)", self._sink, self.swap_axes)
        self._notify(self._on_connected, self._sink.name if self._sink else "")
        return True

    def stop(self) -> None:
        """Close the session from any state. Idempotent."""
        with self._lock:
            if self._state is SessionState.CLOSED:
                return
            previous = self._state
            sink, unsubscribe = self._enter_closed()
        self._release(sink, unsubscribe)
        logger.info("Session closed (was %s)", previous.value)

    # --- streaming ---
    def handle_sample(self, sample: InputSample) -> bool:
        """Encode and write one sample.

        Returns:
            True if a frame was written, False if the sample was rejected or
            the session is not ACTIVE.
        """
        failure: WriteError | None = None
        with self._write_lock:
            sink = self._sink
            if self._state is not SessionState.ACTIVE or sink is None:
                return False
            frame = self._codec.pack(sample)
            if frame is None:
                self._stats.frames_rejected += 1
                return False
            try:
                sink.write(frame)
            except WriteError as exc:
                if self._close_after_failure(exc):
                    failure = exc
            else:
                self._stats.frames_written += 1
                self._stats.bytes_written += len(frame)
                return True
        if failure is not None:
            self._notify(self._on_failed, failure)
        return False

    # --- internal ---
    def _connect(self, config: SocketConfig | AccessoryConfig) -> Sink | None:
        if isinstance(config, SocketConfig):
            return self._open_sink(config)

        manager = self._accessory_manager or DevNodeAccessoryManager(
            self._settings.accessory_devices
        )
        discovery = AccessoryDiscovery(
            manager,
            on_warning=self._on_warning,
            poll_interval_sec=self._settings.poll_interval_sec,
            cancel_event=self._cancel,
        )
        self._discovery = discovery
        accessory = discovery.run()
        if accessory is None:
            return None
        return self._open_sink(config, manager=manager, accessory=accessory)

    def _back_to_idle(self) -> bool:
        """CONNECTING -> IDLE after a failed connect; False if already CLOSED."""
        with self._lock:
            if self._state is SessionState.CONNECTING:
                self._state = SessionState.IDLE
                return True
            return False

    def _enter_closed(self) -> tuple[Sink | None, Callable[[], None] | None]:
        # caller holds self._lock
        self._state = SessionState.CLOSED
        self._cancel.set()
        sink, self._sink = self._sink, None
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        return sink, unsubscribe

    def _close_after_failure(self, error: WriteError) -> bool:
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return False
            sink, unsubscribe = self._enter_closed()
            self._stats.last_error = str(error)
        logger.error("Write failed, closing session: %s", error)
        self._release(sink, unsubscribe)
        return True

    def _release(
        self, sink: Sink | None, unsubscribe: Callable[[], None] | None
    ) -> None:
        if unsubscribe is not None:
            self._call_quietly(unsubscribe)
        if sink is not None:
            self._close_sink(sink)

    @staticmethod
    def _close_sink(sink: Sink) -> None:
        try:
            sink.close()
        except Exception:  # noqa: BLE001
            logger.error("Failed to close sink %s", sink, exc_info=True)

    @staticmethod
    def _call_quietly(func: Callable[[], None]) -> None:
        try:
            func()
        except Exception:  # noqa: BLE001
            logger.error("Failed to unsubscribe input listener", exc_info=True)

    @staticmethod
    def _notify(callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:  # noqa: BLE001
            logger.exception("Session callback failed")
