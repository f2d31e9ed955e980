"""Entry points used by the UI layer.

The UI hands over raw connection parameters (host/port text, or "use USB")
and receives warnings, "connected" and "failed" notifications. At most one
session is connecting or streaming at a time; starting another one while it
runs fails fast instead of leaking the open sink.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from .config import StreamSettings
from .error_codes import ErrorCode
from .exceptions import ConfigError, ConnectError, InkbridgeError, SessionStateError
from .models import AccessoryConfig, SocketConfig, parse_socket_config
from .session import SessionState, SinkOpener, StreamSession
from .source import InputSource
from .transport import AccessoryManager, open_sink

logger = logging.getLogger(__name__)

_RUNNING_STATES = (SessionState.CONNECTING, SessionState.ACTIVE)


class StreamController:
    """Start and stop pen stream sessions on behalf of the UI."""

    def __init__(
        self,
        source: InputSource,
        *,
        settings: StreamSettings | None = None,
        accessory_manager: AccessoryManager | None = None,
        on_warning: Optional[Callable[[str], None]] = None,
        on_connected: Optional[Callable[[str], None]] = None,
        on_failed: Optional[Callable[[InkbridgeError], None]] = None,
        sink_opener: SinkOpener = open_sink,
    ) -> None:
        self._source = source
        self._settings = settings if settings is not None else StreamSettings.from_env()
        self._settings.validate()
        self._accessory_manager = accessory_manager
        self._on_warning = on_warning
        self._on_connected = on_connected
        self._on_failed = on_failed
        self._sink_opener = sink_opener
        self._lock = threading.Lock()
        self._session: StreamSession | None = None
        self._thread: threading.Thread | None = None

    @property
    def session(self) -> StreamSession | None:
        return self._session

    def connect_wifi(
        self, host: Any, port: Any, *, swap_axes: bool | None = None
    ) -> StreamSession:
        """Validate host/port text and start a socket session.

        Raises:
            ConfigError: invalid host or port (also sent as a warning)
            SessionStateError: a session is already running
        """
        try:
            config = parse_socket_config(
                host, port, connect_timeout_ms=self._settings.connect_timeout_ms
            )
        except ConfigError as exc:
            logger.warning("Rejected connection parameters: %s", exc)
            self._notify(self._on_warning, exc.message)
            raise
        return self.start_session(config, swap_axes=swap_axes)

    def connect_usb(self, *, swap_axes: bool | None = None) -> StreamSession:
        return self.start_session(AccessoryConfig(), swap_axes=swap_axes)

    def start_session(
        self,
        config: SocketConfig | AccessoryConfig,
        *,
        swap_axes: bool | None = None,
    ) -> StreamSession:
        """Create a session and connect it on a background thread.

        The session is CONNECTING before this returns, so a second call
        fails fast even if the connect thread has not been scheduled yet.
        Connect failures are reported through ``on_failed``.
        """
        with self._lock:
            current = self._session
            if current is not None and current.state in _RUNNING_STATES:
                raise SessionStateError(
                    ErrorCode.SESSION_ALREADY_ACTIVE,
                    f"a session is already {current.state.value}",
                )
            session = StreamSession(
                self._source,
                swap_axes=self._settings.swap_axes if swap_axes is None else swap_axes,
                settings=self._settings,
                accessory_manager=self._accessory_manager,
                on_warning=self._on_warning,
                on_connected=self._on_connected,
                on_failed=self._on_failed,
                sink_opener=self._sink_opener,
            )
            session.begin_connect(config)
            thread = threading.Thread(
                target=self._run, args=(session, config), name="inkbridge_connect", daemon=True
            )
            self._session = session
            self._thread = thread
            thread.start()
        return session

    def stop_session(self) -> None:
        """Close the current session, cancelling discovery if still running."""
        with self._lock:
            session = self._session
        if session is not None:
            session.stop()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the connect attempt; True if it finished."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run(self, session: StreamSession, config: SocketConfig | AccessoryConfig) -> None:
        try:
            session.finish_connect(config)
        except ConnectError as exc:
            self._notify(self._on_failed, exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while connecting")
            session.stop()
            self._notify(
                self._on_failed,
                ConnectError(
                    ErrorCode.CONNECT_REFUSED,
                    f"{config.kind}: {exc}",
                    {"exception": type(exc).__name__},
                ),
            )

    @staticmethod
    def _notify(callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:  # noqa: BLE001
            logger.exception("Controller callback failed")
