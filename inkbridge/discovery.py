"""USB アクセサリ検出ループ.

- アクセサリ一覧を一定間隔でポーリングし、先頭のアクセサリが許可されるまで待つ
- 一覧が空の場合は「未接続」の警告を最初の一回だけ通知する
- 外部のキャンセル (セッション停止) はポーリング境界で反映する

複数のアクセサリが同時に接続されていても先頭しか見ない (既知の制約).
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .constants import DEFAULT_POLL_INTERVAL_SEC, NOT_CONNECTED_MESSAGE
from .transport.accessory import Accessory, AccessoryManager

logger = logging.getLogger(__name__)


class DiscoveryState(str, Enum):
    SEARCHING = "searching"
    FOUND_UNAUTHORIZED = "found_unauthorized"
    AUTHORIZED = "authorized"
    CANCELLED = "cancelled"


class AccessoryDiscovery:
    """Poll the accessory manager until an authorized accessory appears."""

    def __init__(
        self,
        manager: AccessoryManager,
        *,
        on_warning: Optional[Callable[[str], None]] = None,
        poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._manager = manager
        self._on_warning = on_warning
        self._poll_interval = max(0.0, float(poll_interval_sec))
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._state = DiscoveryState.SEARCHING
        self._warned_not_connected = False
        self._polls = 0

    @property
    def state(self) -> DiscoveryState:
        return self._state

    @property
    def polls(self) -> int:
        """Number of completed poll cycles."""
        return self._polls

    @property
    def done(self) -> bool:
        return self._state in (DiscoveryState.AUTHORIZED, DiscoveryState.CANCELLED)

    def cancel(self) -> None:
        self._cancel.set()

    def poll_once(self) -> Accessory | None:
        """Run one poll cycle; return the accessory once it is authorized."""
        if self.done:
            raise RuntimeError(f"discovery already finished ({self._state.value})")
        self._polls += 1
        try:
            accessories = list(self._manager.list_accessories() or ())
        except OSError:
            logger.warning("Listing accessories failed; retrying", exc_info=True)
            accessories = []

        if not accessories:
            self._state = DiscoveryState.SEARCHING
            if not self._warned_not_connected:
                self._warned_not_connected = True
                self._warn(NOT_CONNECTED_MESSAGE)
            logger.debug("Empty accessory list (poll %d)", self._polls)
            return None

        accessory = accessories[0]
        try:
            permitted = self._manager.has_permission(accessory)
        except OSError:
            logger.warning("Permission check failed for %s", accessory.identifier, exc_info=True)
            permitted = False
        if permitted:
            self._state = DiscoveryState.AUTHORIZED
            logger.info(
                "Accessory authorized: %s (poll %d)", accessory.identifier, self._polls
            )
            return accessory

        if self._state is not DiscoveryState.FOUND_UNAUTHORIZED:
            logger.info("Accessory found, waiting for permission: %s", accessory.identifier)
        self._state = DiscoveryState.FOUND_UNAUTHORIZED
        return None

    def run(self) -> Accessory | None:
        """Block until authorized (returns the accessory) or cancelled (None).

        Must run off the event delivery thread.
        """
        while not self._cancel.is_set():
            accessory = self.poll_once()
            if accessory is not None:
                return accessory
            if self._cancel.wait(self._poll_interval):
                break
        self._state = DiscoveryState.CANCELLED
        logger.info("Accessory discovery cancelled after %d polls", self._polls)
        return None

    def _warn(self, message: str) -> None:
        if self._on_warning is None:
            return
        try:
            self._on_warning(message)
        except Exception:  # noqa: BLE001
            logger.exception("Warning callback failed")
