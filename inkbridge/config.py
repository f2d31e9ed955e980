"""ストリーム設定 (環境変数で上書き可能).

- INKBRIDGE_CONNECT_TIMEOUT_MS: TCP 接続タイムアウト (default: 5000)
- INKBRIDGE_POLL_INTERVAL_SEC: アクセサリ検出のポーリング間隔 (default: 1.0)
- INKBRIDGE_SWAP_AXES: X/Y を入れ替えて送出する (default: false)
- INKBRIDGE_ACCESSORY_DEVICES: アクセサリのデバイスノード (os.pathsep 区切り)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    DEFAULT_ACCESSORY_DEVICE,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_SEC,
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_paths(name: str, default: tuple[Path, ...]) -> tuple[Path, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    paths = tuple(Path(part.strip()) for part in raw.split(os.pathsep) if part.strip())
    return paths or default


@dataclass
class StreamSettings:
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    swap_axes: bool = False
    accessory_devices: tuple[Path, ...] = (DEFAULT_ACCESSORY_DEVICE,)

    def validate(self) -> None:
        if self.connect_timeout_ms <= 0:
            raise ValueError("connect_timeout_ms must be > 0")
        if self.poll_interval_sec < 0:
            raise ValueError("poll_interval_sec must be >= 0")
        if not self.accessory_devices:
            raise ValueError("accessory_devices must not be empty")

    @classmethod
    def from_env(cls) -> "StreamSettings":
        settings = cls(
            connect_timeout_ms=_env_int(
                "INKBRIDGE_CONNECT_TIMEOUT_MS", DEFAULT_CONNECT_TIMEOUT_MS
            ),
            poll_interval_sec=_env_float(
                "INKBRIDGE_POLL_INTERVAL_SEC", DEFAULT_POLL_INTERVAL_SEC
            ),
            swap_axes=_env_bool("INKBRIDGE_SWAP_AXES", False),
            accessory_devices=_env_paths(
                "INKBRIDGE_ACCESSORY_DEVICES", (DEFAULT_ACCESSORY_DEVICE,)
            ),
        )
        settings.validate()
        return settings
