"""Pytest configuration.

The batch runner chains resizes through Qt signals, which are delivered by an
event loop. We create a single `QCoreApplication` for the whole session as
early as possible so every test can spin a local `QEventLoop`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import pytest

from sizemic.errors import ExternalToolError
from sizemic.image_engine.vips_backend import ImageInfo

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QCoreApplication exists before collecting/running tests."""

    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    app = QCoreApplication.instance()
    # Keep a strong ref so it isn't GC'd mid-session.
    _APP = app if app is not None else QCoreApplication([])


class FakeBackend:
    """Stands in for libvips: reports fixed sizes and writes a text marker per resize."""

    def __init__(self, size: tuple[int, int] = (100, 50), broken: set[str] | None = None):
        self.size = size
        self.broken = broken or set()
        self.calls: list[dict[str, Any]] = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def identify(self, path: str) -> ImageInfo:
        if Path(path).name in self.broken:
            raise ExternalToolError(path, "not a known image format")
        return ImageInfo(*self.size)

    def resize(self, src_path, dst_path, quality, format, width, height) -> None:
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            self.calls.append(
                {
                    "src_path": src_path,
                    "dst_path": dst_path,
                    "quality": quality,
                    "format": format,
                    "width": width,
                    "height": height,
                }
            )
            Path(dst_path).write_text(f"{width}x{height}", encoding="utf-8")
        finally:
            with self._lock:
                self._in_flight -= 1


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch):
    """Point the settings file at a temp location so user config never leaks in."""
    monkeypatch.setenv("SIZEMIC_SETTINGS", str(tmp_path / "settings" / "settings.json"))
    monkeypatch.delenv("SIZEMIC_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SIZEMIC_LOG_CATS", raising=False)
