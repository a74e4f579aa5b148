"""Resize operation: decide the target size and hand the work to the backend.

``resize`` is the synchronous core. It reports through two callbacks, exactly
one of which fires per call. ``ResizeTask`` runs the same operation on a
``QThreadPool`` and reports through Qt signals, which is what the batch runner
chains on.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QRunnable, Signal

from sizemic.errors import ExternalToolError
from sizemic.logger import get_logger
from sizemic.path_utils import DEFAULT_SUFFIX, image_format, output_name

_logger = get_logger("resize")

DEFAULT_QUALITY = 1.0


def compute_target_size(src_width: int, src_height: int, scale: float, width: int, height: int) -> tuple[int, int]:
    """Target dimensions for a resize.

    Rules, first match wins:
    1. a non-default scale, or neither width nor height set: scale both axes
       (rounded up). With scale 1.0 this keeps the source size.
    2. width set, height not: (width, source height).
    3. otherwise: (source width, height).
    """
    w = int(width)
    h = int(height)
    if scale != 1.0 or (w < 1 and h < 1):
        return math.ceil(src_width * scale), math.ceil(src_height * scale)
    if w > 0 and h < 1:
        return w, src_height
    return src_width, h


def resize(
    input_path: str,
    scale: float,
    width: int,
    height: int,
    output: str,
    errback: Callable[[Exception], Any] | None = None,
    callback: Callable[[str], Any] | None = None,
    backend: Any = None,
    quality: float = DEFAULT_QUALITY,
    suffix: str = DEFAULT_SUFFIX,
    logger: logging.Logger | None = None,
) -> str | None:
    """Resize one image.

    Returns the written path, or None on failure. On success ``callback`` is
    called with ``input_path``; on failure ``errback`` gets the error. Never
    both.
    """
    log = logger or _logger
    if backend is None:
        from .vips_backend import VipsBackend

        backend = VipsBackend()

    dst_path = output_name(output, input_path, suffix)
    try:
        info = backend.identify(input_path)
        target_w, target_h = compute_target_size(info.width, info.height, scale, width, height)
        backend.resize(
            src_path=input_path,
            dst_path=dst_path,
            quality=quality,
            format=image_format(input_path),
            width=target_w,
            height=target_h,
        )
    except ExternalToolError as e:
        log.debug("resize failed: %s", e)
        if errback:
            errback(e)
        return None

    log.info("Resized '%s' to '%sx%s' into '%s'", input_path, target_w, target_h, dst_path)
    if callback:
        callback(input_path)
    return dst_path


class ResizeSignals(QObject):
    # Emits: input path
    resized = Signal(str)
    # Emits: input path, error message
    failed = Signal(str, str)


class ResizeTask(QRunnable):
    """Run ``resize`` on a thread pool and report through ``signals``."""

    def __init__(
        self,
        input_path: str,
        scale: float,
        width: int,
        height: int,
        output: str,
        backend: Any = None,
        quality: float = DEFAULT_QUALITY,
        logger: logging.Logger | None = None,
    ):
        super().__init__()
        self.input_path = input_path
        self.scale = scale
        self.width = width
        self.height = height
        self.output = output
        self.backend = backend
        self.quality = quality
        self.logger = logger
        self.signals = ResizeSignals()

    def run(self) -> None:
        try:
            resize(
                self.input_path,
                self.scale,
                self.width,
                self.height,
                self.output,
                errback=lambda err: self.signals.failed.emit(self.input_path, str(err)),
                callback=self.signals.resized.emit,
                backend=self.backend,
                quality=self.quality,
                logger=self.logger,
            )
        except Exception as ex:  # keep the chain alive whatever the backend raised
            self.signals.failed.emit(self.input_path, str(ex))
