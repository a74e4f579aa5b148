"""libvips collaborator used for probing and resizing images.

The backend is deliberately thin: everything that decodes or encodes pixels
is delegated to pyvips. Errors from the library surface as
``ExternalToolError`` so callers only have to handle one kind.
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Any, NamedTuple

from sizemic.errors import ExternalToolError
from sizemic.logger import get_logger

_logger = get_logger("vips")

# Savers that take a Q factor (0-100).
_QUALITY_FORMATS = {"jpg", "webp"}
_ALPHA_LESS_FORMATS = {"jpg"}

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


class ImageInfo(NamedTuple):
    width: int
    height: int


class VipsBackend:
    """identify/resize on top of pyvips."""

    def __init__(self) -> None:
        pyvips = _get_pyvips_module()
        # Batch runs touch every file once; caching decoded images only grows memory.
        with contextlib.suppress(AttributeError):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
            pyvips.cache_set_max_files(0)

    def identify(self, path: str) -> ImageInfo:
        pyvips = _get_pyvips_module()
        try:
            image = pyvips.Image.new_from_file(str(path))
            return ImageInfo(int(image.width), int(image.height))
        except (pyvips.Error, OSError) as e:
            _logger.debug("identify failed: %s: %s", path, e)
            raise ExternalToolError(str(path), str(e).strip()) from e

    def resize(
        self,
        src_path: str,
        dst_path: str,
        quality: float,
        format: str,
        width: int,
        height: int,
    ) -> None:
        """Resize ``src_path`` to exactly ``width`` x ``height`` and save it as ``format``."""
        pyvips = _get_pyvips_module()
        if width < 1 or height < 1:
            raise ExternalToolError(str(src_path), f"invalid target size {width}x{height}")
        try:
            image = pyvips.Image.new_from_file(str(src_path))
            image = image.thumbnail_image(width, height=height, size=pyvips.Size.FORCE)
            if format in _ALPHA_LESS_FORMATS and image.hasalpha():
                image = image.flatten(background=[255] * (image.bands - 1))
            options: dict[str, Any] = {}
            if format in _QUALITY_FORMATS:
                options["Q"] = max(1, min(100, round(quality * 100)))
            data = image.write_to_buffer(f".{format}", **options)
        except pyvips.Error as e:
            _logger.debug("resize failed: %s: %s", src_path, e)
            raise ExternalToolError(str(src_path), str(e).strip()) from e

        try:
            Path(dst_path).write_bytes(data)
        except OSError as e:
            raise ExternalToolError(str(src_path), f"cannot write '{dst_path}': {e}") from e
