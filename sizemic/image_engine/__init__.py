"""Image engine - the layer that talks to the image library.

This package provides:
- the libvips collaborator (vips_backend): dimension probing and resizing
- the resize operation (resize): target-size rule and the callback contract

Usage:
    from sizemic.image_engine import resize

    resize("photo.jpg", 0.5, 0, 0, ".", errback=on_error, callback=on_done)
"""

from .resize import ResizeTask, compute_target_size, resize
from .vips_backend import ImageInfo, VipsBackend

__all__ = ["ImageInfo", "ResizeTask", "VipsBackend", "compute_target_size", "resize"]
