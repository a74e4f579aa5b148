"""sizemic - batch image resizing driven by JSON manifests."""

__version__ = "0.3.0"
