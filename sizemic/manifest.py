"""Batch job manifests.

A manifest is a small JSON document describing one resize job::

    {
      "description": "...",
      "sourceDir": ".",
      "scale": 0.5,
      "width": 0,
      "height": 0,
      "outputDir": "sizemic",
      "verbose": false
    }

Relative paths inside a manifest are relative to the folder holding the
manifest file. Older manifests carry a ``files`` list instead of relying on
``sourceDir`` being listed at run time; both forms are read.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import InvalidInputError, IOFailureError
from .logger import get_logger
from .path_utils import list_image_files

_logger = get_logger("manifest")

FILE_ENCODING = "utf-8"
MANIFEST_SUFFIX = ".json"
DEFAULT_OUTPUT_DIR = "sizemic"
DESCRIPTION = "Manifest file for batch processing images with sizemic-batch."


@dataclass
class Manifest:
    source_dir: str = "."
    scale: float = 1.0
    width: int = 0
    height: int = 0
    output_dir: str = DEFAULT_OUTPUT_DIR
    verbose: bool = False
    description: str = DESCRIPTION
    files: list[str] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "description": self.description,
            "sourceDir": self.source_dir,
            "scale": self.scale,
            "width": self.width,
            "height": self.height,
            "outputDir": self.output_dir,
            "verbose": self.verbose,
        }
        if self.files is not None:
            data["files"] = list(self.files)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        if not isinstance(data, dict):
            raise IOFailureError("manifest must be a JSON object")
        files = data.get("files")
        if files is not None and not (isinstance(files, list) and all(isinstance(f, str) for f in files)):
            raise IOFailureError("manifest 'files' must be a list of file names")
        try:
            return cls(
                source_dir=str(data.get("sourceDir", ".")),
                scale=float(data.get("scale", 1.0)),
                width=int(data.get("width", 0)),
                height=int(data.get("height", 0)),
                output_dir=str(data.get("outputDir", DEFAULT_OUTPUT_DIR)),
                verbose=bool(data.get("verbose", False)),
                description=str(data.get("description", DESCRIPTION)),
                files=list(files) if files is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise IOFailureError(f"manifest has an invalid value: {e}") from e


def sizing_mode(scale: float, width: int, height: int) -> tuple[float, int, int]:
    """Pick exactly one sizing mode: scale, then width, then height."""
    if scale != 1.0:
        return scale, 0, 0
    if width > 0:
        return 1.0, width, 0
    if height > 0:
        return 1.0, 0, height
    raise InvalidInputError("You must set either 'scale', 'width' or 'height'.")


def generate_manifest(
    source: str | Path,
    scale: float,
    width: int,
    height: int,
    output: str,
    verbose: bool = False,
    manifest_dir: str | Path | None = None,
    include_files: bool = False,
    logger: logging.Logger | None = None,
) -> Manifest:
    """Build a manifest for the images in ``source``.

    ``sourceDir`` is recorded relative to ``manifest_dir`` (the folder the
    manifest will be written to, ``source`` by default). Nothing is written.
    Raises InvalidInputError when ``source`` is not a directory or no sizing
    mode is set.
    """
    log = logger or _logger
    source = Path(source)
    log.info("Generating manifest for '%s'.", source)
    if not source.is_dir():
        raise InvalidInputError(f"'{source}' is not a directory.")

    scale, width, height = sizing_mode(float(scale), int(width), int(height))

    try:
        files = list_image_files(source)
    except OSError as e:
        raise IOFailureError(f"cannot list '{source}': {e}") from e

    for name in files:
        log.info("Adding file '%s'.", source / name)
    if not files:
        log.warning("No images found in '%s'.", source)

    output = (output or "").strip() or DEFAULT_OUTPUT_DIR
    base = Path(manifest_dir) if manifest_dir is not None else source
    source_dir = Path(os.path.relpath(source.resolve(), base.resolve())).as_posix()

    return Manifest(
        source_dir=source_dir,
        scale=scale,
        width=width,
        height=height,
        output_dir=output,
        verbose=bool(verbose),
        files=files if include_files else None,
    )


def manifest_path(directory: str | Path, name: str) -> Path:
    return Path(directory) / f"{name}{MANIFEST_SUFFIX}"


def write_manifest(
    manifest: Manifest, directory: str | Path, name: str, logger: logging.Logger | None = None
) -> Path:
    log = logger or _logger
    filename = manifest_path(directory, name)
    try:
        filename.write_text(manifest.to_json(), encoding=FILE_ENCODING)
    except OSError as e:
        raise IOFailureError(f"cannot write manifest '{filename}': {e}") from e
    log.info("Manifest written to '%s'.", filename)
    return filename


def read_manifest(path: str | Path) -> Manifest:
    try:
        with open(path, encoding=FILE_ENCODING) as f:
            data = json.load(f)
    except OSError as e:
        raise IOFailureError(f"Could not read manifest '{path}': {e}") from e
    except ValueError as e:
        raise IOFailureError(f"Manifest '{path}' is not valid JSON: {e}") from e
    return Manifest.from_dict(data)
