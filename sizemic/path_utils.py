"""Path helpers shared by the manifest generator, the runner and the resizer.

Keep this module free of Qt and pyvips dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif"})

CURRENT_DIR = "."
DEFAULT_SUFFIX = "_sizemic"


def abs_path(path: str | Path) -> Path:
    """Return an absolute path without requiring that it exists."""
    p = Path(path).expanduser()
    try:
        return p.resolve(strict=False)
    except OSError:
        return p.absolute()


def resolve_against(base_dir: str | Path, path: str | Path) -> Path:
    """Resolve ``path`` relative to ``base_dir`` unless it is already absolute."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return abs_path(Path(base_dir) / p)


def extension(name: str | Path) -> str:
    """Lower-cased extension without the dot ('' when there is none)."""
    base = os.path.basename(str(name))
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[1].lower()


def has_image_extension(name: str | Path) -> bool:
    return extension(name) in IMAGE_EXTENSIONS


def list_image_files(folder: str | Path) -> list[str]:
    """Names of the regular files in ``folder`` with an image extension.

    Raises OSError when the folder cannot be listed.
    """
    folder = Path(folder)
    names = []
    for entry in sorted(os.listdir(folder)):
        if (folder / entry).is_file() and has_image_extension(entry):
            names.append(entry)
    return names


def output_name(output: str, input_path: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """Output file for a resize.

    ``"."`` means "next to the input": the suffix goes in front of the
    input's extension (``photo.jpg`` -> ``photo_sizemic.jpg``). Anything else
    is used as-is.
    """
    if output == CURRENT_DIR:
        head, sep, tail = input_path.rpartition(".")
        if not sep or os.sep in tail or "/" in tail:
            return input_path + suffix
        return f"{head}{suffix}.{tail}"
    return output


def image_format(input_path: str) -> str:
    """Encoder format for ``input_path``; 'jpeg' is normalized to 'jpg'."""
    ext = extension(input_path)
    if ext == "jpeg":
        return "jpg"
    return ext
