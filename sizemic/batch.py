"""Manifest runner.

Resizes the images a manifest describes, one at a time. Each file is handed
to a ``ResizeTask`` on the global thread pool and the next file is only
started from the previous task's ``resized``/``failed`` signal, so at most one
resize is in flight. A failing file is logged and skipped; the batch always
runs to the end.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PySide6.QtCore import QCoreApplication, QEventLoop, QObject, QThreadPool, Signal, Slot

from .errors import IOFailureError
from .image_engine.resize import DEFAULT_QUALITY, ResizeTask
from .logger import get_logger
from .manifest import Manifest
from .path_utils import abs_path, has_image_extension, list_image_files, resolve_against

_logger = get_logger("batch")


@dataclass
class BatchReport:
    total: int = 0
    resized: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed


def reset_output_dir(path: str | Path, logger: logging.Logger | None = None) -> bool:
    """Leave ``path`` as an existing, empty directory.

    Existing contents are removed entry by entry and the directory itself is
    kept. Failures are logged, not raised; returns False if any step failed.
    """
    log = logger or _logger
    path = Path(path)
    ok = True

    if path.exists() and not path.is_dir():
        try:
            path.unlink()
        except OSError as e:
            log.error("Unable to remove '%s': %s", path, e)
            ok = False

    if path.is_dir():
        for entry in path.iterdir():
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                log.error("Unable to remove '%s': %s", entry, e)
                ok = False
        return ok

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        log.error("Unable to create '%s': %s", path, e)
        ok = False
    return ok


class BatchRunner(QObject):
    """Run a loaded manifest.

    Relative paths in the manifest are resolved against the folder holding
    ``manifest_path``.
    """

    progress = Signal(int, int, str)  # index (1-based), total, input path
    file_resized = Signal(str)
    file_failed = Signal(str, str)  # input path, error
    finished = Signal(int, int)  # resized count, total

    def __init__(
        self,
        manifest: Manifest,
        manifest_path: str | Path,
        backend: Any = None,
        quality: float = DEFAULT_QUALITY,
        logger: logging.Logger | None = None,
        thread_pool: QThreadPool | None = None,
    ):
        super().__init__()
        self.manifest = manifest
        self.manifest_path = Path(manifest_path).expanduser().resolve()
        self.base_dir = self.manifest_path.parent
        self.source_dir = resolve_against(self.base_dir, manifest.source_dir)
        self.output_dir = resolve_against(self.base_dir, manifest.output_dir)
        self.backend = backend
        self.quality = quality
        self.logger = logger or _logger
        self._pool = thread_pool or QThreadPool.globalInstance()

        self.files: list[Path] = []
        self.current_index = -1
        self.report = BatchReport()
        self._current_task: ResizeTask | None = None
        self._running = False
        self._done = False

    def collect_files(self) -> list[Path]:
        """Input images for this run. Raises IOFailureError if the source can't be listed."""
        if self.manifest.files is not None:
            return [
                resolve_against(self.source_dir, name)
                for name in self.manifest.files
                if has_image_extension(name)
            ]
        try:
            names = list_image_files(self.source_dir)
        except OSError as e:
            raise IOFailureError(f"Could not read source directory '{self.source_dir}': {e}") from e
        return [self.source_dir / name for name in names]

    def overlap_error(self) -> str | None:
        """Why clearing the output directory would destroy inputs, or None."""
        out = self.output_dir
        if out == self.source_dir or out in self.source_dir.parents:
            return f"Output directory '{out}' contains the source directory."
        if out in self.manifest_path.parents:
            return f"Output directory '{out}' contains the manifest."
        for path in self.files:
            if out in abs_path(path).parents:
                return f"Output directory '{out}' contains input '{path}'."
        return None

    def start(self) -> None:
        if self._running or self._done:
            return
        self._running = True

        try:
            self.files = self.collect_files()
        except IOFailureError as e:
            self.logger.error("ERROR: %s", e)
            self.report.error = str(e)
            self._finish()
            return

        msg = self.overlap_error()
        if msg:
            self.logger.error("ERROR: %s", msg)
            self.report.error = msg
            self._finish()
            return

        reset_output_dir(self.output_dir, self.logger)

        self.report.total = len(self.files)
        if not self.files:
            self._finish()
            return

        if self.backend is None:
            try:
                from .image_engine.vips_backend import VipsBackend

                self.backend = VipsBackend()
            except (ImportError, OSError) as e:
                self.logger.error("ERROR: image library unavailable: %s", e)
                self.report.error = str(e)
                self._finish()
                return

        self._start_next()

    def _start_next(self) -> None:
        self.current_index += 1
        if self.current_index >= len(self.files):
            self._finish()
            return

        src = self.files[self.current_index]
        self.progress.emit(self.current_index + 1, len(self.files), str(src))
        task = ResizeTask(
            str(src),
            self.manifest.scale,
            self.manifest.width,
            self.manifest.height,
            str(self.output_dir / src.name),
            backend=self.backend,
            quality=self.quality,
            logger=self.logger,
        )
        task.signals.resized.connect(self._on_resized)
        task.signals.failed.connect(self._on_failed)
        self._current_task = task
        self._pool.start(task)

    @Slot(str)
    def _on_resized(self, path: str) -> None:
        self.logger.info("File resized: %s", os.path.basename(path))
        self.report.resized.append(path)
        self.file_resized.emit(path)
        self._start_next()

    @Slot(str, str)
    def _on_failed(self, path: str, error: str) -> None:
        self.logger.error("ERROR: Could not resize file '%s': %s", path, error)
        self.report.failed.append((path, error))
        self.file_failed.emit(path, error)
        self._start_next()

    def _finish(self) -> None:
        self._current_task = None
        self._running = False
        self._done = True
        self.finished.emit(len(self.report.resized), self.report.total)

    def run(self) -> BatchReport:
        """Start the batch and block until it has finished."""
        if QCoreApplication.instance() is None:
            raise RuntimeError("BatchRunner.run() needs a QCoreApplication")
        loop = QEventLoop()
        self.finished.connect(loop.quit)
        self.start()
        if not self._done:
            loop.exec()
        return self.report


def run_manifest(
    manifest: Manifest,
    manifest_path: str | Path,
    backend: Any = None,
    quality: float = DEFAULT_QUALITY,
    logger: logging.Logger | None = None,
) -> BatchReport:
    _app = QCoreApplication.instance() or QCoreApplication([])
    runner = BatchRunner(manifest, manifest_path, backend=backend, quality=quality, logger=logger)
    report = runner.run()
    return report
