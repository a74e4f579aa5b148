"""Command line entry points: ``sizemic`` (one image) and ``sizemic-batch``."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .errors import SizemicError
from .image_engine.resize import resize
from .logger import level_for_verbose, setup_logger
from .manifest import MANIFEST_SUFFIX, generate_manifest, read_manifest, write_manifest
from .path_utils import CURRENT_DIR
from .settings_manager import SettingsManager


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    # -h is taken by --height, so help is long-form only.
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument("--scale", "-s", type=float, default=1.0, help="Amount to scale the image e.g., 0.5.")
    parser.add_argument("--width", "-w", type=int, default=0, help="Resize width to this (in pixels).")
    parser.add_argument("--height", "-h", type=int, default=0, help="Resize height to this (in pixels).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Barf extra output to console.")
    parser.add_argument("--log-level", help="Set log level (overrides --verbose).")


def _configure_logging(args: argparse.Namespace):
    if args.log_level:
        os.environ["SIZEMIC_LOG_LEVEL"] = args.log_level
    return setup_logger(level_for_verbose(args.verbose))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sizemic", description="Resize a single image.", add_help=False)
    parser.add_argument("--input", "-i", required=True, help="Image to process. Use relative paths.")
    parser.add_argument(
        "--output",
        "-o",
        default=CURRENT_DIR,
        help="File to save the resized image as. Defaults to <input>_sizemic.<ext> beside the input.",
    )
    _add_common_options(parser)
    return parser


def build_batch_parser(settings: SettingsManager | None = None) -> argparse.ArgumentParser:
    settings = settings or SettingsManager()
    parser = argparse.ArgumentParser(
        prog="sizemic-batch", description="Generate or run sizemic batch manifests.", add_help=False
    )
    parser.add_argument(
        "--manifest",
        "-m",
        default=settings.manifest_name + MANIFEST_SUFFIX,
        help="Manifest file to use for batch processing.",
    )
    parser.add_argument("--generate", "-g", action="store_true", help="Generate a manifest.")
    parser.add_argument("--source", "-r", default=CURRENT_DIR, help="Folder of images to add to the manifest.")
    parser.add_argument("--output", "-o", default="", help="Output folder, relative to the manifest.")
    parser.add_argument("--name", "-n", default=settings.manifest_name, help="Name of the manifest.")
    parser.add_argument(
        "--list-files", action="store_true", help="Record the image list in the manifest instead of the folder."
    )
    _add_common_options(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = _configure_logging(args)
    settings = SettingsManager()

    failures: list[Exception] = []
    try:
        result = resize(
            args.input,
            args.scale,
            args.width,
            args.height,
            args.output,
            errback=failures.append,
            quality=settings.quality,
            suffix=settings.output_suffix,
            logger=logger,
        )
    except (ImportError, OSError) as e:
        logger.error("ERROR: image library unavailable: %s", e)
        return 1
    if failures or result is None:
        for err in failures:
            logger.error("ERROR: Could not resize file: %s", err)
        return 1
    return 0


def _resolve_manifest_path(raw: str) -> Path:
    path = Path(raw.strip())
    if path.suffix != MANIFEST_SUFFIX and not path.exists():
        return path.with_name(path.name + MANIFEST_SUFFIX)
    return path


def batch_main(argv: list[str] | None = None) -> int:
    settings = SettingsManager()
    args = build_batch_parser(settings).parse_args(argv)
    logger = _configure_logging(args)

    if args.generate:
        try:
            manifest = generate_manifest(
                args.source,
                args.scale,
                args.width,
                args.height,
                args.output or settings.output_dir,
                verbose=args.verbose,
                include_files=args.list_files,
                logger=logger,
            )
            write_manifest(manifest, args.source, args.name, logger=logger)
        except SizemicError as e:
            logger.error("ERROR: %s", e)
            return 1
        return 0

    if not args.manifest.strip():
        build_batch_parser(settings).print_usage(sys.stderr)
        return 2

    manifest_file = _resolve_manifest_path(args.manifest)
    try:
        manifest = read_manifest(manifest_file)
    except SizemicError as e:
        logger.error("ERROR: %s", e)
        return 1

    if manifest.verbose and not args.log_level:
        logger.setLevel(level_for_verbose(True))

    from .batch import run_manifest

    report = run_manifest(manifest, manifest_file, quality=settings.quality, logger=logger)
    if report.error:
        return 1
    if report.failed:
        logger.error("%d of %d file(s) could not be resized.", len(report.failed), report.total)
        return 1
    logger.info("Resized %d file(s) into '%s'.", len(report.resized), manifest.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
