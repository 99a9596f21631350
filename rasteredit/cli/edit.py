"""rasteredit CLI.

Applies one edit (crop, color, filter, rotation, resize, overlay) to a set
of images and writes PNG or JPEG files, without a GUI.
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
import time
from typing import List, Optional
from urllib.parse import urlparse

from rasteredit.domain.errors import RasterEditError
from rasteredit.domain.models import EditState, ExportFormat, ImageFormat
from rasteredit.features.color.models import FilterKind, FilterSelection
from rasteredit.features.geometry.models import CropRect, ResizeTarget
from rasteredit.infrastructure.loaders.factory import source_for
from rasteredit.infrastructure.loaders.url_loader import is_url
from rasteredit.kernel.system.config import (
    APP_CONFIG,
    DEFAULT_EDIT_STATE,
    DEFAULT_EXPORT_FORMAT,
    OVERLAY_PRESETS,
)
from rasteredit.kernel.system.logging import setup_logging
from rasteredit.services.export.service import encode_buffer
from rasteredit.services.export.templating import FilenameTemplater
from rasteredit.services.rendering.engine import EditPipeline

FORMAT_MAP = {
    "png": ImageFormat.PNG,
    "jpeg": ImageFormat.JPEG,
}

FILTER_MAP = {kind.value: kind for kind in FilterKind}

FORMAT_CHOICES = tuple(FORMAT_MAP.keys())
FILTER_CHOICES = tuple(FILTER_MAP.keys())
OVERLAY_CHOICES = tuple(OVERLAY_PRESETS.keys())


def _quality(value: str) -> int:
    quality = int(value)
    if not 1 <= quality <= 100:
        raise argparse.ArgumentTypeError(f"quality must be in 1-100, got {quality}")
    return quality


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rasteredit",
        description="rasteredit -- apply an edit to images and export them",
        epilog="Example: rasteredit --filter sepia --intensity 60 --format jpeg photo.png",
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="FILE_OR_URL",
        help="Input image files or http(s) URLs",
    )

    parser.add_argument(
        "--settings",
        default=None,
        metavar="JSON_FILE",
        help="Load a full EditState from a JSON settings file",
    )

    parser.add_argument("--brightness", type=float, default=None, metavar="PCT", help="Brightness 0-200 (default: 100)")
    parser.add_argument("--contrast", type=float, default=None, metavar="PCT", help="Contrast 0-200 (default: 100)")
    parser.add_argument("--saturation", type=float, default=None, metavar="PCT", help="Saturation 0-200 (default: 100)")
    parser.add_argument("--hue", type=float, default=None, metavar="DEG", help="Hue rotation in degrees (default: 0)")

    parser.add_argument(
        "--filter",
        choices=FILTER_CHOICES,
        default=None,
        dest="filter_kind",
        help="Named filter (default: none)",
    )

    parser.add_argument(
        "--intensity",
        type=float,
        default=None,
        metavar="PCT",
        help="Filter intensity 0-100 (default: 100)",
    )

    parser.add_argument(
        "--rotation",
        type=float,
        default=None,
        metavar="DEG",
        help="Clockwise rotation in degrees (default: 0)",
    )

    parser.add_argument(
        "--crop",
        type=int,
        nargs=4,
        default=None,
        metavar=("X", "Y", "W", "H"),
        help="Crop rectangle in source pixels (default: full frame)",
    )

    parser.add_argument(
        "--resize",
        type=int,
        nargs=2,
        default=None,
        metavar=("W", "H"),
        help="Output size in pixels; aspect ratio is not preserved (default: keep)",
    )

    parser.add_argument(
        "--overlay",
        choices=OVERLAY_CHOICES,
        default=None,
        help="Overlay preset (default: none)",
    )

    parser.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default="png",
        dest="output_format",
        help="Output file format (default: png)",
    )

    parser.add_argument(
        "--quality",
        type=_quality,
        default=None,
        metavar="1-100",
        help=f"JPEG quality (default: {APP_CONFIG.default_jpeg_quality})",
    )

    parser.add_argument(
        "--output",
        default=APP_CONFIG.default_export_dir,
        metavar="DIR",
        help=f"Output directory (default: {APP_CONFIG.default_export_dir})",
    )

    parser.add_argument(
        "--filename-pattern",
        default=None,
        metavar="TEMPLATE",
        help=f'Jinja2 filename template (default: "{APP_CONFIG.filename_pattern}")',
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log every pipeline stage",
    )

    return parser


def build_state(args: argparse.Namespace) -> EditState:
    """Builds the EditState with loading priority:
    DEFAULT -> --settings -> CLI flags
    """
    state = DEFAULT_EDIT_STATE

    if args.settings:
        with open(os.path.abspath(args.settings), "r") as f:
            state = EditState.from_dict(json.load(f))

    color_overrides = {}
    if args.brightness is not None:
        color_overrides["brightness"] = args.brightness
    if args.contrast is not None:
        color_overrides["contrast"] = args.contrast
    if args.saturation is not None:
        color_overrides["saturation"] = args.saturation
    if args.hue is not None:
        color_overrides["hue_degrees"] = args.hue
    color = dataclasses.replace(state.color, **color_overrides) if color_overrides else state.color

    selection = state.filter
    if args.filter_kind is not None:
        selection = FilterSelection(FILTER_MAP[args.filter_kind], selection.intensity)
    if args.intensity is not None:
        selection = dataclasses.replace(selection, intensity=args.intensity)

    overrides = {"color": color, "filter": selection}
    if args.rotation is not None:
        overrides["rotation"] = args.rotation
    if args.crop is not None:
        overrides["crop"] = CropRect(*args.crop)
    if args.resize is not None:
        overrides["resize"] = ResizeTarget(*args.resize)
    if args.overlay is not None:
        overrides["overlay"] = OVERLAY_PRESETS[args.overlay]

    return dataclasses.replace(state, **overrides)


def build_export_format(args: argparse.Namespace) -> ExportFormat:
    kind = FORMAT_MAP[args.output_format]
    if kind is ImageFormat.JPEG:
        quality = args.quality if args.quality is not None else APP_CONFIG.default_jpeg_quality
        return ExportFormat.jpeg(quality)
    return DEFAULT_EXPORT_FORMAT


def original_name(location: str) -> str:
    """Base name without extension, for a path or a URL."""
    path = urlparse(location).path if is_url(location) else location
    name = os.path.splitext(os.path.basename(path.rstrip("/")))[0]
    return name or "image"


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        state = build_state(args)
    except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    export_format = build_export_format(args)
    pattern = args.filename_pattern or APP_CONFIG.filename_pattern
    output_dir = os.path.abspath(args.output)
    os.makedirs(output_dir, exist_ok=True)

    pipeline = EditPipeline()
    templater = FilenameTemplater()

    inputs: List[str] = args.inputs
    total = len(inputs)
    failed = 0
    used_names: set = set()
    print(f"Processing {total} image(s) -> {output_dir}", file=sys.stderr)
    t_start = time.monotonic()

    for i, location in enumerate(inputs, 1):
        name = original_name(location)
        print(f"  [{i}/{total}] {name} ...", file=sys.stderr, end="", flush=True)
        t_file = time.monotonic()

        try:
            source = source_for(location).read()
            result = pipeline.render(source, state)
            data = encode_buffer(result, export_format)

            base_name = templater.render(
                pattern,
                {
                    "original_name": name,
                    "format": export_format.kind.value.lower(),
                    "index": i,
                },
            )
            # Same pattern for several inputs: keep every output
            if base_name in used_names:
                base_name = f"{base_name}_{i}"
            used_names.add(base_name)

            out_path = os.path.join(output_dir, f"{base_name}.{export_format.kind.extension}")
            with open(out_path, "wb") as f:
                f.write(data)

        except (RasterEditError, OSError) as e:
            print(f" ERROR: {e}", file=sys.stderr)
            failed += 1
            continue

        elapsed = time.monotonic() - t_file
        print(f" OK ({elapsed:.1f}s)", file=sys.stderr)

    total_time = time.monotonic() - t_start
    succeeded = total - failed
    print(f"Done: {succeeded}/{total} succeeded in {total_time:.1f}s", file=sys.stderr)

    return 1 if failed > 0 else 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
