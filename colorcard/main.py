from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from colorcard.src.card_core.config import DEFAULT_METRIC, DEFAULT_PALETTE_PATH, VIEWPORT_SIZE
from colorcard.src.card_core.distance import METRICS
from colorcard.src.card_core.io import (
    read_image_rgb,
    sample_viewport_pixel,
    save_card,
    write_result_json,
)
from colorcard.src.card_core.logging_config import setup_logging
from colorcard.src.card_core.models import NoMatch
from colorcard.src.card_core.palette import PaletteIndex
from colorcard.src.card_core.render import card_filename, compose_card
from colorcard.src.card_core.session import CardSession

EXIT_NO_MATCH = 2


def _channel(value: str) -> int:
    channel = int(value)
    if not 0 <= channel <= 255:
        raise argparse.ArgumentTypeError(f"channel must be within 0..255, got {channel}")
    return channel


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="colorcard",
        description="Match photo colors against a named palette and print color cards.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (logs go to stderr).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_palette_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--palette",
            default=str(DEFAULT_PALETTE_PATH),
            help="Path or URL to a palette (.json/.csv). Defaults to the bundled palette.",
        )
        sub.add_argument(
            "--metric",
            default=DEFAULT_METRIC,
            choices=sorted(METRICS),
            help="Color distance metric used for matching.",
        )

    match = subparsers.add_parser("match", help="Find the closest palette color for an RGB value.")
    match.add_argument("--rgb", nargs=3, type=_channel, required=True, metavar=("R", "G", "B"))
    add_palette_options(match)

    palette = subparsers.add_parser("palette", help="Report whether a palette loads and how many colors it has.")
    add_palette_options(palette)

    card = subparsers.add_parser(
        "card",
        help="Crop a photo, sample one pixel, match it and render a printable card.",
    )
    card.add_argument("--image", required=True, help="Path or URL to the input image.")
    add_palette_options(card)
    card.add_argument("--viewport-size", type=float, default=VIEWPORT_SIZE)
    card.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Zoom factor applied to the initial fit (values below the fit are clamped).",
    )
    card.add_argument(
        "--pivot",
        nargs=2,
        type=float,
        default=None,
        metavar=("X", "Y"),
        help="Zoom pivot in viewport coordinates. Defaults to the viewport center.",
    )
    card.add_argument(
        "--pan",
        nargs=2,
        type=float,
        default=(0.0, 0.0),
        metavar=("DX", "DY"),
        help="Drag offset applied after zooming, in viewport pixels.",
    )
    card.add_argument(
        "--sample",
        nargs=2,
        type=float,
        default=None,
        metavar=("X", "Y"),
        help="Viewport coordinate to sample. Defaults to the viewport center.",
    )
    card.add_argument("--title", default="", help="Card title.")
    card.add_argument("--comment", default="", help="Card comment.")
    card.add_argument(
        "--out",
        default=None,
        help="Output PNG path. Defaults to ColorCard_<name>.png in the current directory.",
    )
    card.add_argument(
        "--json-out",
        default=None,
        help="Optional JSON output path. If omitted, prints JSON to stdout.",
    )
    return parser


def _emit(payload: dict, json_out: str | None = None) -> None:
    if json_out:
        write_result_json(payload, json_out)
    else:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


def _run_match(args: argparse.Namespace) -> int:
    index = PaletteIndex(metric=args.metric)
    index.load_from(args.palette)
    outcome = index.find_closest(*args.rgb)
    if isinstance(outcome, NoMatch):
        print(f"{outcome.reason}: {index.status_message}", file=sys.stderr)
        return EXIT_NO_MATCH
    _emit(outcome.to_dict())
    return 0


def _run_palette(args: argparse.Namespace) -> int:
    index = PaletteIndex(metric=args.metric)
    status = index.load_from(args.palette)
    _emit(
        {
            "status": status.value,
            "loaded": index.loaded,
            "colors": len(index),
            "dropped": len(index.dropped),
            "message": index.status_message,
        }
    )
    return 0 if index.loaded else EXIT_NO_MATCH


def _run_card(args: argparse.Namespace) -> int:
    session = CardSession(metric=args.metric, viewport_size=args.viewport_size)
    session.load_palette_from(args.palette)
    session.title = args.title
    session.comment = args.comment

    image_rgb = read_image_rgb(args.image)
    height, width = image_rgb.shape[:2]
    session.open_image(width, height)

    center = args.viewport_size / 2.0
    pivot_x, pivot_y = args.pivot if args.pivot else (center, center)
    if args.zoom != 1.0:
        session.zoom(args.zoom, pivot_x, pivot_y)
    dx, dy = args.pan
    if dx or dy:
        session.pan(dx, dy)
    session.confirm_crop()

    sample_x, sample_y = args.sample if args.sample else (center, center)
    pixel = sample_viewport_pixel(image_rgb, session.viewport, sample_x, sample_y)
    outcome = session.sample(*pixel.rgb)
    source_rect = session.viewport.to_source_rect()

    if isinstance(outcome, NoMatch):
        print(f"{outcome.reason}: {session.palette.status_message}", file=sys.stderr)
        return EXIT_NO_MATCH

    card = compose_card(image_rgb, source_rect, outcome, title=session.title, comment=session.comment)
    out_path = Path(args.out) if args.out else Path.cwd() / card_filename(outcome)
    save_card(card, out_path)

    payload = outcome.to_dict()
    payload["source_rect"] = source_rect.to_dict()
    payload["card_path"] = str(out_path)
    _emit(payload, args.json_out)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    if args.command == "match":
        return _run_match(args)
    if args.command == "palette":
        return _run_palette(args)
    if args.command == "card":
        return _run_card(args)

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    sys.exit(main())
