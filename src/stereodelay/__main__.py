"""
Command line entry point: python -m stereodelay

    python -m stereodelay render in.wav out.wav --delay 250 --feedback 40 --mix 50
    python -m stereodelay live --seconds 30 --delay 350 --preset slapback.json

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import argparse
import json
import math
import sys
from pathlib import Path
from typing import Optional, Sequence

from stereodelay import __version__
from stereodelay.logger import set_global_logging, get_logger
from stereodelay.params import DelayParams, Param

logger = get_logger(__name__)


def _param_parser() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--preset",
        type=Path,
        help="JSON file with Delay/Feedback/Mix/Bypass values; "
             "explicit options override it",
    )
    parent.add_argument("--delay", type=float, help="Delay time in ms (0-2000)")
    parent.add_argument("--feedback", type=float, help="Feedback in percent (0-100)")
    parent.add_argument("--mix", type=float, help="Wet/dry mix in percent (0-100)")
    parent.add_argument("--bypass", action="store_true", help="Pass audio through unchanged")
    parent.add_argument(
        "--save-preset",
        type=Path,
        help="Write the resulting parameters to this JSON file",
    )
    return parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stereodelay",
        description="Feedback delay effect with fractional delay times.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="DEBUG, INFO, WARNING, ERROR (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    params = _param_parser()

    render = sub.add_parser("render", parents=[params], help="Process an audio file")
    render.add_argument("input", type=Path, help="Input audio file")
    render.add_argument("output", type=Path, help="Output audio file")
    render.add_argument(
        "--tail",
        type=float,
        default=0.0,
        help="Milliseconds of silence appended so echoes ring out (default: 0)",
    )
    render.add_argument("--block-size", type=int, default=1024, help="Frames per block")
    render.add_argument("--subtype", default="PCM_16", help="Output subtype (default: PCM_16)")

    live = sub.add_parser("live", parents=[params], help="Process the sound card input")
    live.add_argument("--seconds", type=float, default=10.0, help="Run time (default: 10)")
    live.add_argument("--sample-rate", type=int, default=44100)
    live.add_argument("--channels", type=int, default=2)
    live.add_argument("--device", default=None, help="Device index or name")
    live.add_argument("--block-size", type=int, default=512, help="Frames per callback")

    return parser


def _load_preset(path: Path) -> DelayParams:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return DelayParams.from_state(json.load(f))
    except (OSError, ValueError) as e:
        raise ValueError(f"cannot load preset: {e}") from e


def resolve_params(args: argparse.Namespace) -> DelayParams:
    """
    Combine --preset and the individual parameter options.

    Raises:
        ValueError: If the preset cannot be read or a value is not finite
    """
    params = DelayParams() if args.preset is None else _load_preset(args.preset)
    overrides = {
        Param.DELAY: args.delay,
        Param.FEEDBACK: args.feedback,
        Param.MIX: args.mix,
        Param.BYPASS: True if args.bypass else None,
    }
    for param, value in overrides.items():
        if value is not None:
            params = params.with_value(param, value)
    for param in Param:
        if not math.isfinite(params.get(param)):
            raise ValueError(f"{param.value} must be finite, got {params.get(param)}")
    return params


def _run_render(args: argparse.Namespace, params: DelayParams) -> int:
    from stereodelay.wav_io import render_file

    frames = render_file(
        str(args.input),
        str(args.output),
        params,
        tail_ms=args.tail,
        block_size=args.block_size,
        subtype=args.subtype,
    )
    print(f"Wrote {frames} frames to {args.output}")
    return 0


def _run_live(args: argparse.Namespace, params: DelayParams) -> int:
    import sounddevice as sd
    from stereodelay.live import LiveDelay

    device = args.device
    if device is not None and device.isdigit():
        device = int(device)
    with LiveDelay(
        params,
        sample_rate=args.sample_rate,
        channels=args.channels,
        device=device,
        blocksize=args.block_size,
    ):
        sd.sleep(int(args.seconds * 1000))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    set_global_logging(level=args.log_level)
    logger.info(f"stereodelay v{__version__} starting...")

    try:
        params = resolve_params(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "render" and not args.input.is_file():
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1

    if args.save_preset is not None:
        with open(args.save_preset, "w", encoding="utf-8") as f:
            json.dump(params.to_state(), f, indent=2)
        logger.info(f"Saved preset to {args.save_preset}")

    if args.command == "render":
        return _run_render(args, params)
    return _run_live(args, params)


if __name__ == "__main__":
    sys.exit(main())
