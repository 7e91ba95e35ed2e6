"""
CLI entry point for scansynth.

Usage:
    scansynth draw [--image PATH] [options]
    scansynth sweep IMAGE [options]
    python -m scansynth <command> [options]
"""

import argparse
import logging
import sys
from pathlib import Path

from scansynth.audio.backend import NullAudioBackend
from scansynth.config import ScanConfig, load_config
from scansynth.engine import SonificationEngine
from scansynth.raster import ArrayRaster


def _load_config(args: argparse.Namespace) -> ScanConfig:
    """Merge the optional JSON config with command-line overrides."""
    overrides = {}
    if args.config is not None:
        base = load_config(args.config)
        overrides = dict(vars(base))
    for key in ("fps", "scanner_speed", "band_size", "max_band", "smoothing"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    return ScanConfig.from_dict(overrides)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scansynth",
        description="Draw with colors, hear them through a sweeping scan line",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser):
        p.add_argument("--config", type=Path, default=None, help="JSON file of config overrides")
        p.add_argument("--band-size", dest="band_size", type=int, default=None,
                       help="Pixels per loudness step (default: 10)")
        p.add_argument("--max-band", dest="max_band", type=int, default=None,
                       help="Number of loudness steps (default: 5)")
        p.add_argument("--smoothing", type=float, default=None,
                       help="Loudness glide rate in [0, 1] (default: 0.2)")

    draw = sub.add_parser("draw", help="Open the interactive sketchpad")
    add_common(draw)
    draw.add_argument("--image", type=Path, default=None, help="Preload an image into the canvas")
    draw.add_argument("--no-audio", action="store_true", help="Run without opening an audio device")
    draw.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (default: 60)")
    draw.add_argument("--speed", dest="scanner_speed", type=int, default=None,
                      help="Scanner speed in pixels per frame (default: 2)")

    sweep = sub.add_parser("sweep", help="Scan an image once without audio and print the voices")
    add_common(sweep)
    sweep.add_argument("image", type=Path, help="Input image (png, jpg, ...)")
    sweep.add_argument("--step", type=int, default=1, help="Columns advanced per frame (default: 1)")

    return parser


def _format_voices(engine: SonificationEngine) -> str:
    active = [v for v in engine.voices if v.is_active]
    if not active:
        return "-"
    return "  ".join(f"{v.pitch}:{v.current_loudness:.2f}" for v in active)


def run_sweep(image: Path, config: ScanConfig, step: int = 1) -> list[str]:
    """
    Scan an image left to right with a silent engine.

    Args:
        image: Image file to scan; its full height is sampled.
        config: Engine constants.
        step: Columns advanced per frame.

    Returns:
        One report line per sampled column.
    """
    raster = ArrayRaster.from_image(image)
    engine = SonificationEngine(raster, config, NullAudioBackend())
    engine.activate()

    lines = []
    for x in range(0, raster.width, max(1, step)):
        engine.tick(x, 0, raster.height - 1)
        lines.append(f"x={x:5d}  {_format_voices(engine)}")

    engine.deactivate()
    return lines


def main(argv: list[str] | None = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "sweep":
        if not args.image.exists():
            print(f"Error: Image file not found: {args.image}", file=sys.stderr)
            sys.exit(1)
        for line in run_sweep(args.image, config, step=args.step):
            print(line)
        return

    from scansynth.visualizers.sketchpad import Sketchpad

    if args.no_audio:
        backend = NullAudioBackend()
    else:
        from scansynth.audio.pygame_backend import PygameAudioBackend
        backend = PygameAudioBackend()

    pad = Sketchpad(config, backend)
    if args.image is not None:
        if not args.image.exists():
            print(f"Error: Image file not found: {args.image}", file=sys.stderr)
            sys.exit(1)
        pad.load_image(args.image)

    print("Space: scan  C: clear  1-9: color  [ ]: brush  Esc: quit")
    pad.run()


if __name__ == "__main__":
    main()
