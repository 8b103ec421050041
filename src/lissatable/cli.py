"""
CLI entry point for the Lissajous curve table.

Usage:
    lissatable [options]                       # animate in a window
    lissatable -o table.mp4 [--frames N]       # render a video headlessly
    lissatable --snapshot table.png [--frames N]
    python -m lissatable [options]
"""

import argparse
import logging
import signal
import sys
import time
from pathlib import Path

from lissatable.driver import FrameLoop, LoopConfig
from lissatable.encoder import encode_video, render_frames, save_frame
from lissatable.host import PygameHost
from lissatable.logging_config import setup_logging
from lissatable.scene import SceneConfig


PROGRESS_WIDTH = 30


def _show_progress(done: int, total: int):
    """Redraw a one-line progress meter (a line per 5% when not a tty)."""
    filled = PROGRESS_WIDTH * done // max(total, 1)
    meter = f"[{'=' * filled:<{PROGRESS_WIDTH}}] {done}/{total} frames"
    finished = done >= total
    if sys.stdout.isatty():
        print("\r" + meter, end="\n" if finished else "", flush=True)
    elif finished or done % max(1, total // 20) == 0:
        print(meter, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lissatable",
        description="Animated table of Lissajous curves",
    )

    # Viewport
    parser.add_argument("--width", type=int, default=700, help="Window/frame width (default: 700)")
    parser.add_argument("--height", type=int, default=700, help="Window/frame height (default: 700)")
    parser.add_argument(
        "-f", "--fps", type=float, default=None,
        help="Target frame rate (default: uncapped in a window, 60 for video)",
    )
    parser.add_argument(
        "--cell-size", type=float, default=80.0,
        help="Grid cell size in pixels (default: 80)",
    )

    # Headless export
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Render headlessly to this MP4 instead of opening a window",
    )
    parser.add_argument(
        "--snapshot", type=Path, default=None,
        help="Render headlessly and save the last frame to this PNG",
    )
    parser.add_argument(
        "-n", "--frames", type=int, default=None,
        help="Frames to render headlessly (default: one revolution)",
    )
    parser.add_argument(
        "-q", "--quality", type=str, default="medium",
        choices=["high", "medium", "fast"],
        help="Encoding quality (default: medium)",
    )

    # Logging
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")

    return parser


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _run_window(config: LoopConfig):
    host = PygameHost(config.initial_size, config.title)
    loop = FrameLoop(host, config)
    signal.signal(signal.SIGTERM, lambda signum, frame: loop.stop())
    try:
        loop.run()
    finally:
        host.close()


def _run_video(args, config: LoopConfig, n_frames: int):
    fps = args.fps or 60.0
    width, height = config.initial_size

    print(f"Rendering {n_frames} frames at {width}x{height} @ {fps:g}fps")
    t0 = time.time()
    frames = render_frames(width, height, n_frames, config)

    try:
        encode_video(
            frames,
            args.output,
            fps=fps,
            quality=args.quality,
            on_frame=lambda done: _show_progress(done, n_frames),
        )
    except FileNotFoundError:
        _fail("ffmpeg not found on PATH")
    except RuntimeError as e:
        _fail(str(e))

    elapsed = time.time() - t0
    size_mb = args.output.stat().st_size / 1024 / 1024
    print(f"Wrote {args.output} ({size_mb:.1f} MB) in {elapsed:.1f}s")


def _run_snapshot(args, config: LoopConfig, n_frames: int):
    width, height = config.initial_size
    last = None
    for i, frame in enumerate(render_frames(width, height, n_frames, config)):
        last = frame
        _show_progress(i + 1, n_frames)
    save_frame(last, args.snapshot)
    print(f"  Output: {args.snapshot}")


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(getattr(logging, args.log_level), args.log_file)

    if args.width <= 0 or args.height <= 0:
        _fail(f"Invalid size {args.width}x{args.height}")
    if args.fps is not None and args.fps <= 0:
        _fail(f"Invalid frame rate {args.fps}")
    if args.cell_size <= 0:
        _fail(f"Invalid cell size {args.cell_size}")
    if args.frames is not None and args.frames <= 0:
        _fail(f"Invalid frame count {args.frames}")

    scene_cfg = SceneConfig(cell_size=args.cell_size)
    config = LoopConfig(
        target_fps=args.fps,
        initial_size=(args.width, args.height),
        scene=scene_cfg,
    )
    n_frames = args.frames or scene_cfg.frames_per_revolution

    if args.output is not None:
        _run_video(args, config, n_frames)
    if args.snapshot is not None:
        _run_snapshot(args, config, n_frames)
    if args.output is None and args.snapshot is None:
        _run_window(config)


if __name__ == "__main__":
    main()
