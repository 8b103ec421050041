"""
Headless rendering and export.

Frames are rendered on an OffscreenHost and either piped to ffmpeg via
stdin (no intermediate files) or written out as a PNG snapshot.
"""

import itertools
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Iterator

import numpy as np
from PIL import Image

from lissatable.driver import FrameLoop, LoopConfig
from lissatable.host import OffscreenHost

logger = logging.getLogger(__name__)

# libx264 (preset, crf) for each --quality choice
X264_SETTINGS = {
    "high": ("slow", 18),
    "medium": ("medium", 23),
    "fast": ("ultrafast", 28),
}


def render_frames(
    width: int,
    height: int,
    n_frames: int,
    config: LoopConfig | None = None,
) -> Iterator[np.ndarray]:
    """
    Render the animation without a window.

    Args:
        width: Frame width.
        height: Frame height.
        n_frames: Number of frames to yield.
        config: Loop configuration. target_fps is ignored; frames are
            produced as fast as they render.

    Yields:
        (H, W, 3) uint8 arrays, one per frame.
    """
    cfg = config or LoopConfig()
    host = OffscreenHost(width, height)
    loop = FrameLoop(host, LoopConfig(target_fps=None, scene=cfg.scene))

    for _ in range(n_frames):
        loop.step()
        yield host.last_frame


def save_frame(frame: np.ndarray, path: Path) -> Path:
    """Write an (H, W, 3) uint8 frame to an image file (format from suffix)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(frame).save(path)
    return path


def _ffmpeg_command(output_path: Path, width: int, height: int, fps: float, quality: str) -> list[str]:
    preset, crf = X264_SETTINGS[quality]
    return [
        "ffmpeg", "-y",
        # Only errors on stderr; progress stats would fill it up
        "-nostats", "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", f"{fps:g}",
        "-i", "pipe:0",
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", str(crf),
        "-pix_fmt", "yuv420p",
        "-an",
        str(output_path),
    ]


def encode_video(
    frames: Iterable[np.ndarray],
    output_path: Path,
    fps: float = 60,
    quality: str = "medium",
    on_frame: Callable[[int], None] | None = None,
) -> Path:
    """
    Pipe rendered frames into a silent H.264 MP4.

    The frame size is taken from the first frame; every later frame must
    match it.

    Args:
        frames: (H, W, 3) uint8 arrays, e.g. from render_frames().
        output_path: Destination MP4.
        fps: Playback rate, fractional rates allowed.
        quality: Key of X264_SETTINGS.
        on_frame: Called with the running count after each frame is written.

    Raises:
        ValueError: ``frames`` is empty.
        RuntimeError: ffmpeg exited with an error.
    """
    frames = iter(frames)
    first = next(frames, None)
    if first is None:
        raise ValueError("No frames to encode")
    height, width = first.shape[:2]

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = _ffmpeg_command(output_path, width, height, fps, quality)
    logger.debug("Running %s", " ".join(cmd))

    written = 0
    # stderr goes to a file so ffmpeg can never block on a full pipe
    with tempfile.TemporaryFile() as errlog:
        proc = subprocess.Popen(cmd, stdin=subprocess.PIPE, stdout=subprocess.DEVNULL, stderr=errlog)
        try:
            for frame in itertools.chain([first], frames):
                proc.stdin.write(np.ascontiguousarray(frame).tobytes())
                written += 1
                if on_frame is not None:
                    on_frame(written)
        except BrokenPipeError:
            logger.warning("ffmpeg stopped reading after %d frames", written)
        finally:
            proc.stdin.close()
            proc.wait()

        if proc.returncode != 0:
            errlog.seek(0)
            tail = errlog.read().decode("utf-8", errors="replace").strip().splitlines()[-5:]
            raise RuntimeError(f"ffmpeg exited with code {proc.returncode}: " + "\n".join(tail))

    logger.info("Wrote %d frames (%dx%d) to %s", written, width, height, output_path)
    return output_path
