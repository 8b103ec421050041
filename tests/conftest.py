"""Pytest configuration and shared fixtures."""

import os
import stat
import sys

# pygame must not try to open a real display during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest


class RecordingHost:
    """
    In-memory host that records every drawing call.

    Calls are stored as (name, args) tuples in ``calls``.
    """

    def __init__(self, width: float = 700.0, height: float = 700.0):
        self.width = width
        self.height = height
        self.calls: list[tuple[str, tuple]] = []
        self.frames_presented = 0
        self.alive = True

    def screen_width(self) -> float:
        return self.width

    def screen_height(self) -> float:
        return self.height

    def resize(self, width: float, height: float):
        self.width = width
        self.height = height

    def clear_background(self, color):
        self.calls.append(("clear_background", (color,)))

    def draw_circle(self, x, y, radius, color):
        self.calls.append(("draw_circle", (x, y, radius, color)))

    def draw_circle_lines(self, x, y, radius, line_width, color):
        self.calls.append(("draw_circle_lines", (x, y, radius, line_width, color)))

    def draw_line(self, x0, y0, x1, y1, width, color):
        self.calls.append(("draw_line", (x0, y0, x1, y1, width, color)))

    def next_frame(self) -> bool:
        self.frames_presented += 1
        return self.alive

    def named(self, name: str) -> list[tuple]:
        return [args for call, args in self.calls if call == name]


@pytest.fixture
def host() -> RecordingHost:
    """A 700x700 recording host."""
    return RecordingHost(700.0, 700.0)


STATS_LINE = "frame=  120 fps= 60 q=28.0 size=     256kB time=00:00:02.00 bitrate=1048.6kbits/s speed=1.0x"


@pytest.fixture
def fake_ffmpeg(tmp_path, monkeypatch):
    """
    Put a shell-script ``ffmpeg`` first on PATH.

    The script records its arguments to args.txt, writes ``stderr_lines``
    lines to stderr, drains stdin, touches the output file, and exits with
    ``exit_code``. Returns a function that installs it and returns the
    args file.
    """
    if sys.platform == "win32":
        pytest.skip("shell script stand-in needs a POSIX shell")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    args_file = tmp_path / "args.txt"

    def install(stderr_lines: int = 1, exit_code: int = 0, message: str = STATS_LINE):
        script = bin_dir / "ffmpeg"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" > "{args_file}"\n'
            "i=0\n"
            f"while [ $i -lt {stderr_lines} ]; do\n"
            f'  echo "{message}" >&2\n'
            "  i=$((i+1))\n"
            "done\n"
            "cat > /dev/null\n"
            'for last; do :; done\n'
            'touch "$last"\n'
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IEXEC)
        monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
        return args_file

    return install
