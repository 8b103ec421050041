"""Tests for headless rendering and export."""

import shutil
import threading

import numpy as np
import pytest
from PIL import Image

from lissatable.encoder import X264_SETTINGS, encode_video, render_frames, save_frame


class TestRenderFrames:
    def test_yields_requested_frames(self):
        frames = list(render_frames(200, 160, 4))
        assert len(frames) == 4
        for frame in frames:
            assert frame.shape == (160, 200, 3)
            assert frame.dtype == np.uint8

    def test_frames_differ_over_time(self):
        frames = list(render_frames(240, 240, 50))
        assert not np.array_equal(frames[0], frames[-1])


class TestSaveFrame:
    def test_writes_png(self, tmp_path):
        frame = np.zeros((30, 40, 3), dtype=np.uint8)
        frame[10, 20] = (255, 0, 0)
        path = save_frame(frame, tmp_path / "nested" / "frame.png")
        assert path.exists()

        with Image.open(path) as img:
            assert img.size == (40, 30)
            assert img.getpixel((20, 10)) == (255, 0, 0)



def _frames(n: int, width: int, height: int):
    for i in range(n):
        yield np.full((height, width, 3), i % 256, dtype=np.uint8)


class TestEncodeVideo:
    def test_noisy_stderr_does_not_stall(self, tmp_path, fake_ffmpeg):
        fake_ffmpeg(stderr_lines=3000)
        out = tmp_path / "out.mp4"
        worker = threading.Thread(
            target=encode_video,
            args=(_frames(50, 100, 100), out),
            kwargs={"fps": 30, "quality": "fast"},
            daemon=True,
        )
        worker.start()
        worker.join(timeout=30)
        assert not worker.is_alive(), "encoder blocked on ffmpeg output"
        assert out.exists()

    def test_size_taken_from_first_frame(self, tmp_path, fake_ffmpeg):
        args_file = fake_ffmpeg()
        encode_video(_frames(3, 64, 48), tmp_path / "out.mp4")
        args = args_file.read_text().split()
        assert args[args.index("-s") + 1] == "64x48"

    def test_quiet_ffmpeg_flags(self, tmp_path, fake_ffmpeg):
        args_file = fake_ffmpeg()
        encode_video(_frames(1, 16, 16), tmp_path / "out.mp4")
        args = args_file.read_text().split()
        assert "-nostats" in args
        assert args[args.index("-loglevel") + 1] == "error"

    def test_fractional_fps_passed_through(self, tmp_path, fake_ffmpeg):
        args_file = fake_ffmpeg()
        encode_video(_frames(2, 16, 16), tmp_path / "out.mp4", fps=0.5)
        args = args_file.read_text().split()
        assert args[args.index("-r") + 1] == "0.5"

    @pytest.mark.parametrize("quality", sorted(X264_SETTINGS))
    def test_quality_settings(self, tmp_path, fake_ffmpeg, quality):
        args_file = fake_ffmpeg()
        encode_video(_frames(1, 16, 16), tmp_path / "out.mp4", quality=quality)
        args = args_file.read_text().split()
        preset, crf = X264_SETTINGS[quality]
        assert args[args.index("-preset") + 1] == preset
        assert args[args.index("-crf") + 1] == str(crf)

    def test_on_frame_counts(self, tmp_path, fake_ffmpeg):
        fake_ffmpeg()
        seen = []
        encode_video(_frames(4, 16, 16), tmp_path / "out.mp4", on_frame=seen.append)
        assert seen == [1, 2, 3, 4]

    def test_failure_reports_stderr(self, tmp_path, fake_ffmpeg):
        fake_ffmpeg(exit_code=1, message="Error initializing output stream")
        with pytest.raises(RuntimeError, match="Error initializing output stream"):
            encode_video(_frames(2, 16, 16), tmp_path / "out.mp4")

    def test_no_frames(self, tmp_path):
        with pytest.raises(ValueError):
            encode_video(iter([]), tmp_path / "out.mp4")

    @pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
    def test_real_ffmpeg_produces_mp4(self, tmp_path):
        result = encode_video(render_frames(160, 160, 10), tmp_path / "table.mp4", fps=30, quality="fast")
        assert result.exists()
        assert result.stat().st_size > 0
