"""Tests for ffmpeg-based audio splitting and segment cleanup."""

import subprocess
from pathlib import Path
from unittest.mock import patch

from structlog.testing import capture_logs

from transcriber.chunk import AudioChunker


def _write_segments(chunker: AudioChunker, indices) -> None:
    chunker.work_dir.mkdir(parents=True, exist_ok=True)
    for index in indices:
        chunker.segment_path(index).write_bytes(b"audio")


class TestBuildCommand:
    def test_segment_command(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job", segment_duration=200)
        cmd = chunker.build_command("talk.mp3")
        assert cmd == [
            "ffmpeg", "-i", "talk.mp3",
            "-f", "segment",
            "-segment_time", "200",
            "-c:a", "libmp3lame",
            str(tmp_path / "job" / "out%03d.mp3"),
        ]

    def test_segment_path_is_zero_padded(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path)
        assert chunker.segment_path(0).name == "out000.mp3"
        assert chunker.segment_path(12).name == "out012.mp3"


class TestSplit:
    def test_runs_ffmpeg(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job", segment_duration=60, ffmpeg_path="/usr/bin/ffmpeg")
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("transcriber.chunk.subprocess.run", return_value=completed) as run:
            chunker.split("talk.mp3")

        cmd = run.call_args[0][0]
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert "60" in cmd
        assert (tmp_path / "job").is_dir()

    def test_non_zero_exit_does_not_raise(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job")
        failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="Invalid data")
        with patch("transcriber.chunk.subprocess.run", return_value=failed):
            chunker.split("broken.mp3")

    def test_missing_executable_does_not_raise(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job", ffmpeg_path="does-not-exist")
        with patch("transcriber.chunk.subprocess.run", side_effect=FileNotFoundError("does-not-exist")):
            chunker.split("talk.mp3")

    def test_partial_output_is_kept_on_failure(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job")

        def fake_run(cmd, **kwargs):
            _write_segments(chunker, [0, 1])
            return subprocess.CompletedProcess(args=cmd, returncode=1, stdout="", stderr="truncated")

        with patch("transcriber.chunk.subprocess.run", side_effect=fake_run):
            chunker.split("talk.mp3")

        assert [index for index, _ in chunker.iter_segments()] == [0, 1]


class TestCleanup:
    def test_removes_contiguous_segments(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job")
        _write_segments(chunker, [0, 1, 2])

        assert chunker.cleanup() == 3
        assert not (tmp_path / "job").exists()

    def test_stops_at_first_gap(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job")
        _write_segments(chunker, [0, 1, 5])

        with capture_logs() as logs:
            assert chunker.cleanup() == 2

        assert not chunker.segment_path(0).exists()
        assert not chunker.segment_path(1).exists()
        assert chunker.segment_path(5).exists()
        assert {"event": "Segment directory not empty after cleanup", "work_dir": str(chunker.work_dir),
                "log_level": "warning"} in logs

    def test_nothing_to_clean(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "never-created")
        assert chunker.cleanup() == 0

    def test_iter_segments_stops_at_gap(self, tmp_path: Path) -> None:
        chunker = AudioChunker(tmp_path / "job")
        _write_segments(chunker, [0, 1, 2, 50])

        assert [index for index, _ in chunker.iter_segments()] == [0, 1, 2]
