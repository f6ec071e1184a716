"""Tests for the ffmpeg encoder bridge."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from adreel.errors import EncoderFailure, NoViableFrames
from adreel.models import Dimensions
from adreel.render.encoder import FFmpegEncoder
from adreel.render.frame import RenderedFrame
from adreel.render.timeline import build_timeline
from conftest import FAKE_MP4


def write_frames(root: Path, durations) -> list:
    frames = []
    for index, duration in enumerate(durations):
        path = root / f"frame_{index}.png"
        path.write_bytes(b"png")
        frames.append(RenderedFrame(index, path, duration, 1000, 1000))
    return frames


def test_build_command_flags(tmp_path: Path) -> None:
    encoder = FFmpegEncoder(binary="/opt/ffmpeg")
    command = encoder.build_command(tmp_path / "list.txt", tmp_path / "out.mp4", Dimensions(720, 1280))

    assert command[0] == "/opt/ffmpeg"
    joined = " ".join(command)
    assert "-f concat -safe 0" in joined
    assert "-vf scale=720:1280" in joined
    assert "-c:v libx264" in joined
    assert "-pix_fmt yuv420p" in joined
    assert "-r 30" in joined
    assert "-crf 23" in joined
    assert "-movflags +faststart" in joined
    assert command[-1] == str(tmp_path / "out.mp4")


def test_encode_success_places_output_and_removes_manifest(tmp_path: Path, fake_ffmpeg) -> None:
    frames = write_frames(tmp_path, [3, 8, 4])
    manifest = tmp_path / "list.txt"
    output = tmp_path / "out" / "video.mp4"
    output.parent.mkdir()

    result = FFmpegEncoder().encode(build_timeline(frames), output, Dimensions(1000, 1000), manifest)

    assert result == output
    assert output.read_bytes() == FAKE_MP4
    assert not manifest.exists()
    assert not (output.parent / "video.mp4.part").exists()
    assert fake_ffmpeg.commands[0][-1].endswith("video.mp4.part")
    written = fake_ffmpeg.manifests[0]
    assert written.count("file '") == 4
    assert written.count("duration ") == 3


def test_encoder_failure_carries_diagnostic(tmp_path: Path, failing_ffmpeg) -> None:
    frames = write_frames(tmp_path, [3])
    manifest = tmp_path / "list.txt"
    output = tmp_path / "video.mp4"

    with pytest.raises(EncoderFailure) as excinfo:
        FFmpegEncoder().encode(build_timeline(frames), output, Dimensions(1280, 720), manifest)

    assert excinfo.value.returncode == 1
    assert "Invalid data found" in excinfo.value.diagnostic
    assert not output.exists()
    assert not (tmp_path / "video.mp4.part").exists()
    assert not manifest.exists()


def test_missing_frames_are_dropped(tmp_path: Path, fake_ffmpeg) -> None:
    frames = write_frames(tmp_path, [3, 8, 4])
    frames[1].path.unlink()

    FFmpegEncoder().encode(
        build_timeline(frames), tmp_path / "video.mp4", Dimensions(1280, 720), tmp_path / "list.txt"
    )

    written = fake_ffmpeg.manifests[0]
    assert "frame_1.png" not in written
    assert written.count("duration ") == 2


def test_all_frames_missing_never_invokes_encoder(tmp_path: Path, fake_ffmpeg) -> None:
    frames = write_frames(tmp_path, [3, 4])
    for frame in frames:
        frame.path.unlink()

    with pytest.raises(NoViableFrames):
        FFmpegEncoder().encode(
            build_timeline(frames), tmp_path / "video.mp4", Dimensions(1280, 720), tmp_path / "list.txt"
        )
    assert fake_ffmpeg.commands == []
    assert not (tmp_path / "list.txt").exists()


def test_missing_binary_is_encoder_failure(tmp_path: Path, monkeypatch) -> None:
    def missing(command, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr("adreel.render.encoder.subprocess.run", missing)
    frames = write_frames(tmp_path, [1])

    with pytest.raises(EncoderFailure, match="not found"):
        FFmpegEncoder(binary="no-such-ffmpeg").encode(
            build_timeline(frames), tmp_path / "video.mp4", Dimensions(1280, 720), tmp_path / "list.txt"
        )
    assert not (tmp_path / "list.txt").exists()


def test_timeout_is_encoder_failure(tmp_path: Path, monkeypatch) -> None:
    def slow(command, **kwargs):
        Path(command[-1]).write_bytes(b"partial")
        raise subprocess.TimeoutExpired(command, kwargs["timeout"], stderr=b"frame=  12")

    monkeypatch.setattr("adreel.render.encoder.subprocess.run", slow)
    frames = write_frames(tmp_path, [1])

    with pytest.raises(EncoderFailure, match="timed out") as excinfo:
        FFmpegEncoder(timeout=0.5).encode(
            build_timeline(frames), tmp_path / "video.mp4", Dimensions(1280, 720), tmp_path / "list.txt"
        )
    assert "frame=" in excinfo.value.diagnostic
    assert not (tmp_path / "video.mp4.part").exists()


def test_existing_output_is_never_overwritten(tmp_path: Path, fake_ffmpeg) -> None:
    frames = write_frames(tmp_path, [1])
    output = tmp_path / "video.mp4"
    output.write_bytes(b"finished by another run")

    with pytest.raises(EncoderFailure, match="overwrite"):
        FFmpegEncoder().encode(build_timeline(frames), output, Dimensions(1280, 720), tmp_path / "list.txt")

    assert output.read_bytes() == b"finished by another run"
    assert fake_ffmpeg.commands == []


def test_output_being_written_by_another_encode_is_refused(tmp_path: Path, fake_ffmpeg) -> None:
    frames = write_frames(tmp_path, [1])
    output = tmp_path / "video.mp4"
    partial = tmp_path / "video.mp4.part"
    partial.write_bytes(b"in progress elsewhere")
    manifest = tmp_path / "list.txt"

    with pytest.raises(EncoderFailure, match="already writing"):
        FFmpegEncoder().encode(build_timeline(frames), output, Dimensions(1280, 720), manifest)

    assert partial.read_bytes() == b"in progress elsewhere"
    assert not output.exists()
    assert not manifest.exists()
    assert fake_ffmpeg.commands == []
