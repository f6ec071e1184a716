"""End-to-end tests for the scene-to-video pipeline."""

from __future__ import annotations

import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from adreel.config import Config
from adreel.errors import EncoderFailure, InvalidScript, NoViableFrames, RunCancelled, SceneRenderFailure
from adreel.models import Script
from adreel.render import FFmpegEncoder, FrameRenderer, VideoPipeline, Workspace


class FlakyRenderer(FrameRenderer):
    """Fails the scenes whose indices it is given."""

    def __init__(self, failing) -> None:
        super().__init__()
        self.failing = set(failing)

    def render(self, scene, dimensions, output_path, price=None):
        if scene.index in self.failing:
            raise SceneRenderFailure(scene.index, "simulated drawing failure")
        return super().render(scene, dimensions, output_path, price=price)


def temp_files(workspace: Workspace) -> list:
    if not workspace.temp_dir.exists():
        return []
    return sorted(workspace.temp_dir.iterdir())


def test_three_scene_square_video(pipeline, workspace, fake_ffmpeg, three_scene_data) -> None:
    artifact = pipeline.generate(three_scene_data, aspect_ratio="1:1", video_id="demo")

    assert artifact.width == artifact.height == 1000
    assert artifact.duration_seconds == 15
    assert artifact.file_name == "video_demo.mp4"
    assert artifact.path.exists()
    assert artifact.size_bytes == artifact.path.stat().st_size
    assert artifact.aspect_ratio.value == "1:1"

    manifest = fake_ffmpeg.manifests[0]
    lines = manifest.splitlines()
    assert [line for line in lines if line.startswith("duration")] == [
        "duration 3", "duration 8", "duration 4",
    ]
    file_lines = [line for line in lines if line.startswith("file")]
    assert len(file_lines) == 4
    assert file_lines[-1] == file_lines[-2]
    assert "scale=1000:1000" in fake_ffmpeg.commands[0]
    assert temp_files(workspace) == []


def test_unknown_ratio_falls_back_to_landscape(pipeline, fake_ffmpeg, three_scene_data) -> None:
    artifact = pipeline.generate(three_scene_data, aspect_ratio="4:5")
    assert (artifact.width, artifact.height) == (1280, 720)
    assert artifact.aspect_ratio.value == "16:9"


def test_single_empty_scene_produces_one_frame(pipeline, fake_ffmpeg) -> None:
    script = {"scenes": [{"text": "", "kind": "generic", "durationSeconds": 2}]}

    artifact = pipeline.generate(script)

    assert artifact.duration_seconds == 2
    assert fake_ffmpeg.manifests[0].count("duration ") == 1


def test_invalid_script_rejected_before_rendering(pipeline, workspace, fake_ffmpeg) -> None:
    with pytest.raises(InvalidScript):
        pipeline.generate({"scenes": [{"kind": "hook", "durationSeconds": 3}]})
    assert not workspace.temp_dir.exists()
    assert fake_ffmpeg.commands == []


def test_failed_scene_is_skipped(workspace, fake_ffmpeg, three_scene_data) -> None:
    pipeline = VideoPipeline(workspace, renderer=FlakyRenderer({1}), max_workers=3)

    artifact = pipeline.generate(three_scene_data)

    assert artifact.duration_seconds == 7
    manifest = fake_ffmpeg.manifests[0]
    assert manifest.count("duration ") == 2
    assert "frame_001" not in manifest
    assert temp_files(workspace) == []


def test_no_viable_frames_writes_nothing(workspace, fake_ffmpeg) -> None:
    script = {
        "scenes": [
            {"text": "a", "kind": "hook", "durationSeconds": 1},
            {"text": "b", "kind": "cta", "durationSeconds": 1},
        ]
    }
    pipeline = VideoPipeline(workspace, renderer=FlakyRenderer({0, 1}))

    with pytest.raises(NoViableFrames):
        pipeline.generate(script, video_id="nothing")

    assert fake_ffmpeg.commands == []
    assert list(workspace.output_dir.iterdir()) == []
    assert temp_files(workspace) == []


def test_encoder_failure_still_cleans_up(pipeline, workspace, failing_ffmpeg, three_scene_data) -> None:
    with pytest.raises(EncoderFailure) as excinfo:
        pipeline.generate(three_scene_data, video_id="broken")

    assert "Invalid data" in excinfo.value.diagnostic
    assert temp_files(workspace) == []
    assert list(workspace.output_dir.iterdir()) == []


def test_fixed_frame_duration(workspace, fake_ffmpeg, three_scene_data) -> None:
    pipeline = VideoPipeline(workspace, frame_duration=3)

    artifact = pipeline.generate(three_scene_data)

    assert artifact.duration_seconds == 9
    assert fake_ffmpeg.manifests[0].count("duration 3\n") == 3


def test_cancelled_run_cleans_up(pipeline, workspace, fake_ffmpeg, three_scene_data) -> None:
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(RunCancelled):
        pipeline.generate(three_scene_data, cancel_event=cancel)

    assert fake_ffmpeg.commands == []
    assert temp_files(workspace) == []


def test_concurrent_runs_do_not_collide(pipeline, workspace, fake_ffmpeg, three_scene_data) -> None:
    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [
            executor.submit(pipeline.generate, three_scene_data, "9:16", f"run{i}")
            for i in range(2)
        ]
        artifacts = [future.result() for future in futures]

    assert {a.file_name for a in artifacts} == {"video_run0.mp4", "video_run1.mp4"}
    assert all((a.width, a.height) == (720, 1280) for a in artifacts)
    assert temp_files(workspace) == []


def test_accepts_validated_script(pipeline, fake_ffmpeg, three_scene_data) -> None:
    script = Script.parse(three_scene_data)
    assert pipeline.generate(script).duration_seconds == script.total_duration_seconds


def test_from_config_wires_settings(tmp_path: Path) -> None:
    cfg = Config(
        workspace=tmp_path,
        ffmpeg_binary="/usr/local/bin/ffmpeg",
        max_workers=3,
        encode_timeout=12,
        frame_duration=2.0,
    )

    pipeline = VideoPipeline.from_config(cfg, max_workers=1)

    assert pipeline.workspace.temp_dir == tmp_path / "temp"
    assert pipeline.workspace.output_dir == tmp_path / "output"
    assert pipeline.encoder.binary == "/usr/local/bin/ffmpeg"
    assert pipeline.encoder.timeout == 12
    assert pipeline.max_workers == 1
    assert pipeline.frame_duration == 2.0


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
def test_real_ffmpeg_encode(tmp_path: Path, three_scene_data) -> None:
    workspace = Workspace(tmp_path / "temp", tmp_path / "output")
    pipeline = VideoPipeline(workspace, encoder=FFmpegEncoder(binary=shutil.which("ffmpeg")))

    artifact = pipeline.generate(three_scene_data, aspect_ratio="1:1", video_id="real")

    assert artifact.size_bytes > 0
    assert artifact.path.read_bytes()[4:8] == b"ftyp"
    assert temp_files(workspace) == []


def test_relative_workspace_writes_absolute_manifest(tmp_path: Path, monkeypatch, fake_ffmpeg, three_scene_data) -> None:
    monkeypatch.chdir(tmp_path)
    pipeline = VideoPipeline.from_config(Config(workspace=Path("."), ffmpeg_binary="ffmpeg"))

    artifact = pipeline.generate(three_scene_data, aspect_ratio="1:1", video_id="rel")

    file_lines = [line for line in fake_ffmpeg.manifests[0].splitlines() if line.startswith("file ")]
    assert len(file_lines) == 4
    for line in file_lines:
        assert Path(line[len("file '"):-1]).is_absolute()
    assert Path(fake_ffmpeg.commands[0][-1]).is_absolute()
    assert artifact.path == tmp_path / "output" / "video_rel.mp4"
