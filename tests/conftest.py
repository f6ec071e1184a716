"""Shared fixtures for the adreel test suite."""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import List

import pytest

from adreel.render import FFmpegEncoder, FrameRenderer, VideoPipeline, Workspace

FAKE_MP4 = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"


def char_measure(text: str) -> float:
    """Deterministic text measure: ten pixels per character."""
    return len(text) * 10.0


class FakeFFmpeg:
    """Stands in for subprocess.run, recording each ffmpeg invocation."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.commands: List[List[str]] = []
        self.manifests: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, command, **kwargs):
        manifest = Path(command[command.index("-i") + 1])
        with self._lock:
            self.commands.append(list(command))
            self.manifests.append(manifest.read_text())
        # ffmpeg leaves a partial file behind even when it fails.
        Path(command[-1]).write_bytes(FAKE_MP4)
        return subprocess.CompletedProcess(command, self.returncode, stdout="", stderr=self.stderr)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    return Workspace(tmp_path / "temp", tmp_path / "output")


@pytest.fixture
def fake_ffmpeg(monkeypatch: pytest.MonkeyPatch) -> FakeFFmpeg:
    fake = FakeFFmpeg()
    monkeypatch.setattr("adreel.render.encoder.subprocess.run", fake)
    return fake


@pytest.fixture
def failing_ffmpeg(monkeypatch: pytest.MonkeyPatch) -> FakeFFmpeg:
    fake = FakeFFmpeg(returncode=1, stderr="concat: Invalid data found when processing input")
    monkeypatch.setattr("adreel.render.encoder.subprocess.run", fake)
    return fake


@pytest.fixture
def pipeline(workspace: Workspace) -> VideoPipeline:
    return VideoPipeline(
        workspace=workspace,
        renderer=FrameRenderer(),
        encoder=FFmpegEncoder(binary="ffmpeg", timeout=30),
        max_workers=2,
    )


@pytest.fixture
def three_scene_data() -> dict:
    return {
        "title": "Thermo Mug",
        "price": "$24.99",
        "scenes": [
            {"text": "Tired of cold coffee?", "kind": "hook", "durationSeconds": 3,
             "backgroundColor": "#ff6b6b", "animation": "fade_in"},
            {"text": "Hot for 12 hours. Leak-proof lid. Fits every cup holder",
             "kind": "benefits", "durationSeconds": 8, "animation": "slide_in"},
            {"text": "Grab yours today!", "kind": "cta", "durationSeconds": 4,
             "animation": "zoom_in"},
        ],
    }
