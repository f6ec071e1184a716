"""Scratch and output areas, and per-run cleanup of temporaries."""

import logging
import re
import threading
import time
import uuid
import warnings
from pathlib import Path
from typing import List, Optional

from ..errors import CleanupWarning

logger = logging.getLogger(__name__)

UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def safe_id(value: str) -> str:
    """Make an identifier safe to embed in a file name."""
    return UNSAFE_ID_CHARS.sub("_", value)


class Workspace:
    """Owns the temporary working area and the output area."""

    def __init__(self, temp_dir: Path, output_dir: Path) -> None:
        # Absolute, since ffmpeg resolves manifest entries against the manifest.
        self.temp_dir = Path(temp_dir).absolute()
        self.output_dir = Path(output_dir).absolute()

    def ensure(self) -> None:
        """Create both areas if they are missing."""
        for directory in (self.temp_dir, self.output_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def output_path(self, video_id: str) -> Path:
        return self.output_dir / f"video_{safe_id(video_id)}.mp4"

    def open_run(self, run_id: Optional[str] = None) -> "RunContext":
        """Start a run; use the result as a context manager."""
        self.ensure()
        return RunContext(self, run_id or uuid.uuid4().hex)


class RunContext:
    """Tracks every temporary file one run creates and deletes them on exit.

    Names are namespaced by run id, so concurrent runs sharing the scratch
    area never collide.
    """

    def __init__(self, workspace: Workspace, run_id: str) -> None:
        self.workspace = workspace
        self.run_id = safe_id(run_id)
        self._created: List[Path] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def prefix(self) -> str:
        return f"run_{self.run_id}."

    def _claim(self, name: str) -> Path:
        path = self.workspace.temp_dir / name
        with self._lock:
            self._created.append(path)
        return path

    def frame_path(self, scene_index: int) -> Path:
        stamp = time.time_ns() // 1_000_000
        return self._claim(f"{self.prefix}frame_{scene_index:03d}_{stamp}.png")

    def manifest_path(self) -> Path:
        stamp = time.time_ns() // 1_000_000
        return self._claim(f"{self.prefix}framelist_{stamp}.txt")

    @property
    def created(self) -> List[Path]:
        with self._lock:
            return list(self._created)

    def leftovers(self) -> List[Path]:
        """Files in the scratch area still carrying this run's prefix."""
        return sorted(self.workspace.temp_dir.glob(f"{self.prefix}*"))

    def cleanup(self) -> List[Path]:
        """Delete this run's temporaries; failures are warned about, never raised.

        Returns:
            Paths that could not be removed.
        """
        failed: List[Path] = []
        targets = set(self.created) | set(self.leftovers())
        for path in sorted(targets):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                failed.append(path)
                message = f"Could not delete temporary file {path}: {e}"
                logger.warning(message)
                warnings.warn(message, CleanupWarning, stacklevel=2)

        with self._lock:
            self._created = [path for path in self._created if path in failed]
        if not failed:
            logger.debug(f"Cleaned up temporaries for run {self.run_id}")
        return failed
