"""Frame timeline for the ffmpeg concat demuxer."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import NoViableFrames
from .frame import RenderedFrame


@dataclass(frozen=True)
class TimelineEntry:
    """One concat directive: a frame and how long it stays on screen."""

    path: Path
    duration: Optional[float]


@dataclass(frozen=True)
class Timeline:
    """Ordered frames plus the duration-less trailing repeat of the last one."""

    entries: Tuple[TimelineEntry, ...]

    @property
    def timed_entries(self) -> Tuple[TimelineEntry, ...]:
        return tuple(entry for entry in self.entries if entry.duration is not None)

    @property
    def total_duration(self) -> float:
        return sum(entry.duration for entry in self.timed_entries)

    @property
    def frame_paths(self) -> List[Path]:
        return [entry.path for entry in self.timed_entries]

    def without(self, missing: Sequence[Path]) -> "Timeline":
        """Rebuild the timeline dropping frames whose files are gone."""
        dropped = set(missing)
        kept = [entry for entry in self.timed_entries if entry.path not in dropped]
        return _from_entries(kept)

    def to_manifest(self) -> str:
        """Render the concat demuxer script.

        Each frame is a ``file '<path>'`` line followed by ``duration <s>``;
        the last frame is listed once more without a duration because the
        demuxer ignores the final entry's duration.
        """
        lines = []
        for entry in self.entries:
            lines.append(f"file '{quote_path(entry.path)}'")
            if entry.duration is not None:
                lines.append(f"duration {format_seconds(entry.duration)}")
        return "\n".join(lines) + "\n"


def quote_path(path: Path) -> str:
    # Relative entries would resolve against the manifest, not the cwd.
    # concat syntax: close the quote, emit an escaped quote, reopen.
    return str(Path(path).absolute()).replace("'", "'\\''")


def format_seconds(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".")


def _from_entries(timed: Sequence[TimelineEntry]) -> Timeline:
    if not timed:
        raise NoViableFrames("timeline needs at least one frame")
    trailer = TimelineEntry(path=timed[-1].path, duration=None)
    return Timeline(entries=tuple(timed) + (trailer,))


def build_timeline(
    frames: Sequence[RenderedFrame],
    fixed_duration: Optional[float] = None,
) -> Timeline:
    """Order frames by scene index and tag each with its duration.

    Args:
        frames: Rendered frames, in any order.
        fixed_duration: If set, every frame gets this duration instead of
            its scene's own.

    Raises:
        NoViableFrames: If ``frames`` is empty.
    """
    if fixed_duration is not None and fixed_duration <= 0:
        raise ValueError("fixed_duration must be positive")

    ordered = sorted(frames, key=lambda frame: frame.scene_index)
    timed = [
        TimelineEntry(
            path=frame.path,
            duration=fixed_duration if fixed_duration is not None else frame.duration_seconds,
        )
        for frame in ordered
    ]
    return _from_entries(timed)
