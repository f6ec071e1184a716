"""Bridge to the external ffmpeg encoder."""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import EncoderFailure
from ..models import Dimensions
from .timeline import Timeline

logger = logging.getLogger(__name__)

DIAGNOSTIC_TAIL = 4000
PARTIAL_SUFFIX = ".part"


class FFmpegEncoder:
    """Encodes a frame timeline into an H.264 MP4 with ffmpeg."""

    def __init__(
        self,
        binary: str = "ffmpeg",
        fps: int = 30,
        codec: str = "libx264",
        pixel_format: str = "yuv420p",
        crf: int = 23,
        timeout: Optional[float] = 300.0,
    ) -> None:
        """Initialize the encoder.

        Args:
            binary: ffmpeg executable.
            fps: Output frame rate.
            codec: Video codec.
            pixel_format: Output pixel format.
            crf: Constant-quality factor.
            timeout: Seconds before the encoder is killed. None waits forever.
        """
        self.binary = binary
        self.fps = fps
        self.codec = codec
        self.pixel_format = pixel_format
        self.crf = crf
        self.timeout = timeout

    def build_command(
        self,
        manifest_path: Path,
        output_path: Path,
        dimensions: Dimensions,
    ) -> List[str]:
        """Full ffmpeg argument list for one encode."""
        return [
            self.binary,
            "-y",
            "-hide_banner",
            "-loglevel", "error",
            "-f", "concat",
            "-safe", "0",
            "-i", str(manifest_path),
            "-vf", f"scale={dimensions.width}:{dimensions.height}",
            "-c:v", self.codec,
            "-pix_fmt", self.pixel_format,
            "-r", str(self.fps),
            "-crf", str(self.crf),
            "-movflags", "+faststart",
            "-f", "mp4",
            str(output_path),
        ]

    def encode(
        self,
        timeline: Timeline,
        output_path: Path,
        dimensions: Dimensions,
        manifest_path: Path,
    ) -> Path:
        """Encode ``timeline`` into ``output_path``.

        The video is written next to its destination with a ``.part``
        suffix and renamed into place only after ffmpeg succeeds. The
        ``.part`` file is created exclusively up front, so a second encode
        aimed at the same output fails instead of sharing it. The manifest
        file is removed on every path.

        Returns:
            Path to the finished video.

        Raises:
            NoViableFrames: If none of the timeline's frame files exist.
            EncoderFailure: If the output is taken, or ffmpeg is missing, times
                out or exits non-zero.
        """
        output_path = Path(output_path)
        if output_path.exists():
            raise EncoderFailure(f"refusing to overwrite existing video: {output_path}")

        missing = [path for path in timeline.frame_paths if not Path(path).is_file()]
        for path in missing:
            logger.warning(f"Frame file does not exist, dropping: {path}")
        if missing:
            timeline = timeline.without(missing)

        partial_path = output_path.with_name(output_path.name + PARTIAL_SUFFIX)
        _claim(partial_path)
        if output_path.exists():
            _remove_quietly(partial_path)
            raise EncoderFailure(f"refusing to overwrite existing video: {output_path}")
        manifest_path = Path(manifest_path)

        try:
            manifest_path.write_text(timeline.to_manifest())
            self._run(self.build_command(manifest_path, partial_path, dimensions))
            os.replace(partial_path, output_path)
        except BaseException:
            _remove_quietly(partial_path)
            raise
        finally:
            _remove_quietly(manifest_path)

        logger.info(f"Encoded {len(timeline.timed_entries)} frames -> {output_path}")
        return output_path

    def _run(self, command: List[str]) -> None:
        logger.debug(f"FFmpeg command: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise EncoderFailure(f"ffmpeg executable not found: {self.binary}", str(e)) from e
        except subprocess.TimeoutExpired as e:
            diagnostic = e.stderr.decode("utf-8", "replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            raise EncoderFailure(
                f"ffmpeg timed out after {self.timeout}s", diagnostic[-DIAGNOSTIC_TAIL:]
            ) from e

        if result.returncode != 0:
            diagnostic = (result.stderr or "").strip()[-DIAGNOSTIC_TAIL:]
            raise EncoderFailure(
                f"ffmpeg exited with status {result.returncode}",
                diagnostic,
                result.returncode,
            )


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


def _claim(partial_path: Path) -> None:
    """Create ``partial_path`` exclusively so one encode owns the output name."""
    try:
        with open(partial_path, "xb"):
            pass
    except FileExistsError as e:
        raise EncoderFailure(f"another encode is already writing {partial_path}") from e
    except OSError as e:
        raise EncoderFailure(f"cannot create {partial_path}: {e}") from e
