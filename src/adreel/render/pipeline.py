"""Scene-to-video pipeline: render frames, build the timeline, encode."""

import logging
import threading
import uuid
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional

from ..config import Config
from ..errors import NoViableFrames, RunCancelled, SceneRenderFailure
from ..models import Dimensions, Script, VideoArtifact, resolve_aspect_ratio
from .encoder import FFmpegEncoder
from .frame import FrameRenderer, RenderedFrame
from .timeline import build_timeline
from .workspace import RunContext, Workspace

logger = logging.getLogger(__name__)

CANCEL_POLL_SECONDS = 0.2


class VideoPipeline:
    """Turns a Script into a finished video.

    The pipeline keeps no state between runs: each call to ``generate``
    gets its own run context, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        workspace: Workspace,
        renderer: Optional[FrameRenderer] = None,
        encoder: Optional[FFmpegEncoder] = None,
        max_workers: int = 4,
        frame_duration: Optional[float] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            workspace: Scratch and output areas.
            renderer: Frame renderer. A default one is created if omitted.
            encoder: Video encoder. Uses ``ffmpeg`` from PATH if omitted.
            max_workers: Concurrent scene renders per run.
            frame_duration: Fixed seconds per frame; None honors each
                scene's own duration.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.workspace = workspace
        self.renderer = renderer or FrameRenderer()
        self.encoder = encoder or FFmpegEncoder()
        self.max_workers = max_workers
        self.frame_duration = frame_duration

    @classmethod
    def from_config(cls, cfg: Config, **overrides: Any) -> "VideoPipeline":
        """Build a pipeline wired from application configuration."""
        params: Dict[str, Any] = {
            "workspace": Workspace(cfg.resolved_temp_dir, cfg.resolved_output_dir),
            "renderer": FrameRenderer(font_path=cfg.font_path),
            "encoder": FFmpegEncoder(
                binary=cfg.resolve_ffmpeg_binary(),
                timeout=cfg.encode_timeout,
            ),
            "max_workers": cfg.max_workers,
            "frame_duration": cfg.frame_duration,
        }
        params.update(overrides)
        return cls(**params)

    def generate(
        self,
        script: Any,
        aspect_ratio: str = "16:9",
        video_id: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> VideoArtifact:
        """Render and encode ``script``.

        Args:
            script: A Script or raw script data (validated here).
            aspect_ratio: "16:9", "9:16" or "1:1"; anything else means 16:9.
            video_id: Identifier for the output file. Random if omitted.
            cancel_event: Set it to abandon the run.

        Returns:
            Descriptor of the finished video.

        Raises:
            InvalidScript: If the script is malformed.
            NoViableFrames: If every scene failed to render.
            EncoderFailure: If ffmpeg fails.
            RunCancelled: If ``cancel_event`` was set.
        """
        script = Script.parse(script)
        ratio = resolve_aspect_ratio(aspect_ratio)
        dimensions = ratio.dimensions
        video_id = video_id or str(uuid.uuid4())
        cancel_event = cancel_event or threading.Event()

        logger.info(
            f"Generating video {video_id}: {len(script.scenes)} scenes, "
            f"{ratio.value} ({dimensions.width}x{dimensions.height})"
        )

        with self.workspace.open_run(video_id) as run:
            frames = self.render_frames(script, dimensions, run, cancel_event)
            if not frames:
                raise NoViableFrames(
                    f"none of the {len(script.scenes)} scenes produced a frame"
                )
            _check_cancelled(cancel_event)

            timeline = build_timeline(frames, fixed_duration=self.frame_duration)
            output_path = self.encoder.encode(
                timeline,
                self.workspace.output_path(video_id),
                dimensions,
                manifest_path=run.manifest_path(),
            )

        artifact = VideoArtifact(
            video_id=video_id,
            file_name=output_path.name,
            path=output_path.resolve(),
            size_bytes=output_path.stat().st_size,
            width=dimensions.width,
            height=dimensions.height,
            duration_seconds=timeline.total_duration,
            aspect_ratio=ratio,
        )
        logger.info(f"Video generated: {artifact.path} ({artifact.size_bytes} bytes)")
        return artifact

    def render_frames(
        self,
        script: Script,
        dimensions: Dimensions,
        run: RunContext,
        cancel_event: threading.Event,
    ) -> List[RenderedFrame]:
        """Render all scenes concurrently and return surviving frames in scene order.

        A scene that fails is logged and skipped.
        """
        frames: List[RenderedFrame] = []
        workers = min(self.max_workers, len(script.scenes))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="render") as executor:
            pending: Dict[Future, int] = {
                executor.submit(
                    self.renderer.render,
                    scene,
                    dimensions,
                    run.frame_path(scene.index),
                    script.price,
                ): scene.index
                for scene in script.scenes
            }

            while pending:
                if cancel_event.is_set():
                    for future in pending:
                        future.cancel()
                    raise RunCancelled("run cancelled during frame rendering")

                done, _ = wait(pending, timeout=CANCEL_POLL_SECONDS, return_when=FIRST_COMPLETED)
                for future in done:
                    index = pending.pop(future)
                    try:
                        frames.append(future.result())
                    except SceneRenderFailure as e:
                        logger.warning(f"Skipping scene {index}: {e}")

        frames.sort(key=lambda frame: frame.scene_index)
        logger.info(f"Rendered {len(frames)}/{len(script.scenes)} frames")
        return frames


def _check_cancelled(cancel_event: threading.Event) -> None:
    if cancel_event.is_set():
        raise RunCancelled("run cancelled before encoding")
