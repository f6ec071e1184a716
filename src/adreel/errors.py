"""Error taxonomy for the scene-to-video pipeline."""

from typing import Optional


class PipelineError(RuntimeError):
    """Fatal pipeline failure with a stable error code."""

    code = "adreel.pipeline.error"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidScript(PipelineError):
    """Script is structurally malformed; rejected before rendering."""

    code = "adreel.script.invalid"


class SceneRenderFailure(PipelineError):
    """A single scene could not be composed into a frame."""

    code = "adreel.render.scene_failed"

    def __init__(self, scene_index: int, message: str) -> None:
        super().__init__(f"scene {scene_index}: {message}")
        self.scene_index = scene_index


class NoViableFrames(PipelineError):
    """No frame survived rendering, nothing to encode."""

    code = "adreel.render.no_frames"


class EncoderFailure(PipelineError):
    """The external encoder reported an error."""

    code = "adreel.encoder.failed"

    def __init__(
        self,
        message: str,
        diagnostic: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.diagnostic = diagnostic
        self.returncode = returncode

    def __str__(self) -> str:
        base = super().__str__()
        if self.diagnostic:
            return f"{base}\n{self.diagnostic}"
        return base


class RunCancelled(PipelineError):
    """The caller aborted the run before it finished."""

    code = "adreel.pipeline.cancelled"


class CleanupWarning(UserWarning):
    """A temporary artifact could not be deleted."""
