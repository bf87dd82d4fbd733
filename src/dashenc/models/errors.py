"""Error hierarchy and error response models."""

from typing import Any

from pydantic import BaseModel, Field


class DashEncError(Exception):
    """Base error for all dashenc errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class InvalidArgumentError(DashEncError):
    """Required input (such as probe data) is missing."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class InvalidWorkingDirectoryError(DashEncError):
    """The configured working directory does not exist."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="resource", details=details)


class EncodeCancelledError(DashEncError):
    """The run was cancelled by the caller."""

    def __init__(self, message: str = "Encode was cancelled", details: dict | None = None):
        super().__init__(message, component="pipeline", details=details)


class EncoderFailedError(DashEncError):
    """ffmpeg returned a nonzero exit code or raised during the encode stage."""

    def __init__(self, message: str, command: Any = None, log: str = "", details: dict | None = None):
        details = dict(details or {})
        if command is not None:
            details.setdefault("command", command.rendered)
        super().__init__(message, component="ffmpeg", details=details)
        self.command = command
        self.log = log


class MuxerFailedError(DashEncError):
    """MP4Box failed, raised, or produced no manifest."""

    def __init__(
        self,
        message: str,
        command: Any = None,
        mp4box_command: Any = None,
        log: str = "",
        details: dict | None = None,
    ):
        details = dict(details or {})
        if command is not None:
            details.setdefault("command", command.rendered)
        if mp4box_command is not None:
            details.setdefault("mp4box_command", mp4box_command.rendered)
        super().__init__(message, component="mp4box", details=details)
        self.command = command
        self.mp4box_command = mp4box_command
        self.log = log


class ManifestNotCreatedError(MuxerFailedError):
    """MP4Box reported success but the manifest file is missing."""

    def __init__(
        self,
        message: str,
        manifest_path: str,
        command: Any = None,
        mp4box_command: Any = None,
        log: str = "",
    ):
        super().__init__(
            message,
            command=command,
            mp4box_command=mp4box_command,
            log=log,
            details={"manifest_path": manifest_path},
        )
        self.manifest_path = manifest_path


class ErrorResponse(BaseModel):
    """Serializable description of a failed run."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict)
    log: str = Field(default="", description="Captured tool output, if any")

    @classmethod
    def from_exception(cls, exc: DashEncError) -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            details=exc.details,
            log=getattr(exc, "log", ""),
        )
