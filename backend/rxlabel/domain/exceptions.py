"""
Domain Exceptions

Errors raised while scanning a label, grouped by the stage that raises them.
Parsing has no exception type: a field that cannot be found is simply absent.
"""

from typing import Optional, Dict, Any, List


class DomainException(Exception):
    """
    Root of every error the scanner raises on purpose.

    Subclasses set ``default_message`` and ``recoverable`` instead of
    overriding the constructor where they can.

    Attributes:
        message: Human-readable description
        details: Structured context for logs and API responses
        is_recoverable: True when re-capturing the photo may succeed
    """

    default_message = "Label scan failed"
    recoverable = True

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        is_recoverable: Optional[bool] = None
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details: Dict[str, Any] = dict(details or {})
        self.is_recoverable = self.recoverable if is_recoverable is None else is_recoverable

    def __str__(self) -> str:
        return f"{type(self).__name__}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form, as handed to the capture screen."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
            "is_recoverable": self.is_recoverable,
        }


# -----------------------------------------------------------------------------
# Preprocessing
# -----------------------------------------------------------------------------

class PreprocessingError(DomainException):
    """The photo could not be turned into a working pixel buffer."""

    default_message = "Image preprocessing failed"


class ImageLoadError(PreprocessingError):
    """Source bytes are missing, malformed or not a supported image."""

    default_message = "Failed to load image"


class BufferAllocationError(PreprocessingError):
    """A working buffer would exceed the pixel budget or memory."""

    default_message = "Failed to allocate pixel buffer"
    recoverable = False

    def __init__(
        self,
        message: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if width is not None and height is not None:
            self.details.update(width=width, height=height)


# -----------------------------------------------------------------------------
# Recognition
# -----------------------------------------------------------------------------

class RecognitionError(DomainException):
    """The recognition engine could not be acquired or failed on the buffer."""

    default_message = "Text recognition failed"

    def __init__(self, message: Optional[str] = None, engine_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if engine_name:
            self.details["engine"] = engine_name


class RecognitionTimeoutError(RecognitionError):
    """The engine did not answer within the configured time limit."""

    def __init__(
        self,
        timeout_seconds: float,
        engine_name: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message or f"Text recognition timed out after {timeout_seconds} seconds",
            engine_name=engine_name,
            **kwargs
        )
        self.details["timeout_seconds"] = timeout_seconds


# -----------------------------------------------------------------------------
# Pipeline
# -----------------------------------------------------------------------------

class PipelineError(DomainException):
    """The scan pipeline itself is broken, not the photo."""

    default_message = "Label scan pipeline failed"
    recoverable = False


class PipelineConfigurationError(PipelineError):
    """A required collaborator (such as the recognizer) was not supplied."""

    default_message = "Pipeline is not properly configured"

    def __init__(
        self,
        message: Optional[str] = None,
        missing_components: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if missing_components:
            self.details["missing_components"] = list(missing_components)


class StageExecutionError(PipelineError):
    """A stage raised something that is not a DomainException."""

    def __init__(self, stage_name: str, original_error: Exception, **kwargs):
        super().__init__(f"Stage '{stage_name}' failed: {original_error}", **kwargs)
        self.stage_name = stage_name
        self.original_error = original_error
        self.details.update(stage=stage_name, original_error=str(original_error))


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

class ValidationError(DomainException):
    """A caller passed a value the scanner cannot work with."""

    recoverable = False


class InvalidInputError(ValidationError):
    """One named argument is out of range or of the wrong kind."""

    def __init__(self, field: str, reason: str, **kwargs):
        super().__init__(f"Invalid input for '{field}': {reason}", **kwargs)
        self.details.update(field=field, reason=reason)
