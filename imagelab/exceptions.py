"""Exception types shared across the project."""

from __future__ import annotations


class ImageLabError(RuntimeError):
    """Base class for errors raised by Image Lab."""


class UnrecognizedShapeError(ImageLabError):
    """Raised when an inference output matches none of the known result shapes."""

    def __init__(self, message: str = "No se pudo obtener la imagen resultante desde el output del modelo.") -> None:
        super().__init__(message)


class FetchFailedError(ImageLabError):
    """Raised when downloading a result image answers with a non-success status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Error al obtener la imagen: {status_code} {reason}".rstrip())


class StreamConsumedError(ImageLabError):
    """Raised when a single-pass byte stream is read a second time."""


class EmptyPayloadError(ImageLabError):
    """Raised when an image payload would carry zero bytes."""


class InferenceError(ImageLabError):
    """Raised when the inference provider rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class InvalidImageError(ValueError):
    """Raised when an uploaded file cannot be decoded as an image."""


class ConfigurationError(ImageLabError):
    """Raised when a required credential or setting is missing."""


class ChatTimeoutError(ImageLabError):
    """Raised when the chat model does not finish answering in time."""


class EmptyReplyError(ImageLabError):
    """Raised when the chat model returns only whitespace."""
