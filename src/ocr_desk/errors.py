from __future__ import annotations


class OcrDeskError(Exception):
    """Base class for errors surfaced to the user."""


class InputValidationError(OcrDeskError, ValueError):
    """Missing credential, missing image or an unsupported file type."""


class TransportError(OcrDeskError, RuntimeError):
    """The OCR endpoint could not be reached or returned an unusable reply."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
