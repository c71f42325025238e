from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import InputValidationError, TransportError
from .history import HistoryCache
from .http_client import OcrClient
from .images import is_image_data_url
from .models import HistoryEntry, new_entry
from .normalize import normalize

logger = logging.getLogger(__name__)

FAILURE_PLACEHOLDER = "Recognition failed."
NO_TEXT_PLACEHOLDER = "No text could be extracted, or the image contains no text."


class ExtractionStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionOutcome:
    status: ExtractionStatus
    result: str
    message: str
    entry: HistoryEntry | None = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK


def extract_image(
    client: OcrClient,
    history: HistoryCache,
    *,
    api_key: str | None,
    model: str,
    image_data_url: str | None,
    image_label: str | None = None,
    escape_alt: bool = False,
) -> ExtractionOutcome:
    """Run one extraction end to end.

    Input problems raise ``InputValidationError`` before any request is made.
    Transport failures and empty results come back as outcomes; only a
    non-empty result creates a history entry.
    """

    if not api_key or not api_key.strip():
        raise InputValidationError("Please provide an API key.")
    if not image_data_url:
        raise InputValidationError("Please select an image to recognize.")
    if not is_image_data_url(image_data_url):
        raise InputValidationError("Image data is missing or not a valid image.")

    try:
        raw = client.extract(image_data_url, api_key=api_key.strip(), model=model)
    except TransportError as e:
        logger.error("OCR processing failed: %s", e)
        return ExtractionOutcome(
            status=ExtractionStatus.FAILED,
            result=FAILURE_PLACEHOLDER,
            message=f"An error occurred: {e}",
        )

    result = normalize(raw, escape_alt=escape_alt)
    if not result:
        return ExtractionOutcome(
            status=ExtractionStatus.EMPTY,
            result=NO_TEXT_PLACEHOLDER,
            message="No text content was extracted.",
        )

    entry = new_entry(
        model=model,
        image_label=image_label,
        source_image=image_data_url,
        normalized_result=result,
    )
    history.insert(entry)
    return ExtractionOutcome(
        status=ExtractionStatus.OK,
        result=result,
        message="Text extracted successfully.",
        entry=entry,
    )
