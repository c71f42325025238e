from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

DEFAULT_IMAGE_LABEL = "pasted_or_unknown_image"


class ResponseKind(str, Enum):
    PAGINATED = "paginated"
    CHAT = "chat"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class EmbeddedImage:
    id: str
    data: str

    @classmethod
    def from_dict(cls, raw: Any) -> EmbeddedImage:
        if not isinstance(raw, dict):
            return cls(id="", data="")
        image_id = raw.get("id")
        data = raw.get("image_base64")
        return cls(
            id=image_id if isinstance(image_id, str) else "",
            data=data if isinstance(data, str) else "",
        )

    @property
    def resolvable(self) -> bool:
        return bool(self.id and self.data)


@dataclass(frozen=True)
class OcrPage:
    markdown: str = ""
    images: tuple[EmbeddedImage, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> OcrPage:
        if not isinstance(raw, dict):
            return cls()
        markdown = raw.get("markdown")
        images = raw.get("images")
        return cls(
            markdown=markdown if isinstance(markdown, str) else "",
            images=tuple(
                EmbeddedImage.from_dict(img)
                for img in (images if isinstance(images, list) else [])
            ),
        )


@dataclass(frozen=True)
class PaginatedResponse:
    pages: tuple[OcrPage, ...]
    kind: ResponseKind = field(default=ResponseKind.PAGINATED, init=False)


@dataclass(frozen=True)
class ChatResponse:
    content: str
    kind: ResponseKind = field(default=ResponseKind.CHAT, init=False)


@dataclass(frozen=True)
class UnrecognizedResponse:
    kind: ResponseKind = field(default=ResponseKind.UNRECOGNIZED, init=False)


OcrResponse = Union[PaginatedResponse, ChatResponse, UnrecognizedResponse]


def _chat_content(raw: dict[str, Any]) -> str | None:
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str) and content:
        return content
    return None


def parse_response(raw: Any) -> OcrResponse:
    """Classify a decoded OCR payload.

    Rules:
    - A ``pages`` list wins, even when ``choices`` is also present.
    - ``choices[0].message.content`` must be a non-empty string.
    - Anything else is unrecognized; callers treat that as "no text".
    """

    if not isinstance(raw, dict):
        return UnrecognizedResponse()

    pages = raw.get("pages")
    if isinstance(pages, list):
        return PaginatedResponse(pages=tuple(OcrPage.from_dict(p) for p in pages))

    content = _chat_content(raw)
    if content is not None:
        return ChatResponse(content=content)

    return UnrecognizedResponse()


def utc_iso_ms(epoch_ms: int) -> str:
    seconds, millis = divmod(int(epoch_ms), 1000)
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(seconds)) + (
        f".{millis:03d}Z"
    )


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    timestamp: str
    model: str
    image_label: str
    source_image: str
    normalized_result: str

    def to_dict(self) -> dict[str, Any]:
        # camelCase keys are the persisted history format.
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "model": self.model,
            "imageName": self.image_label,
            "originalImageDataUrl": self.source_image,
            "resultHTML": self.normalized_result,
        }

    @classmethod
    def from_dict(cls, data: Any) -> HistoryEntry:
        if not isinstance(data, dict):
            raise ValueError(f"History record is not an object: {data!r:.80}")
        entry_id = data.get("id")
        if isinstance(entry_id, bool) or not isinstance(entry_id, (int, float)):
            raise ValueError(f"History record has no numeric id: {entry_id!r}")
        if isinstance(entry_id, float) and not entry_id.is_integer():
            raise ValueError(f"History record id is not integral: {entry_id!r}")

        fields = {}
        for key in (
            "timestamp",
            "model",
            "imageName",
            "originalImageDataUrl",
            "resultHTML",
        ):
            value = data.get(key)
            if not isinstance(value, str):
                raise ValueError(f"History record {entry_id} is missing {key!r}")
            fields[key] = value

        return cls(
            id=int(entry_id),
            timestamp=fields["timestamp"],
            model=fields["model"],
            image_label=fields["imageName"],
            source_image=fields["originalImageDataUrl"],
            normalized_result=fields["resultHTML"],
        )


def new_entry(
    *,
    model: str,
    image_label: str | None,
    source_image: str,
    normalized_result: str,
    now_ms: int | None = None,
) -> HistoryEntry:
    epoch_ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    return HistoryEntry(
        id=epoch_ms,
        timestamp=utc_iso_ms(epoch_ms),
        model=model,
        image_label=image_label or DEFAULT_IMAGE_LABEL,
        source_image=source_image,
        normalized_result=normalized_result,
    )
