from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from .errors import InputValidationError

_MAGIC: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_image_type(data: bytes) -> str | None:
    for magic, mime in _MAGIC:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def guess_image_type(path: Path, data: bytes) -> str | None:
    """Prefer the file name; fall back to magic bytes."""
    mime, _ = mimetypes.guess_type(path.name)
    if mime and mime.startswith("image/"):
        return mime
    return sniff_image_type(data)


def is_image_data_url(value: str | None) -> bool:
    return bool(value) and value.startswith("data:image")


def to_data_url(data: bytes, mime: str) -> str:
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


def read_image_data_url(path: str | Path) -> str:
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise InputValidationError(f"Image file not found: {path}") from e
    except OSError as e:
        raise InputValidationError(f"Could not read image {path}: {e}") from e

    if not data:
        raise InputValidationError(f"Image file is empty: {path}")

    mime = guess_image_type(path, data)
    if mime is None:
        raise InputValidationError(
            f"Not a supported image file (JPG, PNG, ...): {path}"
        )
    return to_data_url(data, mime)
