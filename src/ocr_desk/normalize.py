from __future__ import annotations

import html as html_lib
import re
from typing import Any

from .models import (
    ChatResponse,
    EmbeddedImage,
    OcrPage,
    PaginatedResponse,
    parse_response,
)

LINE_BREAK = "<br>"
PAGE_SEPARATOR = LINE_BREAK * 2

IMG_STYLE = "max-width: 100%; height: auto; border-radius: 8px; margin: 8px 0;"

_TRAILING_BREAKS = re.compile(r"(?:\s|<br>)+\Z")


def placeholder_pattern(image_id: str) -> re.Pattern[str]:
    """Match ``![alt](image_id)`` for one literal image id.

    Only well-formed Markdown image syntax matches: the alt text cannot contain
    ``]`` and the target must equal the id exactly. This is not a Markdown
    parser; reference-style images, titles and nested brackets are ignored.
    """

    return re.compile(r"!\[([^\]]*?)\]\(" + re.escape(image_id) + r"\)")


def image_tag(src: str, alt: str, *, escape_alt: bool = False) -> str:
    if escape_alt:
        alt = html_lib.escape(alt, quote=True)
    return f'<img src="{src}" alt="{alt}" style="{IMG_STYLE}" />'


def substitute_image(
    markdown: str, image: EmbeddedImage, *, escape_alt: bool = False
) -> str:
    if not image.resolvable:
        return markdown

    pattern = placeholder_pattern(image.id)
    first = pattern.search(markdown)
    if first is None:
        # Listed but never referenced: the image is dropped.
        return markdown

    tag = image_tag(image.data, first.group(1) or image.id, escape_alt=escape_alt)
    return pattern.sub(lambda _m: tag, markdown)


def render_breaks(text: str) -> str:
    return text.replace("\n", LINE_BREAK)


def normalize_page(page: OcrPage, *, escape_alt: bool = False) -> str:
    markdown = page.markdown
    for image in page.images:
        markdown = substitute_image(markdown, image, escape_alt=escape_alt)
    return render_breaks(markdown)


def normalize(raw_response: Any, *, escape_alt: bool = False) -> str:
    """Render a raw OCR payload as one markup string.

    Paginated payloads get per-page image substitution and a double break
    between pages. Chat-completion payloads only get their newlines rendered.
    Unrecognized payloads yield ``""``.
    """

    response = parse_response(raw_response)

    if isinstance(response, PaginatedResponse):
        rendered = PAGE_SEPARATOR.join(
            normalize_page(page, escape_alt=escape_alt) for page in response.pages
        )
        # Empty trailing pages and a final newline leave breaks at the end.
        return _TRAILING_BREAKS.sub("", rendered).lstrip()

    if isinstance(response, ChatResponse):
        return render_breaks(response.content)

    return ""
