from __future__ import annotations

from bs4 import BeautifulSoup
from markdownify import markdownify as md


def _soup(markup: str) -> BeautifulSoup:
    soup = BeautifulSoup(markup, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    return soup


def markup_to_text(markup: str) -> str:
    """Text content of a result, with breaks as newlines and images dropped."""
    if not markup:
        return ""
    return _soup(markup).get_text().strip()


def markup_to_markdown(markup: str) -> str:
    if not markup:
        return ""
    markdown = md(markup, heading_style="ATX")
    return markdown.strip() + "\n"
