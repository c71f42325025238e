from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .http_client import MISTRAL_OCR_URL

KNOWN_MODELS = ("mistral-ocr-latest", "mistral-ocr-2503")
DEFAULT_MODEL = KNOWN_MODELS[0]
DEFAULT_TIMEOUT_S = 60


def _parse_positive_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class Settings:
    home_dir: Path
    api_url: str
    model: str
    timeout_s: int
    api_key: str | None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    home = env.get("OCR_DESK_HOME") or "~/.ocr-desk"
    return Settings(
        home_dir=Path(home).expanduser(),
        api_url=env.get("OCR_DESK_API_URL") or MISTRAL_OCR_URL,
        model=(env.get("OCR_DESK_MODEL") or DEFAULT_MODEL).strip() or DEFAULT_MODEL,
        timeout_s=_parse_positive_int(env.get("OCR_DESK_TIMEOUT"), DEFAULT_TIMEOUT_S),
        api_key=env.get("MISTRAL_API_KEY") or None,
    )
