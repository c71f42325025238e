from __future__ import annotations

import logging
from typing import Any

import requests
from requests import exceptions as req_exc

from .errors import TransportError

logger = logging.getLogger(__name__)

MISTRAL_OCR_URL = "https://api.mistral.ai/v1/ocr"

_ERROR_BODY_LIMIT = 2000


def build_payload(image_data_url: str, *, model: str) -> dict[str, Any]:
    return {
        "model": model,
        "document": {
            "type": "image_url",
            "image_url": image_data_url,
        },
        "include_image_base64": True,
    }


def _is_json_content_type(content_type: str | None) -> bool:
    return bool(content_type) and "application/json" in content_type.lower()


class OcrClient:
    """Single POST to the OCR endpoint. No retries."""

    def __init__(
        self,
        session: requests.Session,
        *,
        api_url: str = MISTRAL_OCR_URL,
        timeout_s: int = 60,
    ) -> None:
        self._session = session
        self._api_url = api_url
        self._timeout_s = timeout_s

    @property
    def api_url(self) -> str:
        return self._api_url

    def extract(self, image_data_url: str, *, api_key: str, model: str) -> Any:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        logger.debug("POST %s model=%s", self._api_url, model)
        try:
            resp = self._session.post(
                self._api_url,
                json=build_payload(image_data_url, model=model),
                headers=headers,
                timeout=self._timeout_s,
            )
        except req_exc.RequestException as e:
            raise TransportError(f"OCR request to {self._api_url} failed: {e}") from e

        content_type = resp.headers.get("content-type")
        if resp.ok and _is_json_content_type(content_type):
            try:
                return resp.json()
            except ValueError as e:
                raise TransportError(
                    f"OCR response was not valid JSON: {e}",
                    status_code=int(resp.status_code),
                ) from e

        body = (resp.text or "")[:_ERROR_BODY_LIMIT]
        raise TransportError(
            "API request failed, status code: "
            f"{resp.status_code} {resp.reason or ''}. {body}".rstrip(),
            status_code=int(resp.status_code),
        )
