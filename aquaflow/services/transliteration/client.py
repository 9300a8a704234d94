"""
Transliteration Client

Converts Latin-script input into Devanagari with the Google Input Tools
request endpoint. Best effort only: any network or parse failure is
logged and reported as ``None`` so the caller leaves the target field
unchanged.

Wire format of a successful answer::

    ["SUCCESS", [["ramesh", ["रमेश", ...], ...]]]
"""

from typing import Any, Optional

import httpx

from aquaflow.config import TransliterationSettings, get_settings
from aquaflow.logger import get_logger


log = get_logger(__name__)


def extract_suggestion(data: Any) -> Optional[str]:
    """First suggestion from an Input Tools response, or None."""
    try:
        if data[0] != "SUCCESS":
            return None
        suggestion = data[1][0][1][0]
    except (IndexError, KeyError, TypeError):
        return None
    return suggestion or None


class TransliterationClient:
    """
    Async Input Tools client.

    Usage::

        client = TransliterationClient()
        hindi = await client.transliterate("Ramesh")
        await client.close()
    """

    def __init__(
        self,
        settings: Optional[TransliterationSettings] = None,
        timeout: float = 5.0,
    ):
        self._settings = settings or get_settings().transliteration
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP client (created lazily, reused)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def build_params(self, text: str) -> dict[str, Any]:
        return {
            "text": text,
            "itc": self._settings.input_tool,
            "num": 1,
            "cp": 0,
            "cs": 1,
            "ie": "utf-8",
            "oe": "utf-8",
        }

    async def transliterate(self, text: str) -> Optional[str]:
        """
        Transliterate ``text``.

        Returns:
            "" for blank input (the target field is cleared),
            the suggestion on success,
            None when the call is disabled or fails
        """
        if not text.strip():
            return ""
        if not self._settings.enabled:
            return None

        try:
            client = await self._get_client()
            response = await client.get(self._settings.endpoint, params=self.build_params(text))
            if response.status_code != 200:
                log.warning(
                    "transliteration_http_error",
                    status_code=response.status_code,
                )
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("transliteration_failed", error=str(e), error_type=type(e).__name__)
            return None

        suggestion = extract_suggestion(data)
        if suggestion is None:
            log.debug("transliteration_no_suggestion", text=text)
        return suggestion
