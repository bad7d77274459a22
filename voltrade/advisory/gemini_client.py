"""Gemini REST API async client.

Sends a single-turn prompt to ``models/{model}:generateContent`` and returns
the concatenated text of the first candidate.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger("voltrade.advisory")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class GeminiClient:
    """Async client wrapping the Gemini ``generateContent`` endpoint.

    Args:
        api_key: Gemini API key.
        model: Model name, e.g. ``"gemini-2.5-flash"``.
        base_url: API root, overridable for tests.
        retry_base_delay: First back-off delay in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = GEMINI_BASE_URL,
        retry_base_delay: float = _RETRY_BASE_DELAY,
    ) -> None:
        self._model = model
        self._base_url = base_url
        self._retry_base_delay = retry_base_delay
        self._headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _post_with_retry(self, url: str, payload: dict) -> httpx.Response:
        """POST *payload*, backing off on rate limits and transient failures.

        429 and 502/503/504 responses and transport errors are retried up to
        ``_MAX_RETRIES`` attempts in total; any other HTTP error is raised
        immediately.
        """
        last_exc: Optional[Exception] = None

        async with httpx.AsyncClient() as client:
            for attempt in range(1, _MAX_RETRIES + 1):
                try:
                    resp = await client.post(
                        url, headers=self._headers, json=payload, timeout=30.0,
                    )
                except httpx.TransportError as exc:
                    last_exc = exc
                else:
                    if resp.status_code not in _RETRYABLE_STATUS_CODES:
                        resp.raise_for_status()
                        return resp
                    last_exc = httpx.HTTPStatusError(
                        f"Gemini returned {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )

                if attempt == _MAX_RETRIES:
                    break
                delay = self._retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    "Gemini request failed (%s), attempt %d/%d; retrying in %.1fs",
                    last_exc, attempt, _MAX_RETRIES, delay,
                )
                await asyncio.sleep(delay)

        logger.error("Gemini request gave up after %d attempts", _MAX_RETRIES)
        raise last_exc  # type: ignore[misc]

    # ── Text generation ──────────────────────────────────────────────────

    async def generate_content(self, prompt: str) -> str:
        """Generate text for *prompt*.

        Returns:
            The first candidate's text, or ``""`` when the model returned
            no text parts.

        Raises:
            httpx.HTTPError: On non-retryable or exhausted HTTP failures.
            ValueError: If the response body is not a JSON object.
        """
        url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        resp = await self._post_with_retry(url, payload)
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected Gemini response payload")

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts).strip()
