# app/core/gemini.py
import logging
from typing import Optional

import httpx

from app.core.errors import CallableError, ErrorCode

logger = logging.getLogger(__name__)

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Thin async wrapper around the Gemini generateContent REST endpoint."""

    def __init__(self, api_key: Optional[str], model: str, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def generate(self, prompt: str, json_output: bool = False) -> str:
        if not self.api_key:
            raise CallableError(ErrorCode.INTERNAL, "GEMINI_API_KEY is not set.")

        url = f"{GEMINI_BASE}/models/{self.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if json_output:
            payload["generationConfig"] = {"responseMimeType": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.exception("Gemini request failed")
            raise CallableError(ErrorCode.INTERNAL, "The assistant is unavailable.") from e

        if r.status_code != 200:
            logger.error("Gemini returned %s: %s", r.status_code, r.text[:500])
            raise CallableError(ErrorCode.INTERNAL, "The assistant is unavailable.")

        try:
            data = r.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(p.get("text", "") for p in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError):
            logger.error("Gemini response has no candidates: %s", r.text[:500])
            raise CallableError(ErrorCode.INTERNAL, "The assistant returned no answer.")
