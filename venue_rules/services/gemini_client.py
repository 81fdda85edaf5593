from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from venue_rules.core.config import Settings


class GeminiError(RuntimeError):
    pass


class GeminiClient:
    """Minimal Gemini API client (HTTP).

    Configured from settings:
      - GEMINI_API_KEY
      - GEMINI_MODEL (default: "gemini-1.5-pro")
      - GEMINI_BASE_URL (default: "https://generativelanguage.googleapis.com")
      - GEMINI_TIMEOUT (seconds)

    The endpoint style used here follows the Generative Language API (v1beta).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-pro",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
        )

    async def generate_content(
        self, prompt: str, *, temperature: float = 0.2, response_mime_type: Optional[str] = None
    ) -> dict[str, Any]:
        url = f"{self.base_url}/v1beta/models/{self.model}:generateContent"
        params = {"key": self.api_key}
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": {
                "temperature": temperature,
            },
        }
        if response_mime_type:
            payload["generationConfig"]["responseMimeType"] = response_mime_type

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(url, params=params, json=payload)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPError as exc:
            raise GeminiError(f"Gemini request failed: {exc}") from exc

    async def generate_json(self, prompt: str) -> dict[str, Any]:
        """Ask Gemini to respond with JSON and parse the first candidate."""
        raw = await self.generate_content(
            prompt + "\n\nReturn ONLY valid JSON.",
            temperature=0.0,
            response_mime_type="application/json",
        )
        try:
            text = raw["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GeminiError("Gemini response has no text candidate") from exc
        return extract_json(text)


def extract_json(text: str) -> dict[str, Any]:
    """Parse a JSON object, tolerating code fences and surrounding prose."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end < start:
        raise GeminiError("Gemini response contains no JSON object")
    try:
        data = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as exc:
        raise GeminiError(f"Gemini response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise GeminiError("Gemini response is not a JSON object")
    return data
