"""Outbound Gemini call for one candidate model.

One single-turn, single-part generate_content request per call. The
google-genai client is synchronous, so the call runs in a worker thread.
There is no explicit timeout and no retry here: the fallback runner decides
what happens after a failure.
"""

import asyncio
from typing import Optional

from google import genai
from google.genai import errors

from src.llm.extraction import PayloadError


class CandidateHTTPError(Exception):
    """Gemini answered a candidate model with a non-success status."""

    def __init__(self, model: str, status_code: Optional[int], message: str = ""):
        super().__init__(message or f"{model} returned HTTP {status_code}")
        self.model = model
        self.status_code = status_code


class GeminiModelCaller:
    """Async callable: (model_id, prompt) -> response text."""

    def __init__(self, api_key: str, client: Optional[genai.Client] = None) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required")
        self._client = client or genai.Client(api_key=api_key)

    async def __call__(self, model: str, prompt: str) -> str:
        """Generate content with one model.

        Raises:
            CandidateHTTPError: On any API status error (body not inspected).
            PayloadError: If the response carries no text.
        """
        try:
            response = await asyncio.to_thread(
                self._client.models.generate_content,
                model=model,
                contents=prompt,
            )
        except errors.APIError as e:
            raise CandidateHTTPError(model, getattr(e, "code", None)) from e

        text = response.text
        if not text:
            raise PayloadError(f"{model} returned no text")
        return text
