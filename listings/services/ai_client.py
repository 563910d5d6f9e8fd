"""
Generative text client backed by Google Gemini.

Implements the single capability the optimizer needs:
``await client.generate(prompt, field=...) -> str``.

The SDK call is blocking; it runs in the event loop's default executor, so
the same model object works from whichever event loop calls it.

Any SDK error, blocked prompt or empty answer is converted into
GenerationFailure so callers only ever see one error kind.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, Optional

import google.generativeai as genai
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from listings.exceptions import GenerationFailure
from listings.monitoring import add_upstream_breadcrumb

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT = 60.0

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 2048,
}


class GeminiClient:
    """
    Async client for Gemini text generation.

    The SDK model is created on first use, so importing this module (or
    building the client) never requires GEMINI_API_KEY.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            api_key: Gemini API key (defaults to settings.GEMINI_API_KEY)
            model_name: Model identifier (defaults to settings.GEMINI_MODEL)
            generation_config: Overrides for GENERATION_CONFIG
            timeout: Request timeout in seconds
                (defaults to settings.GEMINI_REQUEST_TIMEOUT, 60s)
        """
        self.api_key = api_key or getattr(settings, "GEMINI_API_KEY", "")
        self.model_name = model_name or getattr(settings, "GEMINI_MODEL", DEFAULT_MODEL)
        self.generation_config = {**GENERATION_CONFIG, **(generation_config or {})}
        if timeout is None:
            timeout = getattr(settings, "GEMINI_REQUEST_TIMEOUT", DEFAULT_TIMEOUT)
        self.timeout = float(timeout)
        self._model = None

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise ImproperlyConfigured(
                    "GEMINI_API_KEY is required to call the generative service"
                )
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config=self.generation_config,
            )
        return self._model

    async def generate(self, prompt: str, field: str = "text") -> str:
        """
        Generate text for one prompt.

        Args:
            prompt: Full prompt text
            field: Field being generated, used in logs and error messages

        Returns:
            Trimmed response text

        Raises:
            GenerationFailure: SDK error, blocked response or empty text
        """
        model = self._get_model()
        add_upstream_breadcrumb(
            "generate",
            message=f"Generating {field}",
            extra_data={"model": self.model_name, "prompt_chars": len(prompt)},
        )

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                functools.partial(
                    model.generate_content,
                    prompt,
                    request_options={"timeout": self.timeout},
                ),
            )
            text = response.text
        except Exception as e:
            logger.error(f"{field} generation failed: {type(e).__name__}: {e}")
            raise GenerationFailure(
                f"{field.capitalize()} optimization failed: {e}",
                {"field": field, "model": self.model_name},
            ) from e

        text = (text or "").strip()
        if not text:
            raise GenerationFailure(
                f"{field.capitalize()} optimization failed: empty response",
                {"field": field, "model": self.model_name},
            )
        return text
