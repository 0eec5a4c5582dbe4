import time
from typing import Any

from google import genai
from google.genai import types

from app.config import settings
from app.services.llm_interface import LLMInterface
from app.utils.logger import setup_logger

logger = setup_logger("gemini_client")


class GeminiClient(LLMInterface):
    """
    LLM Client implementation for Google Gemini API.
    """

    def __init__(
        self, api_key: str, default_model: str = settings.default_gemini_model
    ):
        if not api_key:
            logger.error("Gemini API key is required but not provided")
            raise ValueError("Gemini API key is required.")

        self.api_key = api_key
        self.default_model = default_model

        try:
            self._client = genai.Client(api_key=self.api_key)
            logger.info(
                f"Gemini client initialized successfully with api_key: {self.api_key[:5]}..., model: {self.default_model}"
            )
        except Exception as e:
            logger.error(f"Failed to configure Gemini SDK: {e}", exc_info=True)
            raise

    @staticmethod
    def _text_from_candidates(response) -> str:
        """Rebuild the answer from candidate parts when ``response.text`` is empty."""
        if not response.candidates:
            logger.error("No candidates found in response, cannot reconstruct text")
            return ""

        candidate = response.candidates[0]
        finish_reason = getattr(candidate, "finish_reason", None)
        if finish_reason == "MAX_TOKENS":
            logger.warning("Response truncated due to max_tokens limit")
        elif finish_reason == "SAFETY":
            logger.warning("Response blocked due to safety filters")

        if not candidate.content or not candidate.content.parts:
            logger.warning("No parts found in candidate content to reconstruct text")
            return ""
        return "".join(
            part.text for part in candidate.content.parts if getattr(part, "text", None)
        )

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> str:
        model_name = self.default_model
        if max_tokens is None:
            max_tokens = settings.llm_summary_max_tokens

        if not prompt or not prompt.strip():
            logger.warning("Empty or whitespace-only prompt provided to generate_text")
            return ""

        prompt_length = len(prompt)
        start_time = time.perf_counter()
        try:
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    temperature=temperature, max_output_tokens=max_tokens, **kwargs
                ),
            )

            result_text = response.text
            if result_text is None:
                logger.warning(
                    "response.text is None, attempting to reconstruct from parts"
                )
                result_text = self._text_from_candidates(response)

            duration = time.perf_counter() - start_time
            logger.info(
                f"Gemini generate_text completed successfully for model {model_name} in {duration:.4f}s, "
                f"input: {prompt_length} chars, output: {len(result_text)} chars"
            )
            if duration > 30:
                logger.warning(f"Slow API response: {duration:.4f}s for generate_text")

            return result_text

        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"Gemini API error during text generation for model {model_name} after {duration:.4f}s: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            raise
