import os

from google import genai
from prwarden.llms.llm_interface import LLMInterface
from prwarden.utils.logger import logger
from prwarden.config.settings import APP_ENV


class Gemini(LLMInterface):
    def __init__(self):
        """Initializes the Gemini client and model configuration."""
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            logger.error("GEMINI_API_KEY environment variable not set.")
            raise ValueError("GEMINI_API_KEY environment variable not set.")

        self.client = genai.Client(api_key=api_key)
        self._model_name = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate(self, prompt: str) -> str:
        try:
            logger.info(f"Generating code review from Gemini model: {self.model_name}...")
            config = genai.types.GenerateContentConfig(
                response_mime_type="application/json",
            )
            response = self.client.models.generate_content(
                model=f"models/{self.model_name}",
                contents=[prompt],
                config=config,
            )
        except Exception as e:
            error = self.wrap_error(e)
            logger.error(
                f"Gemini request failed (retryable={error.retryable}): {e}"
            )
            raise error from e

        if APP_ENV in ["dev", "development", "debug"]:
            logger.debug(f"Raw response from Gemini: {response.text}")

        return response.text or ""
