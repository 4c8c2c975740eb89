import litellm

from prwarden.llms.llm_interface import LLMInterface
from prwarden.utils.logger import logger


class LiteLLMProvider(LLMInterface):
    """Any model litellm can route to, e.g. ``deepseek/deepseek-chat``."""

    def __init__(self, model: str):
        self.model = model

    @property
    def model_name(self) -> str:
        return self.model

    def generate(self, prompt: str) -> str:
        try:
            logger.info(f"Generating code review from model: {self.model}...")
            response = litellm.completion(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            error = self.wrap_error(e)
            logger.error(
                f"LiteLLM request to {self.model} failed (retryable={error.retryable}): {e}"
            )
            raise error from e

        return response.choices[0].message.content or ""
