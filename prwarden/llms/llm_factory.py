import os
from functools import lru_cache

from prwarden.llms.gemini import Gemini
from prwarden.llms.litellm_provider import LiteLLMProvider
from prwarden.llms.llm_interface import LLMInterface
from prwarden.config.settings import LLM
from prwarden.utils.logger import logger


@lru_cache(maxsize=None)
def llm() -> LLMInterface:
    """
    Factory function to get the language model instance.
    Uses lru_cache to ensure a single instance is created (singleton pattern).
    """
    if LLM == "gemini":
        logger.info("Using Gemini LLM.")
        return Gemini()
    elif LLM == "litellm":
        model = os.getenv("LITELLM_MODEL")
        if not model:
            raise ValueError("LITELLM_MODEL environment variable not set.")
        logger.info(f"Using LiteLLM with model {model}.")
        return LiteLLMProvider(model)
    else:
        raise NotImplementedError(f"LLM '{LLM}' not implemented.")
