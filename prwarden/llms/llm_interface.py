from abc import ABC, abstractmethod
from typing import Optional

from prwarden.review.errors import AIServiceError


class LLMInterface(ABC):
    @property
    @abstractmethod
    def model_name(self) -> str:
        """The model identifier sent to the provider."""
        pass

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Returns the raw text of the model's answer to ``prompt``.

        Raises AIServiceError; ``retryable`` is set when the provider reports
        overload or unavailability.
        """
        pass

    @staticmethod
    def is_overloaded(status_code: Optional[int], message: str) -> bool:
        text = message.lower()
        return status_code == 503 or "503" in text or "overloaded" in text

    @classmethod
    def wrap_error(cls, error: Exception) -> AIServiceError:
        """Translate a provider SDK exception into an AIServiceError."""
        status_code = getattr(error, "status_code", None) or getattr(error, "code", None)
        if not isinstance(status_code, int):
            status_code = None
        message = str(error)
        return AIServiceError(
            message,
            status_code=status_code,
            retryable=cls.is_overloaded(status_code, message),
        )
