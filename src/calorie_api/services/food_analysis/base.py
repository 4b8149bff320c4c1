"""
Base classes for food analysis.

Defines the completion client interface that upstream providers implement
and the error type every analysis failure is reported through.
"""

from abc import ABC, abstractmethod
from typing import Any

from calorie_api.core.exceptions import APIError
from calorie_api.models.analysis import AnalysisErrorCode


class FoodAnalysisError(APIError):
    """Analysis failure carrying a stable error code and HTTP status."""

    def __init__(
        self,
        message: str,
        error_code: AnalysisErrorCode = AnalysisErrorCode.UNKNOWN,
        status_code: int = 500,
        details: Any = None,
    ):
        super().__init__(message=message, status_code=status_code, details=details)
        self.error_code = error_code


class VisionCompletionClient(ABC):
    """
    Abstract client for a hosted vision-capable chat completion API.

    One call, one reply: implementations must not retry or stream.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def complete(self, prompt: str, image_url: str) -> str:
        """
        Send a text prompt plus one image and return the reply text.

        Args:
            prompt: Instruction text
            image_url: Image as a data URI

        Returns:
            The model's reply (may be empty)

        Raises:
            Exception: Whatever the upstream SDK raises; callers classify it
        """
        ...
