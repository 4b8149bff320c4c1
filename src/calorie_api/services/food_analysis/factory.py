"""
Factory for creating the food analysis handler.

Reads configuration from settings and wires in the OpenAI client.
"""

import logging
from functools import lru_cache

from calorie_api.core.config import Settings, get_settings

from .handler import FoodAnalysisHandler

logger = logging.getLogger(__name__)


def create_food_analysis_handler(settings: Settings) -> FoodAnalysisHandler:
    """
    Build a handler from settings.

    The upstream client is created lazily, so a missing API key surfaces as
    a SERVICE_UNAVAILABLE error on the first request rather than at startup.
    """
    if not settings.is_llm_configured:
        logger.warning("OPENAI_API_KEY is not set; food analysis will be unavailable")

    return FoodAnalysisHandler(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        max_tokens=settings.analysis_max_tokens,
    )


@lru_cache(maxsize=1)
def get_food_analysis_handler() -> FoodAnalysisHandler:
    """Get the configured food analysis handler."""
    return create_food_analysis_handler(get_settings())


def clear_handler_cache():
    """Clear the cached handler instance (useful for testing)."""
    get_food_analysis_handler.cache_clear()
