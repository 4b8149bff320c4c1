"""FastAPI dependency injection factories."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from calorie_api.core.config import Settings, get_settings
from calorie_api.services.food_analysis import FoodAnalysisHandler, get_food_analysis_handler
from calorie_api.services.food_log import FoodLogStore
from calorie_api.services.image_normalizer import ImageNormalizer

# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache(maxsize=1)
def get_food_log_store() -> FoodLogStore:
    """
    Get the shared FoodLogStore.

    Returns:
        FoodLogStore loaded from settings.food_log_path
    """
    settings = get_settings()
    return FoodLogStore(settings.food_log_path, default_goal=settings.default_daily_goal)


@lru_cache(maxsize=1)
def get_image_normalizer() -> ImageNormalizer:
    """Get the shared ImageNormalizer."""
    return ImageNormalizer()


# Type aliases for service dependencies
FoodAnalysisHandlerDep = Annotated[FoodAnalysisHandler, Depends(get_food_analysis_handler)]
FoodLogStoreDep = Annotated[FoodLogStore, Depends(get_food_log_store)]
ImageNormalizerDep = Annotated[ImageNormalizer, Depends(get_image_normalizer)]
