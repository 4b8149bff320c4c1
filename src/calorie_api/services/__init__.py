"""Business logic services."""

from .food_analysis import FoodAnalysisError, FoodAnalysisHandler
from .food_log import FoodLogStore
from .image_normalizer import ImageNormalizationError, ImageNormalizer

__all__ = [
    "FoodAnalysisError",
    "FoodAnalysisHandler",
    "FoodLogStore",
    "ImageNormalizationError",
    "ImageNormalizer",
]
