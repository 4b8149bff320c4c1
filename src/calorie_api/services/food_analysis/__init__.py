"""
Food Analysis Service - photo to calorie estimate.

Validates an image data URI, sends it to a vision-capable chat model with a
fixed prompt, and normalizes the reply into name/calories/analysis.
"""

from .base import FoodAnalysisError, VisionCompletionClient
from .errors import classify_upstream_error
from .factory import clear_handler_cache, create_food_analysis_handler, get_food_analysis_handler
from .handler import FoodAnalysisHandler, build_prompt, validate_image_data_uri
from .parsing import extract_json_object, parse_analysis

__all__ = [
    "FoodAnalysisError",
    "FoodAnalysisHandler",
    "VisionCompletionClient",
    "build_prompt",
    "classify_upstream_error",
    "clear_handler_cache",
    "create_food_analysis_handler",
    "extract_json_object",
    "get_food_analysis_handler",
    "parse_analysis",
    "validate_image_data_uri",
]
