"""Pydantic models for API schemas."""

from .analysis import (
    AnalysisErrorCode,
    AnalysisResult,
    AnalyzeFoodRequest,
    AnalyzeFoodResponse,
    ErrorResponse,
)
from .food_log import (
    CalendarDay,
    CalorieLevel,
    CreateEntryRequest,
    DailyLog,
    FoodLogDocument,
    FoodLogEntry,
    GoalProgress,
    GoalRequest,
    GoalResponse,
    GoalStatus,
    UpdateEntryRequest,
)
from .image import ImageErrorCode, NormalizedImage, NormalizeImageResponse, UploadedImage

__all__ = [
    # Analysis
    "AnalysisErrorCode",
    "AnalysisResult",
    "AnalyzeFoodRequest",
    "AnalyzeFoodResponse",
    "ErrorResponse",
    # Food log
    "CalendarDay",
    "CalorieLevel",
    "CreateEntryRequest",
    "DailyLog",
    "FoodLogDocument",
    "FoodLogEntry",
    "GoalProgress",
    "GoalRequest",
    "GoalResponse",
    "GoalStatus",
    "UpdateEntryRequest",
    # Images
    "ImageErrorCode",
    "NormalizedImage",
    "NormalizeImageResponse",
    "UploadedImage",
]
