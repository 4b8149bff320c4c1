"""Pydantic models for the food analysis API contract.

Defines the request/response shapes for POST /api/analyze-food.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Enums
# =============================================================================


class AnalysisErrorCode(str, Enum):
    """Standardized error codes for analysis failures."""

    MISSING_IMAGE = "MISSING_IMAGE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"  # Credential not configured
    INVALID_FORMAT = "INVALID_FORMAT"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    TOO_LARGE = "TOO_LARGE"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    RATE_LIMITED = "RATE_LIMITED"
    UNKNOWN = "UNKNOWN"


# =============================================================================
# Request Models
# =============================================================================


class AnalyzeFoodRequest(BaseModel):
    """
    Request payload for /api/analyze-food.

    Both fields are optional at the schema level so that a missing image
    is reported through the handler's own error shape, not a 422.
    """

    image: str | None = Field(
        None, description="Image as a data URI (data:image/<type>;base64,...)"
    )
    description: str | None = Field(
        None, description="Optional free-text description of the food"
    )


# =============================================================================
# Response Models
# =============================================================================


class AnalysisResult(BaseModel):
    """Normalized calorie estimate produced from the model reply."""

    name: str = Field("Unknown Food", description="Food name")
    calories: int = Field(300, ge=0, description="Estimated calories")
    analysis: str = Field(
        "Unable to analyze food item",
        description="Brief explanation of the estimate",
    )


class AnalyzeFoodResponse(AnalysisResult):
    """Successful response body for /api/analyze-food."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error response body shared by all endpoints."""

    success: bool = False
    error: str
    details: str | dict[str, Any] | None = None
    code: str | None = Field(None, description="Stable error code")
