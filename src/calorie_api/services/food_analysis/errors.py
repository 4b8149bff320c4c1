"""
Translation of upstream exceptions into user-facing analysis errors.

The upstream SDK only exposes failure causes through its message text, so
classification is substring matching. All matching rules live here.
"""

import logging

from calorie_api.models.analysis import AnalysisErrorCode

from .base import FoodAnalysisError

logger = logging.getLogger(__name__)

IMAGE_FORMAT_MARKERS = ("400", "unsupported image", "image_parse_error")
RATE_LIMIT_MARKERS = ("quota", "exceeded")


def invalid_format_error() -> FoodAnalysisError:
    return FoodAnalysisError(
        message="Image format not supported. Please try taking a new photo or using a different image.",
        error_code=AnalysisErrorCode.INVALID_FORMAT,
        status_code=400,
        details=(
            "The image format is not supported by OpenAI. Try taking a new photo with "
            "your camera or using a different image file. Camera photos sometimes need "
            "to be converted to a different format."
        ),
    )


def invalid_credential_error() -> FoodAnalysisError:
    return FoodAnalysisError(
        message="Invalid API key. Please check your OpenAI API key.",
        error_code=AnalysisErrorCode.INVALID_CREDENTIAL,
        status_code=401,
        details="The OpenAI API key is invalid or expired.",
    )


def rate_limited_error() -> FoodAnalysisError:
    return FoodAnalysisError(
        message="API quota exceeded. Please check your OpenAI account or try again later.",
        error_code=AnalysisErrorCode.RATE_LIMITED,
        status_code=429,
        details=(
            "You have exceeded your OpenAI API usage limits. Check your account at "
            "platform.openai.com or wait for limits to reset."
        ),
    )


def classify_upstream_error(error: BaseException) -> FoodAnalysisError:
    """
    Map an exception raised by the upstream call to a FoodAnalysisError.

    Rules, first match wins:
    1. "429" -> rate limited
    2. "400", "unsupported image", "image_parse_error" -> invalid format
    3. "401" -> invalid credential
    4. "quota", "exceeded" -> rate limited
    5. anything else -> unknown (500) with the raw message as details
    """
    message = str(error)
    lowered = message.lower()

    if "429" in message:
        classified = rate_limited_error()
    elif any(marker in lowered for marker in IMAGE_FORMAT_MARKERS):
        classified = invalid_format_error()
    elif "401" in message:
        classified = invalid_credential_error()
    elif any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        classified = rate_limited_error()
    else:
        classified = FoodAnalysisError(
            message="Failed to analyze food image",
            error_code=AnalysisErrorCode.UNKNOWN,
            status_code=500,
            details=message or type(error).__name__,
        )

    logger.info(
        f"Classified upstream error as {classified.error_code.value} "
        f"({classified.status_code})"
    )
    return classified
