"""
Food analysis handler.

Validates an image data URI, asks the vision model for a calorie estimate
and normalizes the reply. Every failure leaves as a FoodAnalysisError.
"""

import logging
import re

from calorie_api.models.analysis import (
    AnalysisErrorCode,
    AnalyzeFoodRequest,
    AnalyzeFoodResponse,
)

from .base import FoodAnalysisError, VisionCompletionClient
from .errors import classify_upstream_error
from .parsing import parse_analysis

logger = logging.getLogger(__name__)

SUPPORTED_SUBTYPES = frozenset(
    {"jpeg", "jpg", "png", "gif", "bmp", "tiff", "tif", "webp", "avif", "heic", "heif"}
)

# Upstream limit on the data URI (characters)
MAX_IMAGE_LENGTH = 20 * 1024 * 1024

IMAGE_DATA_URI_PREFIX = "data:image/"
SUBTYPE_PATTERN = re.compile(r"^data:image/([A-Za-z0-9.+-]+)")

ANALYSIS_PROMPT = """Analyze this food image and provide:
1. The name of the food item
2. Estimated calories (be specific and realistic)
3. A brief explanation of how you derived the calorie estimate

{context}

Please respond in the following JSON format:
{{
  "name": "Food name",
  "calories": number,
  "analysis": "Brief explanation of calorie estimation"
}}"""


def build_prompt(description: str | None = None) -> str:
    """Fill the analysis prompt, adding the user's description as context."""
    description = (description or "").strip()
    context = f"Additional context: {description}" if description else ""
    return ANALYSIS_PROMPT.format(context=context)


def validate_image_data_uri(image: str, max_length: int = MAX_IMAGE_LENGTH) -> str:
    """
    Check an image data URI is acceptable to the upstream API.

    Returns:
        The lower-cased media subtype

    Raises:
        FoodAnalysisError: INVALID_FORMAT, UNSUPPORTED_FORMAT or TOO_LARGE
    """
    if not image.startswith(IMAGE_DATA_URI_PREFIX):
        raise FoodAnalysisError(
            message="Invalid image format. Please upload a valid image file.",
            error_code=AnalysisErrorCode.INVALID_FORMAT,
            status_code=400,
        )

    match = SUBTYPE_PATTERN.match(image)
    subtype = match.group(1).lower() if match else ""
    if subtype not in SUPPORTED_SUBTYPES:
        raise FoodAnalysisError(
            message=(
                "Unsupported image format. Please use JPEG, PNG, WebP, HEIC, AVIF, "
                "or other common image formats."
            ),
            error_code=AnalysisErrorCode.UNSUPPORTED_FORMAT,
            status_code=400,
        )

    if len(image) > max_length:
        logger.info("Image too large for OpenAI API")
        raise FoodAnalysisError(
            message="Image file is too large. Please use a smaller image.",
            error_code=AnalysisErrorCode.TOO_LARGE,
            status_code=400,
            details=(
                "The image is larger than 20MB. Please compress or resize the image "
                "and try again."
            ),
        )

    return subtype


class FoodAnalysisHandler:
    """
    Turns an AnalyzeFoodRequest into a normalized calorie estimate.

    The credential and completion client are injected; the handler keeps no
    state between calls.
    """

    def __init__(
        self,
        api_key: str | None,
        client: VisionCompletionClient | None = None,
        *,
        model: str = "gpt-4o",
        max_tokens: int = 500,
        max_image_length: int = MAX_IMAGE_LENGTH,
    ):
        """
        Initialize the handler.

        Args:
            api_key: Upstream credential; empty means the service is unavailable
            client: Completion client (built from api_key on first use if omitted)
            model: Model identifier for the default client
            max_tokens: Output token cap for the default client
            max_image_length: Largest accepted data URI, in characters
        """
        self.api_key = api_key or ""
        self.model = model
        self.max_tokens = max_tokens
        self.max_image_length = max_image_length
        self._client = client

    def _get_client(self) -> VisionCompletionClient:
        if self._client is None:
            from .openai_provider import OpenAIVisionClient

            self._client = OpenAIVisionClient(
                api_key=self.api_key,
                model=self.model,
                max_tokens=self.max_tokens,
            )
        return self._client

    async def analyze(self, request: AnalyzeFoodRequest) -> AnalyzeFoodResponse:
        """
        Analyze a food image.

        Args:
            request: Image data URI and optional description

        Returns:
            AnalyzeFoodResponse with name, calories and analysis

        Raises:
            FoodAnalysisError: Validation failed or the upstream call failed
        """
        image = request.image
        if not image:
            raise FoodAnalysisError(
                message="No image provided",
                error_code=AnalysisErrorCode.MISSING_IMAGE,
                status_code=400,
            )

        if not self.api_key:
            logger.error("Analysis requested but OpenAI API key is not configured")
            raise FoodAnalysisError(
                message="OpenAI API key not configured",
                error_code=AnalysisErrorCode.SERVICE_UNAVAILABLE,
                status_code=500,
            )

        logger.info(
            f"Received image: prefix={image[:30]!r}, length={len(image)}"
        )

        subtype = validate_image_data_uri(image, self.max_image_length)
        prompt = build_prompt(request.description)

        try:
            content = await self._get_client().complete(prompt, image)
            if not content:
                raise ValueError("No response from OpenAI")
        except Exception as e:
            logger.exception(f"Error analyzing food ({subtype} image)")
            raise classify_upstream_error(e) from e

        result = parse_analysis(content)
        logger.info(f"Food analyzed: {result.name} ({result.calories} cal)")

        return AnalyzeFoodResponse(**result.model_dump())
