"""Food analysis API routes."""

from fastapi import APIRouter

from calorie_api.api.dependencies import FoodAnalysisHandlerDep
from calorie_api.models.analysis import AnalyzeFoodRequest, AnalyzeFoodResponse, ErrorResponse

router = APIRouter()


@router.post(
    "/analyze-food",
    response_model=AnalyzeFoodResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze_food(
    request: AnalyzeFoodRequest,
    handler: FoodAnalysisHandlerDep,
) -> AnalyzeFoodResponse:
    """
    Estimate the calories in a food photo.

    - **image**: data URI (`data:image/<type>;base64,...`)
    - **description**: optional context, e.g. "half portion"

    Errors use the shape `{success: false, error, details?}`:
    - 400: missing, malformed, unsupported or oversized image
    - 401: upstream rejected the API key
    - 429: upstream quota or rate limit
    - 500: API key not configured, or unclassified upstream failure
    """
    return await handler.analyze(request)
