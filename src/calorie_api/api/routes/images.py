"""Image normalization API routes."""

import logging

from fastapi import APIRouter, File, UploadFile
from starlette.concurrency import run_in_threadpool

from calorie_api.api.dependencies import ImageNormalizerDep
from calorie_api.models.analysis import ErrorResponse
from calorie_api.models.image import NormalizeImageResponse, UploadedImage
from calorie_api.services.image_normalizer import MAX_UPLOAD_SIZE

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/normalize-image",
    response_model=NormalizeImageResponse,
    responses={400: {"model": ErrorResponse}},
)
async def normalize_image(
    normalizer: ImageNormalizerDep,
    file: UploadFile = File(..., description="Food photo (JPEG, PNG, WebP, HEIC, ...)"),
) -> NormalizeImageResponse:
    """
    Re-encode a photo as a JPEG data URI ready for /api/analyze-food.

    Quality is lowered from 0.9 towards 0.3 until the data URI is under
    5,000,000 characters. Files that cannot be decoded are passed through
    unmodified when their declared type is an image type (`converted: false`).
    """
    # One byte past the limit is enough for validate_upload to reject it
    upload = UploadedImage(
        filename=file.filename or "",
        content_type=file.content_type or "",
        data=await file.read(MAX_UPLOAD_SIZE + 1),
    )

    result = await run_in_threadpool(normalizer.normalize, upload)

    return NormalizeImageResponse(
        image=result.data_uri,
        media_type=result.media_type,
        width=result.width,
        height=result.height,
        quality=result.quality,
        attempts=result.attempts,
        converted=result.converted,
    )
