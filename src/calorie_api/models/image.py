"""Models for image normalization."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class ImageErrorCode(str, Enum):
    """Standardized error codes for normalization failures."""

    INVALID_TYPE = "INVALID_TYPE"
    TOO_LARGE = "TOO_LARGE"
    TOO_SMALL_OR_CORRUPTED = "TOO_SMALL_OR_CORRUPTED"
    UNSUPPORTED_HEIC = "UNSUPPORTED_HEIC"
    DECODE_FAILED = "DECODE_FAILED"
    CONVERSION_FAILED = "CONVERSION_FAILED"


@dataclass(frozen=True)
class UploadedImage:
    """A user-selected file, held in memory until normalized."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return ""
        return self.filename.rsplit(".", 1)[-1].lower()

    @property
    def is_heic(self) -> bool:
        return self.content_type in ("image/heic", "image/heif") or self.extension in (
            "heic",
            "heif",
        )


class NormalizedImage(BaseModel):
    """Result of normalizing an upload."""

    data_uri: str = Field(..., description="data:<mime>;base64,<payload>")
    media_type: str = Field(..., description="Media type of the data URI")
    width: int | None = Field(None, description="Pixel width (None when passed through)")
    height: int | None = Field(None, description="Pixel height (None when passed through)")
    quality: float | None = Field(None, description="Final JPEG quality, 0.3-0.9")
    attempts: int = Field(
        0,
        ge=0,
        description="JPEG exports performed: the 0.9 export plus up to six reduced-quality retries",
    )
    converted: bool = Field(True, description="False when the original bytes were passed through")


class NormalizeImageResponse(BaseModel):
    """Successful response body for /api/normalize-image."""

    success: bool = True
    image: str
    media_type: str
    width: int | None = None
    height: int | None = None
    quality: float | None = None
    attempts: int = Field(0, description="Initial export plus reduced-quality retries (at most 7)")
    converted: bool = True
