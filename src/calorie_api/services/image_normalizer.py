"""
Image normalization for upload to the vision model.

Turns an arbitrary user-selected image into a size-bounded JPEG data URI:
validate, decode with Pillow, flatten onto white, then export as JPEG,
lowering quality until the data URI fits under the ceiling. If decoding or
encoding fails the original bytes are passed through unmodified when they
already form an image data URI.
"""

import base64
import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from calorie_api.core.exceptions import APIError
from calorie_api.models.image import ImageErrorCode, NormalizedImage, UploadedImage

logger = logging.getLogger(__name__)

# =============================================================================
# Validation Constants
# =============================================================================

SUPPORTED_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "webp", "avif", "heic", "heif"}
)

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB
MIN_UPLOAD_SIZE = 1000  # Anything smaller is almost certainly truncated

# Ceiling on the exported data URI length (characters)
MAX_ENCODED_LENGTH = 5_000_000

# JPEG quality on Pillow's integer scale; 90 -> 30 corresponds to 0.9 -> 0.3
INITIAL_QUALITY = 90
MIN_QUALITY = 30
QUALITY_STEP = 10

JPEG_DATA_URI_PREFIX = "data:image/jpeg"


# =============================================================================
# Errors
# =============================================================================


class ImageNormalizationError(APIError):
    """Base class for normalization failures; message is user-displayable."""

    code: ImageErrorCode = ImageErrorCode.CONVERSION_FAILED

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message=message, status_code=400, details=details)


class InvalidImageTypeError(ImageNormalizationError):
    code = ImageErrorCode.INVALID_TYPE

    def __init__(self):
        super().__init__(
            "Please select a valid image file (JPEG, PNG, WebP, HEIC, AVIF, etc.)"
        )


class ImageTooLargeError(ImageNormalizationError):
    code = ImageErrorCode.TOO_LARGE

    def __init__(self):
        super().__init__(
            "Image file is too large. Please select an image smaller than 10MB."
        )


class ImageCorruptedError(ImageNormalizationError):
    code = ImageErrorCode.TOO_SMALL_OR_CORRUPTED

    def __init__(self):
        super().__init__(
            "Image file appears to be corrupted or too small. "
            "Please try taking a new photo."
        )


class UnsupportedHeicError(ImageNormalizationError):
    code = ImageErrorCode.UNSUPPORTED_HEIC

    def __init__(self, message: str | None = None, details: str | None = None):
        super().__init__(
            message
            or "HEIF/HEIC files are not supported by this server. "
            "Please convert to JPEG or PNG first.",
            details,
        )


class ImageDecodeError(ImageNormalizationError):
    code = ImageErrorCode.DECODE_FAILED

    def __init__(self, message: str | None = None, details: str | None = None):
        super().__init__(message or "Failed to load image", details)


class ImageConversionError(ImageNormalizationError):
    code = ImageErrorCode.CONVERSION_FAILED

    def __init__(self, message: str | None = None, details: str | None = None):
        super().__init__(message or "Failed to convert image to JPEG", details)


# =============================================================================
# Helpers
# =============================================================================


def to_data_uri(media_type: str, payload: bytes) -> str:
    """Encode bytes as a data URI."""
    return f"data:{media_type};base64,{base64.b64encode(payload).decode('ascii')}"


def validate_upload(upload: UploadedImage) -> None:
    """
    Check type and size before any decode attempt.

    Raises:
        InvalidImageTypeError: Neither the declared type nor the extension is an image
        ImageTooLargeError: Larger than MAX_UPLOAD_SIZE
        ImageCorruptedError: Smaller than MIN_UPLOAD_SIZE
    """
    if not upload.content_type.startswith("image/") and (
        upload.extension not in SUPPORTED_EXTENSIONS
    ):
        raise InvalidImageTypeError()

    if upload.size > MAX_UPLOAD_SIZE:
        raise ImageTooLargeError()

    if upload.size < MIN_UPLOAD_SIZE:
        raise ImageCorruptedError()


# =============================================================================
# Normalizer
# =============================================================================


class ImageNormalizer:
    """
    Re-encodes uploads as JPEG data URIs under a size ceiling.

    Stateless; one instance can be shared across requests.
    """

    def __init__(
        self,
        max_encoded_length: int = MAX_ENCODED_LENGTH,
        initial_quality: int = INITIAL_QUALITY,
        min_quality: int = MIN_QUALITY,
        quality_step: int = QUALITY_STEP,
    ):
        self.max_encoded_length = max_encoded_length
        self.initial_quality = initial_quality
        self.min_quality = min_quality
        self.quality_step = quality_step

    def normalize(self, upload: UploadedImage) -> NormalizedImage:
        """
        Normalize an upload, falling back to pass-through on conversion failure.

        Args:
            upload: The user-selected file

        Returns:
            NormalizedImage with the data URI and encode metadata

        Raises:
            ImageNormalizationError: Validation failed, or conversion and
                pass-through both failed
        """
        logger.info(
            f"Processing {upload.filename}: type={upload.content_type or 'unknown'}, "
            f"size={upload.size / 1024 / 1024:.2f}MB"
        )
        validate_upload(upload)

        if upload.is_heic:
            logger.info("HEIC/HEIF file detected - will attempt conversion")

        try:
            return self.convert_to_jpeg(upload)
        except ImageNormalizationError as e:
            logger.warning(f"Image conversion failed ({e.code.value}): {e.message}")
            return self._pass_through(upload, e)

    def convert_to_jpeg(self, upload: UploadedImage) -> NormalizedImage:
        """
        Decode and re-encode as JPEG with quality back-off.

        Raises:
            UnsupportedHeicError: HEIC/HEIF input this Pillow build cannot decode
            ImageDecodeError: Bytes are not a decodable image
            ImageConversionError: Export failed or produced a non-JPEG data URI
        """
        image = self._decode(upload)

        try:
            image = ImageOps.exif_transpose(image)
            flattened = self._flatten(image)
        except (OSError, ValueError) as e:
            raise ImageConversionError(details=str(e)) from e

        quality = self.initial_quality
        data_uri = self._export(flattened, quality)
        attempts = 1

        while len(data_uri) > self.max_encoded_length and quality > self.min_quality:
            quality = max(quality - self.quality_step, self.min_quality)
            data_uri = self._export(flattened, quality)
            attempts += 1
            logger.info(f"Reduced quality to {quality / 100:.1f}, size: {len(data_uri)}")

        if not data_uri.startswith(JPEG_DATA_URI_PREFIX):
            raise ImageConversionError("Failed to convert to JPEG format")

        if len(data_uri) > self.max_encoded_length:
            logger.warning(
                f"Image still {len(data_uri)} chars at minimum quality, accepting as-is"
            )

        logger.info(
            f"JPEG conversion result: length={len(data_uri)}, "
            f"quality={quality / 100:.1f}, attempts={attempts}"
        )

        return NormalizedImage(
            data_uri=data_uri,
            media_type="image/jpeg",
            width=flattened.width,
            height=flattened.height,
            quality=quality / 100,
            attempts=attempts,
            converted=True,
        )

    def _decode(self, upload: UploadedImage) -> Image.Image:
        """Load the bytes into a fully decoded Pillow image."""
        try:
            image = Image.open(io.BytesIO(upload.data))
            image.load()
            return image
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as e:
            logger.warning(
                f"Image load failed for {upload.filename} "
                f"(type={upload.content_type}, heic={upload.is_heic}): {e}"
            )
            if upload.is_heic:
                raise UnsupportedHeicError(details=str(e)) from e
            raise ImageDecodeError(details=str(e)) from e

    @staticmethod
    def _flatten(image: Image.Image) -> Image.Image:
        """Paint the image over a white canvas of its natural size."""
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, (255, 255, 255))
        canvas.paste(rgba, (0, 0), rgba)
        return canvas

    @staticmethod
    def _export(image: Image.Image, quality: int) -> str:
        buf = io.BytesIO()
        try:
            image.save(buf, format="JPEG", quality=quality)
        except (OSError, ValueError) as e:
            raise ImageConversionError(details=str(e)) from e
        return to_data_uri("image/jpeg", buf.getvalue())

    def _pass_through(
        self, upload: UploadedImage, error: ImageNormalizationError
    ) -> NormalizedImage:
        """Use the original bytes as-is if they already form an image data URI."""
        logger.info("Trying fallback method with original file...")
        media_type = upload.content_type or "application/octet-stream"
        data_uri = to_data_uri(media_type, upload.data)

        if data_uri.startswith("data:image/"):
            logger.info(f"Fallback method successful ({media_type})")
            return NormalizedImage(
                data_uri=data_uri,
                media_type=media_type,
                attempts=0,
                converted=False,
            )

        logger.error(f"Fallback method also failed for {upload.filename}")
        raise self._final_error(upload, error)

    @staticmethod
    def _final_error(
        upload: UploadedImage, error: ImageNormalizationError
    ) -> ImageNormalizationError:
        """Pick the user-facing guidance once every path has failed."""
        if upload.is_heic:
            return UnsupportedHeicError(
                "HEIC/HEIF files from iPhone cameras need special handling. "
                "Please try taking a new photo or using a different image format.",
                details=error.details,
            )
        if isinstance(error, ImageDecodeError):
            return ImageDecodeError(
                "Could not load the image. Please try a different photo.",
                details=error.details,
            )
        return ImageConversionError(
            "Image processing failed. This might be due to the image format. "
            "Please try taking a new photo or selecting a different image.",
            details=error.details,
        )
