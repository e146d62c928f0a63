"""Validation and normalization of uploaded photos before they are sent for analysis."""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from src.core.errors import ValidationError

# Pillow format name -> MIME type accepted by the analysis service as-is.
PASSTHROUGH_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


def _to_jpeg(image: Image.Image) -> bytes:
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffered = BytesIO()
    image.save(buffered, format="JPEG", quality=95)
    return buffered.getvalue()


def prepare_upload(data: bytes | None, *, max_bytes: int) -> tuple[bytes, str]:
    """
    Return (image_bytes, mime_type) ready for the analysis service.

    Raises ValidationError when the upload is missing, empty, too large or not an image.
    JPEG/PNG/WEBP pass through untouched; other decodable formats (GIF, BMP, TIFF, ...)
    are re-encoded as JPEG.
    """
    if not data:
        raise ValidationError("No photo uploaded")
    if len(data) > max_bytes:
        raise ValidationError(f"Photo is larger than {max_bytes} bytes")
    try:
        with Image.open(BytesIO(data)) as probe:
            probe.verify()
        # verify() leaves the image unusable; reopen for format and pixel access.
        with Image.open(BytesIO(data)) as img:
            fmt = (img.format or "").upper()
            if fmt in PASSTHROUGH_FORMATS:
                return data, PASSTHROUGH_FORMATS[fmt]
            return _to_jpeg(img), "image/jpeg"
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise ValidationError("Uploaded file is not a readable image") from e
