"""Tests for upload validation and MIME detection."""

from io import BytesIO

import pytest
from PIL import Image

from src.core.errors import ValidationError
from src.core.image_upload import prepare_upload
from tests.conftest import make_image_bytes

pytestmark = [pytest.mark.fast]

MAX = 1024 * 1024


@pytest.mark.parametrize(
    "fmt,mime",
    [("PNG", "image/png"), ("JPEG", "image/jpeg"), ("WEBP", "image/webp")],
)
def test_supported_formats_pass_through_unchanged(fmt, mime):
    data = make_image_bytes(fmt)
    out, detected = prepare_upload(data, max_bytes=MAX)
    assert out == data
    assert detected == mime


def test_other_formats_are_reencoded_as_jpeg():
    data = make_image_bytes("BMP")
    out, detected = prepare_upload(data, max_bytes=MAX)
    assert detected == "image/jpeg"
    with Image.open(BytesIO(out)) as img:
        assert img.format == "JPEG"


@pytest.mark.parametrize("data", [None, b""])
def test_missing_photo_rejected(data):
    with pytest.raises(ValidationError, match="No photo uploaded") as exc_info:
        prepare_upload(data, max_bytes=MAX)
    assert exc_info.value.status_code == 400


def test_oversized_photo_rejected():
    data = make_image_bytes("PNG", size=(64, 64))
    with pytest.raises(ValidationError, match="larger than"):
        prepare_upload(data, max_bytes=10)


def test_non_image_rejected():
    with pytest.raises(ValidationError, match="not a readable image"):
        prepare_upload(b"definitely not an image", max_bytes=MAX)
