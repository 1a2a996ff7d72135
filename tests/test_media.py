import base64
import io

import pytest
from fastapi import UploadFile
from PIL import Image
from starlette.datastructures import Headers

from services.thumbnail_generator import ThumbnailGenerator
from tests.helpers import png_bytes
from utils.media_validation import (
    REASON_EMPTY,
    REASON_TOO_LARGE,
    REASON_UNSUPPORTED_TYPE,
    AttachmentRejected,
    decode_base64_payload,
    normalize_media_type,
    read_image_upload,
    validate_image,
)


def test_validate_image_accepts_and_normalizes():
    assert validate_image(b"\x89PNG", "Image/PNG; charset=binary") == "image/png"
    assert normalize_media_type(None) == ""


@pytest.mark.parametrize(
    "data, media_type, reason",
    [
        (b"%PDF", "application/pdf", REASON_UNSUPPORTED_TYPE),
        (b"abc", None, REASON_UNSUPPORTED_TYPE),
        (b"", "image/png", REASON_EMPTY),
        (b"x" * 11, "image/png", REASON_TOO_LARGE),
    ],
)
def test_validate_image_rejections(data, media_type, reason):
    with pytest.raises(AttachmentRejected) as excinfo:
        validate_image(data, media_type, max_bytes=10)
    assert excinfo.value.reason == reason


def test_exactly_max_bytes_is_accepted():
    assert validate_image(b"x" * 10, "image/jpeg", max_bytes=10) == "image/jpeg"


def test_decode_base64_payload():
    encoded = base64.b64encode(b"image-bytes").decode()
    assert decode_base64_payload(encoded) == b"image-bytes"
    assert decode_base64_payload(f"data:image/png;base64,{encoded}") == b"image-bytes"
    with pytest.raises(AttachmentRejected):
        decode_base64_payload("not base64!!")


async def test_read_image_upload_stops_past_the_limit():
    upload = UploadFile(
        file=io.BytesIO(b"x" * 50),
        filename="bin.png",
        headers=Headers({"content-type": "image/png"}),
    )
    data, media_type, filename = await read_image_upload(upload, max_bytes=10)
    assert len(data) == 11
    assert media_type == "image/png"
    assert filename == "bin.png"


def test_thumbnail_fits_bounds():
    preview = ThumbnailGenerator(max_size=(160, 160)).create_thumbnail(png_bytes(size=(640, 320)))
    image = Image.open(io.BytesIO(base64.b64decode(preview)))
    assert image.format == "PNG"
    assert image.size == (160, 80)


def test_thumbnail_flattens_alpha():
    buffer = io.BytesIO()
    Image.new("RGBA", (20, 20), (0, 0, 0, 0)).save(buffer, format="PNG")
    preview = ThumbnailGenerator(background=(10, 20, 30)).create_thumbnail(buffer.getvalue())
    image = Image.open(io.BytesIO(base64.b64decode(preview)))
    assert image.mode == "RGB"
    assert image.getpixel((0, 0)) == (10, 20, 30)


def test_thumbnail_rejects_non_images():
    with pytest.raises(ValueError):
        ThumbnailGenerator().create_thumbnail(b"plain text")
