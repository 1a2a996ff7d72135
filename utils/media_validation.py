"""Validation helpers for images attached to a conversation."""

import base64
import binascii
from typing import Optional, Tuple

from fastapi import UploadFile

MAX_IMAGE_BYTES = 5 * 1024 * 1024

REASON_UNSUPPORTED_TYPE = "unsupported_type"
REASON_TOO_LARGE = "too_large"
REASON_EMPTY = "empty"
REASON_ALREADY_ATTACHED = "already_attached"


class AttachmentRejected(ValueError):
    """Raised when an attachment fails validation; `reason` is one of the REASON_* codes."""

    def __init__(self, reason: str, detail: str) -> None:
        super().__init__(detail)
        self.reason = reason
        self.detail = detail


def normalize_media_type(media_type: Optional[str]) -> str:
    """Strip MIME parameters and lowercase, e.g. 'Image/PNG; q=1' -> 'image/png'."""
    return (media_type or "").lower().split(";", 1)[0].strip()


def validate_image(data: bytes, media_type: Optional[str], max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Validate an image upload and return its normalized media type.

    The declared media type must be an image type and the decoded payload
    must not exceed `max_bytes`.

    Raises:
        AttachmentRejected: If the upload is empty, not an image, or too large.
    """
    normalized = normalize_media_type(media_type)
    if not normalized.startswith("image/"):
        raise AttachmentRejected(REASON_UNSUPPORTED_TYPE, f"Unsupported attachment type: {media_type or 'unknown'}")
    if not data:
        raise AttachmentRejected(REASON_EMPTY, "Uploaded image is empty.")
    if len(data) > max_bytes:
        raise AttachmentRejected(
            REASON_TOO_LARGE, f"Image is {len(data)} bytes; the limit is {max_bytes} bytes."
        )
    return normalized


def decode_base64_payload(payload: str) -> bytes:
    """Decode a base64 (optionally data-URL prefixed) image payload."""
    text = (payload or "").strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AttachmentRejected(REASON_UNSUPPORTED_TYPE, "Image payload is not valid base64.") from exc


async def read_image_upload(upload: UploadFile, max_bytes: int = MAX_IMAGE_BYTES) -> Tuple[bytes, str, str]:
    """Read an uploaded image without buffering more than one byte past the limit.

    Returns:
        A tuple of `(raw_bytes, media_type, filename)`. Validation is left to
        the conversation controller so rejections surface as notifications.
    """
    data = await upload.read(max_bytes + 1)
    return data, upload.content_type or "", upload.filename or "upload"
