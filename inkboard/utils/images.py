"""
Helpers for image payloads attached to image items.
"""
import base64
import binascii
from enum import Enum
from typing import Tuple, Union

import fitz  # PyMuPDF

from inkboard.core.errors import DecodeError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"


class ImageFormat(Enum):
    PNG = "png"
    JPEG = "jpeg"


def sniff_format(data: bytes) -> ImageFormat:
    """
    Detect the image format from the payload signature.

    Raises:
        DecodeError: If the payload is neither PNG nor JPEG
    """
    if data.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if data.startswith(JPEG_SIGNATURE):
        return ImageFormat.JPEG
    raise DecodeError("Unsupported image format (expected PNG or JPEG)")


def decode_image_payload(payload: Union[bytes, str]) -> Tuple[bytes, ImageFormat]:
    """
    Turn an item's image payload into raw bytes and a format.

    Args:
        payload: Raw image bytes or a base64 ``data:`` URL

    Returns:
        Tuple of (raw bytes, image format)

    Raises:
        DecodeError: If the payload is empty, not valid base64, or not a
            PNG/JPEG image
    """
    if isinstance(payload, str):
        if not payload.startswith("data:"):
            raise DecodeError("Image payload is not a data URL")
        header, _, encoded = payload.partition(",")
        if not encoded or ";base64" not in header:
            raise DecodeError("Data URL carries no base64 payload")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
    else:
        data = bytes(payload)

    if not data:
        raise DecodeError("Empty image payload")
    return data, sniff_format(data)


def to_data_url(data: bytes) -> str:
    """Encode raw PNG/JPEG bytes as a base64 data URL."""
    mime = "image/png" if sniff_format(data) is ImageFormat.PNG else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def image_pixel_size(payload: Union[bytes, str]) -> Tuple[int, int]:
    """
    Decode a payload and return its pixel size.

    Raises:
        DecodeError: If the payload cannot be decoded
    """
    data, _ = decode_image_payload(payload)
    try:
        pix = fitz.Pixmap(data)
    except Exception as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return pix.width, pix.height
