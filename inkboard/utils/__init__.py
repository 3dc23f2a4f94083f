"""
Utility functions and helpers.
"""
from .colors import hex_to_rgb
from .images import (
    ImageFormat,
    decode_image_payload,
    image_pixel_size,
    sniff_format,
    to_data_url,
)

__all__ = [
    'hex_to_rgb',
    'ImageFormat',
    'decode_image_payload',
    'image_pixel_size',
    'sniff_format',
    'to_data_url',
]
