"""
Coordinate conversions between normalized page space, device pixels and
PDF user space.

Normalized coordinates are relative to the native, unscaled page size with
the origin at the top-left corner and y growing downward. PDF user space has
its origin at the bottom-left corner with y growing upward, so the vertical
flip happens here and only at export time.
"""
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class PageGeometry:
    """Native page size in points (scale 1, unrotated)."""

    width: float
    height: float


@dataclass(frozen=True)
class OverlaySize:
    """Pixel size of the on-screen overlay that sits on top of a page."""

    width: float
    height: float


def overlay_size(geometry: PageGeometry, scale: float) -> OverlaySize:
    """Overlay size for a page rendered at ``scale``."""
    return OverlaySize(geometry.width * scale, geometry.height * scale)


def to_normalized(device_point: Point, size: OverlaySize) -> Point:
    """
    Map a device pixel position inside an overlay to normalized coordinates.

    Args:
        device_point: (x, y) in pixels relative to the overlay's top-left
        size: Pixel size of the overlay

    Returns:
        Normalized (x, y). A zero-sized overlay yields (0, 0).
    """
    if not size.width or not size.height:
        return 0.0, 0.0
    return device_point[0] / size.width, device_point[1] / size.height


def to_device(normalized: Point, size: OverlaySize) -> Point:
    """Inverse of :func:`to_normalized`."""
    return normalized[0] * size.width, normalized[1] * size.height


def to_pdf_space(normalized: Point, geometry: PageGeometry) -> Point:
    """
    Map a normalized point to PDF user space.

    Args:
        normalized: (x, y) in [0, 1], top-left origin
        geometry: Native size of the target page

    Returns:
        (x_pt, y_pt) with bottom-left origin
    """
    x, y = normalized
    return x * geometry.width, geometry.height - y * geometry.height


def text_baseline(normalized: Point, geometry: PageGeometry,
                  font_size: float) -> Point:
    """
    PDF-space baseline origin for a text item anchored at its top-left.

    PDF text is positioned by its glyph baseline, so the flipped y is lowered
    by one font size. Exact for single-line text only.
    """
    x_pt, y_pt = to_pdf_space(normalized, geometry)
    return x_pt, y_pt - font_size


def image_rect(x: float, y: float, width: float, height: float,
               geometry: PageGeometry) -> Tuple[float, float, float, float]:
    """
    PDF-space placement of a normalized image box.

    Returns:
        (x_pt, y_pt, width_pt, height_pt) where (x_pt, y_pt) is the
        lower-left corner of the box
    """
    width_pt = width * geometry.width
    height_pt = height * geometry.height
    x_pt, top_pt = to_pdf_space((x, y), geometry)
    return x_pt, top_pt - height_pt, width_pt, height_pt


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def clamp_point(point: Point) -> Point:
    """Clamp both components of a normalized point into [0, 1]."""
    return clamp(point[0]), clamp(point[1])
