"""
Data models for items placed on logical pages.

Items are immutable; edits produce a new instance through
:func:`dataclasses.replace`, so history snapshots can share unchanged items.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Tuple, Union

from ..geometry import Point


class ItemType(Enum):
    TEXT = "text"
    PEN = "pen"
    IMAGE = "image"


class FontFamily(Enum):
    SANS = "sans"
    SERIF = "serif"


@dataclass(frozen=True)
class TextItem:
    """A single-line text box anchored at its top-left corner."""

    item_type: ClassVar[ItemType] = ItemType.TEXT

    id: str
    page: int  # 1-based logical page
    x: float
    y: float
    text: str
    font_size: float
    color: str
    font_family: FontFamily = FontFamily.SANS


@dataclass(frozen=True)
class StrokeItem:
    """A freehand polyline."""

    item_type: ClassVar[ItemType] = ItemType.PEN

    id: str
    page: int
    color: str
    stroke_width: float
    points: Tuple[Point, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ImageItem:
    """An image box; ``image_data`` is raw bytes or a ``data:`` URL."""

    item_type: ClassVar[ItemType] = ItemType.IMAGE

    id: str
    page: int
    x: float
    y: float
    width: float
    height: float
    image_data: Union[bytes, str]


Item = Union[TextItem, StrokeItem, ImageItem]
