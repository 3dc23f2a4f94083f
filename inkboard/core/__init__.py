"""
Core editing model for Inkboard.
"""
from .errors import (
    DecodeError,
    DecodeWarning,
    ExportError,
    InkboardError,
    ItemWarning,
    LastPageError,
    LoadError,
    OutOfRangeError,
)
from .geometry import OverlaySize, PageGeometry
from .items import FontFamily, ImageItem, ItemStore, ItemType, StrokeItem, TextItem, UndoRedoStack
from .page import Direction, PageOrderManager

__all__ = [
    "DecodeError",
    "DecodeWarning",
    "ItemWarning",
    "ExportError",
    "InkboardError",
    "LastPageError",
    "LoadError",
    "OutOfRangeError",
    "OverlaySize",
    "PageGeometry",
    "FontFamily",
    "ImageItem",
    "ItemStore",
    "ItemType",
    "StrokeItem",
    "TextItem",
    "UndoRedoStack",
    "Direction",
    "PageOrderManager",
]
