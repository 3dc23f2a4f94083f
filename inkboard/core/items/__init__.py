"""
Item model, store and history for edited documents.
"""
from .models import FontFamily, ImageItem, Item, ItemType, StrokeItem, TextItem
from .store import ItemStore, PageItemsView
from .undo_redo import UndoRedoStack

__all__ = [
    'FontFamily',
    'ImageItem',
    'Item',
    'ItemType',
    'StrokeItem',
    'TextItem',
    'ItemStore',
    'PageItemsView',
    'UndoRedoStack',
]
