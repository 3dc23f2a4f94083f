"""
Inkboard: page-level PDF editing model and export engine.
"""
from .config import EditorSettings
from .core.document.pdf_exporter import PDFExporter, export_filename
from .core.errors import (
    DecodeWarning,
    ExportError,
    InkboardError,
    ItemWarning,
    LastPageError,
    LoadError,
    OutOfRangeError,
)
from .core.session import EditSession, ExportSnapshot

__version__ = "0.1.0"

__all__ = [
    'EditorSettings',
    'EditSession',
    'ExportSnapshot',
    'PDFExporter',
    'export_filename',
    'InkboardError',
    'LoadError',
    'LastPageError',
    'OutOfRangeError',
    'ExportError',
    'DecodeWarning',
    'ItemWarning',
]
