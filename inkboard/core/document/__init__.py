"""
PDF document handling: codec, rendering and export.
"""
from .codec import FitzCodec, PdfCodec
from .pdf_exporter import PDFExporter, export_filename
from .preview_worker import PreviewWorker
from .renderer import FitzPageRenderer

__all__ = ['FitzCodec', 'PdfCodec', 'PDFExporter', 'export_filename',
           'PreviewWorker', 'FitzPageRenderer']
