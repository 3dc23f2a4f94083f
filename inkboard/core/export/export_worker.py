# inkboard/core/export/export_worker.py

import logging

from PyQt5.QtCore import QThread, pyqtSignal

from ..document.pdf_exporter import PDFExporter
from ..errors import ExportError
from ..session import ExportSnapshot

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread for exporting an edited document without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    item_progress = pyqtSignal(int, int)  # current, total items
    exported = pyqtSignal(str, bytes)  # file name, PDF bytes

    def __init__(self, snapshot: ExportSnapshot, exporter: PDFExporter = None, parent=None):
        super().__init__(parent)
        self.snapshot = snapshot
        self.exporter = exporter or PDFExporter()
        self.result = None

    def run(self):
        """Execute the export in a background thread."""
        self.exporter.progress = self._on_item_progress
        self.progress.emit("Exporting PDF...")

        try:
            self.result = self.exporter.export(
                self.snapshot.source_bytes,
                self.snapshot.page_order,
                self.snapshot.rotations,
                self.snapshot.items,
            )
        except ExportError as e:
            self.finished.emit(False, f"Failed to export PDF: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected error during export")
            self.finished.emit(False, f"Error during export: {str(e)}")
            return

        self.exported.emit(self.snapshot.file_name, self.result)

        skipped = len(self.exporter.warnings)
        if skipped:
            self.finished.emit(True, f"PDF exported; {skipped} item(s) could not be drawn and were skipped.")
        else:
            self.finished.emit(True, "PDF exported successfully!")

    def _on_item_progress(self, current, total):
        """Handle item-level progress updates."""
        self.item_progress.emit(current, total)
