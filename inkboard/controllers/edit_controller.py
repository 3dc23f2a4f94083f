"""
Controller exposing an edit session to a Qt user interface.
"""
import logging
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from inkboard.core.document.pdf_exporter import PDFExporter
from inkboard.core.document.preview_worker import PreviewWorker
from inkboard.core.drag import Drag
from inkboard.core.errors import DecodeError, LastPageError, LoadError
from inkboard.core.export.export_worker import ExportWorker
from inkboard.core.items.models import ImageItem, Item, TextItem
from inkboard.core.page.page_order import Direction
from inkboard.core.session import EditSession

logger = logging.getLogger(__name__)


class EditController(QObject):
    """Handles edit operations and background work for one window."""

    # Signals
    document_loaded = pyqtSignal(int)  # page count
    load_failed = pyqtSignal(str)  # error message
    items_changed = pyqtSignal()  # item set changed
    pages_changed = pyqtSignal()  # page order, rotation or count changed
    selection_changed = pyqtSignal(object)  # selected item id or None
    page_rendered = pyqtSignal(int, object)  # logical page, QImage
    export_finished = pyqtSignal(bool, str)  # success, message
    exported = pyqtSignal(str, bytes)  # file name, PDF bytes
    error = pyqtSignal(str)  # user-facing error message

    def __init__(self, session: Optional[EditSession] = None, parent=None):
        super().__init__(parent)
        self.session = session or EditSession()
        self._preview_worker: Optional[PreviewWorker] = None
        self._export_worker: Optional[ExportWorker] = None

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def open_document(self, data: bytes, file_name: str) -> bool:
        """
        Load a new document, invalidating any in-flight preview renders.

        Returns:
            True if the document was loaded
        """
        self._cancel_preview()
        try:
            pages = self.session.load(data, file_name)
        except LoadError as e:
            logger.warning("Could not open %s: %s", file_name, e)
            self.load_failed.emit("Could not open PDF. Try another file.")
            self.items_changed.emit()
            self.pages_changed.emit()
            return False

        self.document_loaded.emit(pages)
        self.items_changed.emit()
        self.pages_changed.emit()
        self.refresh_preview()
        return True

    def close_document(self) -> None:
        self._cancel_preview()
        self.session.close()
        self.items_changed.emit()
        self.pages_changed.emit()

    # ------------------------------------------------------------------
    # Preview rendering
    # ------------------------------------------------------------------

    def refresh_preview(self) -> Optional[PreviewWorker]:
        """Start rendering every page at the current scale."""
        self._cancel_preview()
        if not self.session.is_loaded():
            return None

        worker = PreviewWorker(
            self.session.renderer,
            self.session.render_jobs(),
            self.session.settings.scale,
            self.session.generation,
        )
        worker.page_rendered.connect(self._on_page_rendered)
        worker.failed.connect(self._on_render_failed)
        self._preview_worker = worker
        worker.start()
        return worker

    def _cancel_preview(self) -> None:
        if self._preview_worker is not None:
            self._preview_worker.cancel()
            self._preview_worker.wait()
            self._preview_worker = None

    def _on_page_rendered(self, generation: int, logical: int, image) -> None:
        if not self.session.is_current(generation):
            logger.debug("Dropping stale render of page %d (generation %d)", logical, generation)
            return
        self.page_rendered.emit(logical, image)

    def _on_render_failed(self, generation: int, message: str) -> None:
        if self.session.is_current(generation):
            logger.warning("Preview render failed: %s", message)

    # ------------------------------------------------------------------
    # Item edits
    # ------------------------------------------------------------------

    def add_text_at(self, page: int, device_point) -> TextItem:
        item = self.session.add_text_at(page, device_point)
        self.items_changed.emit()
        self.selection_changed.emit(item.id)
        return item

    def add_image(self, page: int, image_data) -> Optional[ImageItem]:
        try:
            item = self.session.add_image(page, image_data)
        except DecodeError as e:
            logger.warning("Could not insert image: %s", e)
            self.error.emit("Could not read that image.")
            return None
        self.items_changed.emit()
        self.selection_changed.emit(item.id)
        return item

    def edit_text(self, item_id: str, text: str) -> None:
        if self.session.edit_text(item_id, text) is not None:
            self.items_changed.emit()

    def commit_drag(self, drag: Drag, cancelled: bool = False) -> Optional[Item]:
        """Commit a finished or cancelled drag as one edit."""
        if cancelled:
            item = self.session.cancel_drag(drag)
        else:
            item = self.session.finish_drag(drag)
        if item is not None:
            self.items_changed.emit()
            self.selection_changed.emit(item.id)
        return item

    def delete_selected(self) -> bool:
        if self.session.delete_selected():
            self.items_changed.emit()
            self.selection_changed.emit(None)
            return True
        return False

    def select(self, item_id: Optional[str]) -> None:
        self.session.select(item_id)
        self.selection_changed.emit(item_id)

    def undo(self) -> bool:
        """
        Undo the last edit.

        Returns:
            True if undo was successful
        """
        if self.session.undo():
            self._after_history_change()
            return True
        return False

    def redo(self) -> bool:
        """
        Redo the last undone edit.

        Returns:
            True if redo was successful
        """
        if self.session.redo():
            self._after_history_change()
            return True
        return False

    def _after_history_change(self) -> None:
        self.items_changed.emit()
        self.pages_changed.emit()
        self.selection_changed.emit(self.session.selected_id)
        self.refresh_preview()

    # ------------------------------------------------------------------
    # Page edits
    # ------------------------------------------------------------------

    def move_page(self, direction: Direction) -> bool:
        if self.session.move_page(direction):
            self.pages_changed.emit()
            self.items_changed.emit()
            self.refresh_preview()
            return True
        return False

    def delete_current_page(self) -> bool:
        """
        Delete the focused page.

        Returns:
            True if the page was deleted
        """
        try:
            self.session.delete_page()
        except LastPageError:
            self.error.emit("Cannot remove the last page.")
            return False

        self.pages_changed.emit()
        self.items_changed.emit()
        self.selection_changed.emit(self.session.selected_id)
        self.refresh_preview()
        return True

    def rotate_current_page(self, delta: int) -> int:
        rotation = self.session.rotate_page(delta)
        self.pages_changed.emit()
        self.refresh_preview()
        return rotation

    def set_scale(self, scale: float) -> float:
        scale = self.session.set_scale(scale)
        self.refresh_preview()
        return scale

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> Optional[ExportWorker]:
        """
        Start exporting the current state in the background.

        The state is captured before the worker starts, so later edits do
        not leak into the running export.
        """
        if self._export_worker is not None and self._export_worker.isRunning():
            self.error.emit("An export is already running.")
            return None
        try:
            snapshot = self.session.export_snapshot()
        except LoadError:
            self.error.emit("Open a PDF before exporting.")
            return None

        worker = ExportWorker(snapshot, PDFExporter(self.session.codec))
        worker.exported.connect(self.exported)
        worker.finished.connect(self.export_finished)
        self._export_worker = worker
        worker.start()
        return worker

    def shutdown(self) -> None:
        """Stop background work and release the document."""
        self._cancel_preview()
        if self._export_worker is not None:
            self._export_worker.wait()
            self._export_worker = None
        self.session.close()
