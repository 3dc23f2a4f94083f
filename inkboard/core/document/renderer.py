"""
Page rendering for the editor preview.
"""
from typing import List, Optional

import fitz  # PyMuPDF
from PyQt5.QtGui import QImage

from ..errors import LoadError, OutOfRangeError
from ..geometry import PageGeometry


class FitzPageRenderer:
    """Handles PDF document loading and page rendering for previews."""

    def __init__(self, data: bytes):
        """
        Open a document from memory.

        Args:
            data: PDF bytes

        Raises:
            LoadError: If the bytes cannot be opened as a PDF with pages
        """
        try:
            self.doc: Optional[fitz.Document] = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise LoadError(f"Error loading PDF: {e}") from e

        if self.doc.page_count == 0:
            self.close()
            raise LoadError("Document has no pages")

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    def is_loaded(self) -> bool:
        """Check if a document is currently open."""
        return self.doc is not None

    def close(self) -> None:
        """Close the document."""
        if self.doc:
            self.doc.close()
            self.doc = None

    def _page(self, source_index: int) -> fitz.Page:
        if not self.doc or not 1 <= source_index <= self.doc.page_count:
            raise OutOfRangeError(f"Source page {source_index} does not exist")
        return self.doc.load_page(source_index - 1)

    def get_page_geometry(self, source_index: int) -> PageGeometry:
        """
        Get the native size of a source page.

        Args:
            source_index: 1-based source page number

        Returns:
            Unrotated crop box size in points at scale 1
        """
        box = self._page(source_index).cropbox
        return PageGeometry(box.width, box.height)

    def get_all_geometries(self) -> List[PageGeometry]:
        return [self.get_page_geometry(i) for i in range(1, self.page_count + 1)]

    def render_page(self, source_index: int, scale: float, rotation: int = 0) -> QImage:
        """
        Render a source page to an image.

        Args:
            source_index: 1-based source page number
            scale: Zoom factor
            rotation: Session rotation in degrees, added to the page's own
                rotation the same way the exporter applies it

        Returns:
            An RGB image that owns its pixel data
        """
        page = self._page(source_index)
        matrix = fitz.Matrix(scale, scale).prerotate(rotation)
        pix = page.get_pixmap(matrix=matrix, alpha=False)
        img = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)
        # Detach from the pixmap buffer before it is freed
        return img.copy()
