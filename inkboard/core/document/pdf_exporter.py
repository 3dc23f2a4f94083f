"""
Rebuilds a PDF from the source document, the page order and the items.
"""
import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..errors import DecodeError, DecodeWarning, ExportError, ItemWarning, LoadError
from ..geometry import image_rect, text_baseline, to_pdf_space
from ..items.models import FontFamily, ImageItem, Item, ItemType, StrokeItem, TextItem
from .codec import RGB, DocumentHandle, FitzCodec, FontHandle, ImageHandle, PageHandle, PdfCodec
from ...config import OUTPUT_PREFIX, STANDARD_FONTS
from ...utils.colors import hex_to_rgb
from ...utils.images import decode_image_payload

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def export_filename(original_name: str) -> str:
    """Name offered for the exported file."""
    return f"{OUTPUT_PREFIX}{original_name}"


def resolve_page_sequence(page_order: Sequence[int], source_page_count: int) -> List[int]:
    """
    Turn a 1-based page order into 0-based source indices.

    Out-of-range entries are clamped into the source document. An empty
    order means every source page in its original order.
    """
    if not page_order:
        return list(range(source_page_count))
    return [max(1, min(source_page_count, page)) - 1 for page in page_order]


class PDFExporter:
    """Handles exporting edited documents to PDF bytes."""

    def __init__(self, codec: Optional[PdfCodec] = None,
                 progress: Optional[ProgressCallback] = None):
        """
        Args:
            codec: PDF codec to drive, PyMuPDF by default
            progress: Called with (items drawn, total items) while drawing
        """
        self.codec = codec or FitzCodec()
        self.progress = progress
        self.warnings: List[ItemWarning] = []
        self.embedded_images = 0

    def export(self, source_bytes: bytes, page_order: Sequence[int],
               rotation_map: Mapping[int, int], items: Iterable[Item]) -> bytes:
        """
        Build a new PDF document.

        Args:
            source_bytes: The original PDF
            page_order: 1-based source page for each logical page
            rotation_map: Logical page -> rotation in degrees
            items: Items to draw, in z-order

        Returns:
            The serialized PDF

        Raises:
            ExportError: If the source cannot be parsed or the codec fails.
                No partial output is returned.
        """
        self.warnings = []
        self.embedded_images = 0
        items = list(items)

        try:
            source = self.codec.load(source_bytes)
        except LoadError as e:
            raise ExportError(f"Could not read source document: {e}") from e

        output: Optional[DocumentHandle] = None
        try:
            output = self.codec.create_empty()
            fonts = {
                family: self.codec.embed_standard_font(output, name)
                for family, name in STANDARD_FONTS.items()
            }

            sequence = resolve_page_sequence(page_order, source.page_count)
            pages = self.codec.copy_pages(output, source, sequence)

            for index, page in enumerate(pages):
                rotation = rotation_map.get(index + 1, 0)
                if rotation:
                    page.set_rotation(rotation)

            self._draw_items(output, pages, items, fonts)
            return self.codec.serialize(output)

        except Exception as e:
            logger.exception("Failed to export PDF")
            raise ExportError(f"Failed to export PDF: {e}") from e
        finally:
            if output is not None:
                output.close()
            source.close()

    def _draw_items(self, doc: DocumentHandle, pages: List[PageHandle],
                    items: List[Item], fonts: Dict[FontFamily, FontHandle]) -> None:
        image_cache: Dict[Union[bytes, str], ImageHandle] = {}
        total = len(items)

        for done, item in enumerate(items):
            if self.progress:
                self.progress(done, total)

            if not 1 <= item.page <= len(pages):
                logger.warning("Skipping item %s on missing page %d", item.id, item.page)
                continue
            page = pages[item.page - 1]

            if item.item_type is ItemType.TEXT:
                self._draw_text(page, item, fonts)
            elif item.item_type is ItemType.PEN:
                self._draw_stroke(page, item)
            elif item.item_type is ItemType.IMAGE:
                self._draw_image(doc, page, item, image_cache)

        if self.progress:
            self.progress(total, total)

    def _skip(self, warning: ItemWarning) -> None:
        self.warnings.append(warning)
        logger.warning("%s", warning)

    def _color(self, item: Union[TextItem, StrokeItem]) -> Optional[RGB]:
        try:
            return hex_to_rgb(item.color)
        except ValueError as e:
            self._skip(ItemWarning(item.id, str(e)))
            return None

    def _draw_text(self, page: PageHandle, item: TextItem,
                   fonts: Dict[FontFamily, FontHandle]) -> None:
        color = self._color(item)
        if color is None:
            return
        origin = text_baseline((item.x, item.y), page.geometry, item.font_size)
        page.draw_text(
            item.text or "",
            origin,
            item.font_size,
            color,
            fonts.get(item.font_family, fonts[FontFamily.SANS]),
        )

    def _draw_stroke(self, page: PageHandle, item: StrokeItem) -> None:
        if not item.points:
            return
        color = self._color(item)
        if color is None:
            return
        points = [to_pdf_space(point, page.geometry) for point in item.points]
        page.draw_path(points, item.stroke_width, color)

    def _draw_image(self, doc: DocumentHandle, page: PageHandle, item: ImageItem,
                    cache: Dict[Union[bytes, str], ImageHandle]) -> None:
        embedded = cache.get(item.image_data)
        if embedded is None:
            try:
                data, image_format = decode_image_payload(item.image_data)
                embedded = self.codec.embed_image(doc, data, image_format)
            except DecodeError as e:
                self._skip(DecodeWarning(item.id, str(e)))
                return
            cache[item.image_data] = embedded
            self.embedded_images += 1

        x, y, width, height = image_rect(item.x, item.y, item.width, item.height,
                                         page.geometry)
        page.draw_image(embedded, (x, y), width, height)
