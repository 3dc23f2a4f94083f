"""
Edit session for one loaded PDF.

The session ties together the page order, the item store and the history,
and is the only place where they are mutated together. Every committed edit
records the previous state first; transient drag state is kept out of the
store until the drag is finished.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..config import EditorSettings
from .document.codec import PdfCodec
from .document.pdf_exporter import PDFExporter, export_filename
from .document.renderer import FitzPageRenderer
from .drag import Drag, MoveDrag, StrokeDrag
from .errors import LastPageError, LoadError, OutOfRangeError
from .geometry import OverlaySize, PageGeometry, Point, clamp, overlay_size, to_normalized
from .items.models import ImageItem, Item, ItemType, StrokeItem, TextItem
from .items.store import ItemStore, PageItemsView
from .items.undo_redo import UndoRedoStack
from .page.page_order import Direction, PageLayout, PageOrderManager
from ..utils.images import image_pixel_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditState:
    """Snapshot of everything the history can restore."""

    items: Tuple[Item, ...]
    layout: PageLayout


@dataclass(frozen=True)
class ExportSnapshot:
    """Consistent copy of the session state handed to the export engine."""

    source_bytes: bytes
    page_order: Tuple[int, ...]
    rotations: Dict[int, int]
    items: Tuple[Item, ...]
    file_name: str = field(default="document.pdf")


class EditSession:
    """Owns the editable model of one loaded document."""

    def __init__(self, settings: Optional[EditorSettings] = None,
                 codec: Optional[PdfCodec] = None,
                 renderer_factory: Callable[[bytes], FitzPageRenderer] = FitzPageRenderer,
                 clock: Callable[[], float] = time.time):
        self.settings = settings or EditorSettings()
        self.codec = codec
        self._renderer_factory = renderer_factory

        self.page_order = PageOrderManager()
        self.store = ItemStore(self.page_order, clock=clock)
        self.history: UndoRedoStack[EditState] = UndoRedoStack()

        self.renderer: Optional[FitzPageRenderer] = None
        self.source_bytes: Optional[bytes] = None
        self.file_name: Optional[str] = None

        # Bumped on every load/close; async results tagged with an older
        # generation belong to a previous document
        self.generation = 0

        self.current_page = 1
        self.selected_id: Optional[str] = None
        self._find_term = ""
        self._find_index = -1

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, data: bytes, file_name: str = "document.pdf") -> int:
        """
        Start a fresh session for a new source file.

        Args:
            data: PDF bytes
            file_name: Original file name, used for the export name

        Returns:
            Number of pages

        Raises:
            LoadError: If the bytes cannot be opened. The session is left
                empty in that case.
        """
        self.close()

        renderer = self._renderer_factory(data)
        try:
            geometries = renderer.get_all_geometries()
        except Exception as e:
            renderer.close()
            raise LoadError(f"Could not read page sizes: {e}") from e

        self.renderer = renderer
        self.source_bytes = bytes(data)
        self.file_name = file_name
        self.page_order.reset(geometries)
        logger.info("Loaded %s with %d pages", file_name, len(geometries))
        return self.page_order.page_count

    def close(self) -> None:
        """Discard the current document and all edits."""
        self.generation += 1
        if self.renderer:
            self.renderer.close()
            self.renderer = None
        self.source_bytes = None
        self.file_name = None
        self.page_order.reset(())
        self.store.clear()
        self.history.clear()
        self.current_page = 1
        self.selected_id = None
        self._find_term = ""
        self._find_index = -1

    def is_loaded(self) -> bool:
        return self.renderer is not None

    def is_current(self, generation: int) -> bool:
        """Check whether an async result still belongs to this document."""
        return generation == self.generation

    @property
    def page_count(self) -> int:
        return self.page_order.page_count

    @property
    def items(self) -> Tuple[Item, ...]:
        return self.store.items

    def items_on_page(self, page: int) -> PageItemsView:
        return self.store.items_on_page(page)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _state(self) -> EditState:
        return EditState(self.store.snapshot(), self.page_order.snapshot())

    def _record(self) -> None:
        self.history.record(self._state())

    def _restore(self, state: EditState) -> None:
        self.page_order.restore(state.layout)
        self.store.restore(state.items)
        self.current_page = max(1, min(self.current_page, self.page_count))
        if self.selected_id and self.selected_id not in self.store:
            self.selected_id = None

    def undo(self) -> bool:
        """
        Undo the last committed edit.

        Returns:
            True if undo was successful
        """
        previous = self.history.undo(self._state())
        if previous is None:
            return False
        self._restore(previous)
        return True

    def redo(self) -> bool:
        """
        Redo the last undone edit.

        Returns:
            True if redo was successful
        """
        following = self.history.redo(self._state())
        if following is None:
            return False
        self._restore(following)
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _require_page(self, page: int) -> None:
        if not 1 <= page <= self.page_count:
            raise OutOfRangeError(f"Page {page} out of range 1..{self.page_count}")

    def add_item(self, item: Item) -> Item:
        """
        Add an item as a committed edit and select it.

        Raises:
            OutOfRangeError: If the item's page does not exist
            ValueError: If the id is already in use
        """
        self._require_page(item.page)
        if item.id in self.store:
            raise ValueError(f"Duplicate item id: {item.id}")

        self._record()
        self.store.add_item(item)
        self.selected_id = item.id
        return item

    def add_text(self, page: int, x: float, y: float, text: Optional[str] = None) -> TextItem:
        """Place a text item at a normalized position with the current settings."""
        item = TextItem(
            id=self.store.new_id(ItemType.TEXT),
            page=page,
            x=clamp(x),
            y=clamp(y),
            text=self.settings.default_text if text is None else text,
            font_size=self.settings.font_size,
            color=self.settings.color,
            font_family=self.settings.font_family,
        )
        return self.add_item(item)

    def add_text_at(self, page: int, device_point: Point,
                    overlay: Optional[OverlaySize] = None) -> TextItem:
        """Place a text item where the user clicked on a page overlay."""
        overlay = overlay or self.overlay_size(page)
        x, y = to_normalized(device_point, overlay)
        self.current_page = page
        return self.add_text(page, x, y)

    def add_stroke(self, page: int, points: List[Point]) -> StrokeItem:
        """Add a finished stroke given in normalized coordinates."""
        item = StrokeItem(
            id=self.store.new_id(ItemType.PEN),
            page=page,
            color=self.settings.color,
            stroke_width=self.settings.pen_size,
            points=tuple((clamp(x), clamp(y)) for x, y in points),
        )
        return self.add_item(item)

    def add_image(self, page: int, image_data: Union[bytes, str],
                  pixel_size: Optional[Tuple[int, int]] = None) -> ImageItem:
        """
        Insert an image on a page.

        The image spans a fixed fraction of the page width, keeps its aspect
        ratio and is centred on the configured point.

        Args:
            page: Logical page number
            image_data: PNG/JPEG bytes or a data URL
            pixel_size: (width, height) of the image; decoded from the
                payload when omitted

        Raises:
            DecodeError: If the size is not given and the payload is invalid
        """
        self._require_page(page)
        img_w, img_h = pixel_size or image_pixel_size(image_data)
        geometry = self.page_order.page_geometry(page)

        width = self.settings.image_width_fraction
        target_width_pt = geometry.width * width
        height = (img_h * target_width_pt / img_w) / geometry.height if img_w else 0.0
        center_x, center_y = self.settings.image_center

        item = ImageItem(
            id=self.store.new_id(ItemType.IMAGE),
            page=page,
            x=max(0.0, center_x - width / 2),
            y=max(0.0, center_y - height / 2),
            width=width,
            height=height,
            image_data=image_data,
        )
        return self.add_item(item)

    def update_item(self, item_id: str, **patch) -> Optional[Item]:
        """
        Update fields of an item as a committed edit.

        Returns:
            The updated item, or None if the id is unknown (nothing recorded)
        """
        if item_id not in self.store:
            return None
        if "page" in patch:
            self._require_page(patch["page"])

        before = self._state()
        updated = self.store.update_item(item_id, **patch)
        self.history.record(before)
        return updated

    def edit_text(self, item_id: str, text: str) -> Optional[Item]:
        item = self.store.get(item_id)
        if not isinstance(item, TextItem):
            return None
        return self.update_item(item_id, text=text)

    def remove_item(self, item_id: str) -> bool:
        """
        Remove an item.

        Returns:
            True if an item was removed
        """
        if item_id not in self.store:
            return False
        self._record()
        self.store.remove_item(item_id)
        if self.selected_id == item_id:
            self.selected_id = None
        return True

    def select(self, item_id: Optional[str]) -> None:
        """Select an item, or clear the selection with None."""
        if item_id is not None and item_id not in self.store:
            raise OutOfRangeError(f"No item with id {item_id}")
        self.selected_id = item_id

    def select_at(self, page: int, point: Point) -> Optional[Item]:
        """Select the topmost item at a normalized point, or clear selection."""
        self._require_page(page)
        item = self.store.item_at_point(page, point, self.page_order.page_geometry(page))
        self.current_page = page
        self.selected_id = item.id if item else None
        return item

    def delete_selected(self) -> bool:
        """Remove the selected item; repeated calls are no-ops."""
        if not self.selected_id:
            return False
        return self.remove_item(self.selected_id)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def move_page(self, direction: Union[Direction, int],
                  logical: Optional[int] = None) -> bool:
        """
        Move a page one slot up or down; items and focus follow it.

        Args:
            direction: Direction.PREV or Direction.NEXT
            logical: Page to move, the current page by default

        Returns:
            True if the page was moved
        """
        logical = logical or self.current_page
        target = logical + int(direction)
        if not (1 <= logical <= self.page_count and 1 <= target <= self.page_count):
            return False

        self._record()
        self.page_order.move_page(logical, direction)
        self.store.on_pages_swapped(logical, target)
        self.current_page = target
        return True

    def delete_page(self, logical: Optional[int] = None) -> None:
        """
        Delete a logical page together with its items.

        Page order, rotations and item pages are updated in one step.

        Raises:
            LastPageError: If this is the only page
            OutOfRangeError: If the page does not exist
        """
        logical = logical or self.current_page
        if self.page_count <= 1:
            raise LastPageError("Cannot remove the last page.")
        self._require_page(logical)

        self._record()
        self.page_order.delete_page(logical)
        self.store.on_page_deleted(logical)

        self.current_page = max(1, min(self.current_page, self.page_count))
        if self.selected_id and self.selected_id not in self.store:
            self.selected_id = None

    def rotate_page(self, delta: int, logical: Optional[int] = None) -> int:
        """
        Rotate a page by +90 or -90 degrees.

        Returns:
            The page's new rotation
        """
        logical = logical or self.current_page
        self._require_page(logical)
        if delta not in (90, -90):
            raise ValueError(f"Rotation delta must be +90 or -90, got {delta}")

        self._record()
        return self.page_order.set_rotation(logical, delta)

    def page_geometry(self, logical: int) -> PageGeometry:
        return self.page_order.page_geometry(logical)

    def overlay_size(self, logical: int) -> OverlaySize:
        return overlay_size(self.page_geometry(logical), self.settings.scale)

    def set_current_page(self, page: int) -> int:
        self.current_page = max(1, min(page, self.page_count))
        return self.current_page

    def go_prev_page(self) -> int:
        return self.set_current_page(self.current_page - 1)

    def go_next_page(self) -> int:
        return self.set_current_page(self.current_page + 1)

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------

    def set_scale(self, scale: float) -> float:
        return self.settings.set_scale(scale)

    def zoom_in(self) -> float:
        return self.set_scale(self.settings.scale + self.settings.scale_step)

    def zoom_out(self) -> float:
        return self.set_scale(self.settings.scale - self.settings.scale_step)

    # ------------------------------------------------------------------
    # Drag interactions
    # ------------------------------------------------------------------

    def begin_stroke(self, page: int, device_point: Point,
                     overlay: Optional[OverlaySize] = None) -> StrokeDrag:
        """Start drawing a freehand stroke at a pointer position."""
        self._require_page(page)
        drag = StrokeDrag(
            item_id=self.store.new_id(ItemType.PEN),
            page=page,
            color=self.settings.color,
            stroke_width=self.settings.pen_size,
            overlay=overlay or self.overlay_size(page),
        )
        drag.add_point(device_point)
        self.current_page = page
        return drag

    def begin_move(self, item_id: str, device_point: Point,
                   overlay: Optional[OverlaySize] = None) -> MoveDrag:
        """
        Start dragging an item.

        Raises:
            OutOfRangeError: If no item has this id
        """
        item = self.store.get(item_id)
        if item is None:
            raise OutOfRangeError(f"No item with id {item_id}")
        self.selected_id = item_id
        return MoveDrag(item=item, start=device_point,
                        overlay=overlay or self.overlay_size(item.page))

    def finish_drag(self, drag: Drag) -> Optional[Item]:
        """
        Commit a drag as a single edit, clamping coordinates into the page.

        Returns:
            The committed item, or None if the dragged item no longer exists
        """
        if isinstance(drag, StrokeDrag):
            return self.add_item(drag.committed_item())
        return self.update_item(drag.item_id, **drag.patch())

    def cancel_drag(self, drag: Drag) -> Optional[Item]:
        """
        Handle a drag released outside the page.

        The partial result is committed like a normal release.
        """
        logger.debug("Drag on %s cancelled, committing partial state", drag.item_id)
        return self.finish_drag(drag)

    # ------------------------------------------------------------------
    # Find
    # ------------------------------------------------------------------

    def find_matches(self, term: str) -> List[TextItem]:
        """Text items containing ``term``, case-insensitively."""
        if not term:
            return []
        needle = term.lower()
        return [
            item for item in self.store
            if isinstance(item, TextItem) and needle in item.text.lower()
        ]

    def jump_to_match(self, term: str, delta: int = 1) -> Optional[TextItem]:
        """
        Step to the next (delta=1) or previous (delta=-1) match, wrapping
        around, and focus its page.
        """
        matches = self.find_matches(term)
        if term != self._find_term:
            self._find_term = term
            self._find_index = -1
        if not matches:
            return None

        index = self._find_index + delta
        if index < 0:
            index = len(matches) - 1
        if index >= len(matches):
            index = 0
        self._find_index = index

        target = matches[index]
        self.current_page = target.page
        self.selected_id = target.id
        return target

    # ------------------------------------------------------------------
    # Preview and export
    # ------------------------------------------------------------------

    def render_jobs(self) -> List[Tuple[int, int, int]]:
        """(logical page, source page, rotation) for every page to preview."""
        return [
            (logical, source, self.page_order.rotation(logical))
            for logical, source in enumerate(self.page_order.order, start=1)
        ]

    def export_snapshot(self) -> ExportSnapshot:
        """
        Capture the state to export.

        Raises:
            LoadError: If no document is loaded
        """
        if self.source_bytes is None:
            raise LoadError("No document loaded")
        return ExportSnapshot(
            source_bytes=self.source_bytes,
            page_order=tuple(self.page_order.order),
            rotations=dict(self.page_order.rotations),
            items=self.store.snapshot(),
            file_name=self.export_filename(),
        )

    def export_filename(self) -> str:
        return export_filename(self.file_name or "document.pdf")

    def export(self, exporter: Optional[PDFExporter] = None) -> bytes:
        """Export synchronously; see :meth:`PDFExporter.export`."""
        snapshot = self.export_snapshot()
        exporter = exporter or PDFExporter(self.codec)
        return exporter.export(
            snapshot.source_bytes,
            snapshot.page_order,
            snapshot.rotations,
            snapshot.items,
        )
