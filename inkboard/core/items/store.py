"""
Item store that owns every item placed on the logical pages of a document.
"""
import dataclasses
import time
import uuid
from typing import Callable, Iterator, List, Optional, Tuple

from ..errors import OutOfRangeError
from ..geometry import PageGeometry, Point
from ..page.page_order import PageOrderManager
from .models import ImageItem, Item, ItemType, StrokeItem, TextItem

# Rough average glyph width of the standard fonts, as a fraction of font size
_GLYPH_WIDTH = 0.6


class PageItemsView:
    """
    Lazy view of the items on one logical page, in insertion order.

    Iterating filters the store's current contents, so the view can be
    iterated any number of times and always reflects the live item set.
    """

    def __init__(self, store: "ItemStore", page: int):
        self._store = store
        self.page = page

    def __iter__(self) -> Iterator[Item]:
        return (item for item in self._store if item.page == self.page)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)


class ItemStore:
    """Manages the items of a document, keyed by logical page."""

    def __init__(self, page_order: PageOrderManager,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the store.

        Args:
            page_order: Page order manager used to validate page numbers
            clock: Time source for id generation, in seconds
        """
        self.page_order = page_order
        self._clock = clock
        self._items: List[Item] = []

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: str) -> bool:
        return self.get(item_id) is not None

    @property
    def items(self) -> Tuple[Item, ...]:
        return tuple(self._items)

    def new_id(self, kind: ItemType) -> str:
        """
        Generate an item id of the form ``<kind>-<millis>-<suffix>``, e.g.
        ``text-1700000000000-3fa2c1``.

        The suffix is random; ids that collide with a live item are
        regenerated, so ids stay unique even when the clock does not advance.
        """
        millis = int(self._clock() * 1000)
        existing = {item.id for item in self._items}
        while True:
            item_id = f"{kind.value}-{millis}-{uuid.uuid4().hex[:6]}"
            if item_id not in existing:
                return item_id

    def get(self, item_id: str) -> Optional[Item]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def add_item(self, item: Item) -> Item:
        """
        Append an item.

        Args:
            item: Item to add

        Returns:
            The added item

        Raises:
            OutOfRangeError: If the item's page does not exist
            ValueError: If the id is already in use
        """
        self._check_page(item.page)
        if item.id in self:
            raise ValueError(f"Duplicate item id: {item.id}")
        self._items.append(item)
        return item

    def update_item(self, item_id: str, **patch) -> Optional[Item]:
        """
        Replace the given fields of an item.

        Args:
            item_id: Id of the item to update
            **patch: Field values to replace

        Returns:
            The updated item, or None if no item has this id

        Raises:
            ValueError: If a field does not exist on the item or the id
                would change
            OutOfRangeError: If the new page does not exist
        """
        for index, item in enumerate(self._items):
            if item.id != item_id:
                continue
            if "id" in patch and patch["id"] != item_id:
                raise ValueError("Item ids are immutable")
            if "page" in patch:
                self._check_page(patch["page"])
            try:
                updated = dataclasses.replace(item, **patch)
            except TypeError as e:
                raise ValueError(f"Invalid field for {type(item).__name__}: {e}") from e
            self._items[index] = updated
            return updated
        return None

    def remove_item(self, item_id: str) -> bool:
        """
        Remove an item.

        Returns:
            True if an item was found and removed
        """
        for index, item in enumerate(self._items):
            if item.id == item_id:
                del self._items[index]
                return True
        return False

    def items_on_page(self, page: int) -> PageItemsView:
        """Items on a logical page; later items draw on top."""
        return PageItemsView(self, page)

    def on_page_deleted(self, logical_index: int) -> None:
        """Drop the items of a deleted page and shift later pages down."""
        remaining = []
        for item in self._items:
            if item.page == logical_index:
                continue
            if item.page > logical_index:
                item = dataclasses.replace(item, page=item.page - 1)
            remaining.append(item)
        self._items = remaining

    def on_pages_swapped(self, first: int, second: int) -> None:
        """Move items between two swapped logical pages."""
        swap = {first: second, second: first}
        self._items = [
            dataclasses.replace(item, page=swap[item.page]) if item.page in swap else item
            for item in self._items
        ]

    def item_at_point(self, page: int, point: Point, geometry: PageGeometry,
                      tolerance: float = 4.0) -> Optional[Item]:
        """
        Get the topmost item at a normalized point on a page.

        Args:
            page: Logical page number
            point: Normalized (x, y)
            geometry: Native size of the page, used for point-based sizes
            tolerance: Extra hit margin in points

        Returns:
            The topmost item at the point, or None
        """
        px = point[0] * geometry.width
        py = point[1] * geometry.height

        for item in reversed(list(self.items_on_page(page))):
            if self._point_in_item(item, px, py, geometry, tolerance):
                return item
        return None

    def _point_in_item(self, item: Item, px: float, py: float,
                       geometry: PageGeometry, tolerance: float) -> bool:
        if isinstance(item, ImageItem):
            x0 = item.x * geometry.width
            y0 = item.y * geometry.height
            x1 = x0 + item.width * geometry.width
            y1 = y0 + item.height * geometry.height
            return x0 - tolerance <= px <= x1 + tolerance and y0 - tolerance <= py <= y1 + tolerance

        if isinstance(item, TextItem):
            # Estimated single-line box
            x0 = item.x * geometry.width
            y0 = item.y * geometry.height
            x1 = x0 + _GLYPH_WIDTH * item.font_size * max(len(item.text), 1)
            y1 = y0 + item.font_size
            return x0 - tolerance <= px <= x1 + tolerance and y0 - tolerance <= py <= y1 + tolerance

        if isinstance(item, StrokeItem):
            points = [(x * geometry.width, y * geometry.height) for x, y in item.points]
            reach = max(item.stroke_width / 2.0 + tolerance, tolerance)
            if len(points) == 1:
                return _point_near_line(px, py, *points[0], *points[0], reach)
            return any(
                _point_near_line(px, py, *points[i], *points[i + 1], reach)
                for i in range(len(points) - 1)
            )

        return False

    def _check_page(self, page: int) -> None:
        if not 1 <= page <= self.page_order.page_count:
            raise OutOfRangeError(
                f"Page {page} out of range 1..{self.page_order.page_count}"
            )

    def snapshot(self) -> Tuple[Item, ...]:
        return tuple(self._items)

    def restore(self, items: Tuple[Item, ...]) -> None:
        self._items = list(items)

    def clear(self) -> None:
        self._items = []


def _point_near_line(px: float, py: float, x1: float, y1: float,
                     x2: float, y2: float, tolerance: float) -> bool:
    """Check if a point is within ``tolerance`` of a line segment."""
    line_length_sq = (x2 - x1) ** 2 + (y2 - y1) ** 2

    if line_length_sq == 0:
        dist = ((px - x1) ** 2 + (py - y1) ** 2) ** 0.5
        return dist <= tolerance

    t = max(0, min(1, ((px - x1) * (x2 - x1) + (py - y1) * (y2 - y1)) / line_length_sq))

    nearest_x = x1 + t * (x2 - x1)
    nearest_y = y1 + t * (y2 - y1)

    dist = ((px - nearest_x) ** 2 + (py - nearest_y) ** 2) ** 0.5
    return dist <= tolerance
