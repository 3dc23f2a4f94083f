"""
Short-lived drag interactions.

A drag starts on pointer-down, collects pointer positions without touching
the item store or history, and is turned into exactly one committed edit on
pointer-up or cancellation (see ``EditSession.finish_drag``). Positions held
here are transient and may lie outside the page; they are clamped when the
drag is committed.
"""
import dataclasses
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from .geometry import OverlaySize, Point, clamp_point, to_normalized
from .items.models import Item, StrokeItem


@dataclass
class StrokeDrag:
    """A freehand stroke being drawn."""

    item_id: str
    page: int
    color: str
    stroke_width: float
    overlay: OverlaySize
    points: List[Point] = field(default_factory=list)

    def add_point(self, device_point: Point) -> Point:
        """Append a pointer position given in overlay pixels."""
        point = to_normalized(device_point, self.overlay)
        self.points.append(point)
        return point

    def preview_item(self) -> StrokeItem:
        """The stroke as drawn so far, unclamped."""
        return StrokeItem(
            id=self.item_id,
            page=self.page,
            color=self.color,
            stroke_width=self.stroke_width,
            points=tuple(self.points),
        )

    def committed_item(self) -> StrokeItem:
        return dataclasses.replace(
            self.preview_item(),
            points=tuple(clamp_point(p) for p in self.points),
        )


@dataclass
class MoveDrag:
    """An existing item being dragged to a new position."""

    item: Item
    start: Point  # pointer-down position in overlay pixels
    overlay: OverlaySize
    delta: Tuple[float, float] = (0.0, 0.0)  # accumulated pixel offset

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def page(self) -> int:
        return self.item.page

    def update(self, device_point: Point) -> None:
        self.delta = (device_point[0] - self.start[0], device_point[1] - self.start[1])

    def normalized_delta(self) -> Point:
        return to_normalized(self.delta, self.overlay)

    def preview_item(self) -> Item:
        """The item at its current drag position, unclamped."""
        return self._moved(clamped=False)

    def committed_item(self) -> Item:
        return self._moved(clamped=True)

    def patch(self) -> dict:
        """Fields to write back to the store on commit."""
        moved = self.committed_item()
        if isinstance(moved, StrokeItem):
            return {"points": moved.points}
        return {"x": moved.x, "y": moved.y}

    def _moved(self, clamped: bool) -> Item:
        dx, dy = self.normalized_delta()
        item = self.item

        if isinstance(item, StrokeItem):
            points = tuple((x + dx, y + dy) for x, y in item.points)
            if clamped:
                points = tuple(clamp_point(p) for p in points)
            return dataclasses.replace(item, points=points)

        position = (item.x + dx, item.y + dy)
        if clamped:
            position = clamp_point(position)
        return dataclasses.replace(item, x=position[0], y=position[1])


Drag = Union[StrokeDrag, MoveDrag]
