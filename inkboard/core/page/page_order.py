"""
Logical page order, rotations and page geometry of an edited document.

Logical pages are 1-based positions in the user-visible sequence. Source
pages are 1-based page numbers in the loaded document.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple, Union

from ..errors import LastPageError, OutOfRangeError
from ..geometry import PageGeometry

ROTATION_STEPS = (90, -90)


class Direction(IntEnum):
    PREV = -1
    NEXT = 1


@dataclass(frozen=True)
class PageLayout:
    """Immutable snapshot of the page order and rotations."""

    order: Tuple[int, ...]
    rotations: Tuple[Tuple[int, int], ...]


class PageOrderManager:
    """Owns the logical to source page mapping and per-page rotation."""

    def __init__(self, geometries: Sequence[PageGeometry] = ()):
        self.order: List[int] = []
        self.rotations: Dict[int, int] = {}
        self._geometries: Tuple[PageGeometry, ...] = ()
        self.reset(geometries)

    def reset(self, geometries: Sequence[PageGeometry]) -> None:
        """
        Start over with the identity order for a freshly loaded document.

        Args:
            geometries: Native size of every source page, in source order
        """
        self._geometries = tuple(geometries)
        self.order = list(range(1, len(self._geometries) + 1))
        self.rotations = {}

    @property
    def page_count(self) -> int:
        return len(self.order)

    @property
    def source_page_count(self) -> int:
        return len(self._geometries)

    def source_index(self, logical_index: int) -> int:
        """Source page number shown at a logical page."""
        self._check(logical_index)
        return self.order[logical_index - 1]

    def move_page(self, logical_index: int, direction: Union[Direction, int]) -> bool:
        """
        Swap a page with its neighbour.

        Rotation entries move with their pages.

        Args:
            logical_index: 1-based logical page to move
            direction: Direction.PREV or Direction.NEXT

        Returns:
            True if the page was moved, False if the target is out of range
        """
        target = logical_index + int(direction)
        if not (1 <= logical_index <= self.page_count and 1 <= target <= self.page_count):
            return False

        i, j = logical_index - 1, target - 1
        self.order[i], self.order[j] = self.order[j], self.order[i]

        moved = self.rotations.pop(logical_index, None)
        swapped = self.rotations.pop(target, None)
        if moved:
            self.rotations[target] = moved
        if swapped:
            self.rotations[logical_index] = swapped
        return True

    def delete_page(self, logical_index: int) -> None:
        """
        Remove a logical page and shift the rotations of later pages down.

        Raises:
            LastPageError: If this is the only remaining page
            OutOfRangeError: If the page does not exist
        """
        if self.page_count <= 1:
            raise LastPageError("Cannot remove the last page.")
        self._check(logical_index)

        order = self.order[:logical_index - 1] + self.order[logical_index:]
        rotations = {}
        for page, degrees in self.rotations.items():
            if page == logical_index:
                continue
            rotations[page - 1 if page > logical_index else page] = degrees

        self.order = order
        self.rotations = rotations

    def set_rotation(self, logical_index: int, delta: int) -> int:
        """
        Rotate a page by a quarter turn.

        Args:
            logical_index: 1-based logical page
            delta: +90 or -90

        Returns:
            The new rotation in degrees
        """
        if delta not in ROTATION_STEPS:
            raise ValueError(f"Rotation delta must be +90 or -90, got {delta}")
        self._check(logical_index)

        rotation = (self.rotation(logical_index) + delta + 360) % 360
        if rotation:
            self.rotations[logical_index] = rotation
        else:
            self.rotations.pop(logical_index, None)
        return rotation

    def rotation(self, logical_index: int) -> int:
        return self.rotations.get(logical_index, 0)

    def page_geometry(self, logical_index: int) -> PageGeometry:
        """Native geometry of the source page currently at a logical slot."""
        return self._geometries[self.source_index(logical_index) - 1]

    def snapshot(self) -> PageLayout:
        return PageLayout(tuple(self.order), tuple(sorted(self.rotations.items())))

    def restore(self, layout: PageLayout) -> None:
        self.order = list(layout.order)
        self.rotations = dict(layout.rotations)

    def _check(self, logical_index: int) -> None:
        if not 1 <= logical_index <= self.page_count:
            raise OutOfRangeError(
                f"Logical page {logical_index} out of range 1..{self.page_count}"
            )
