import pytest

from inkboard.core.errors import LastPageError, OutOfRangeError
from inkboard.core.geometry import PageGeometry
from inkboard.core.page import Direction, PageOrderManager


@pytest.fixture
def pages():
    return PageOrderManager([PageGeometry(600, 800), PageGeometry(400, 500),
                             PageGeometry(300, 300)])


def test_identity_order_on_reset(pages):
    assert pages.order == [1, 2, 3]
    assert pages.page_count == 3
    assert pages.rotations == {}


def test_move_page_swaps_neighbours(pages):
    assert pages.move_page(3, Direction.PREV)
    assert pages.order == [1, 3, 2]
    assert pages.move_page(1, Direction.NEXT)
    assert pages.order == [3, 1, 2]


def test_move_page_out_of_range_is_ignored(pages):
    assert not pages.move_page(1, Direction.PREV)
    assert not pages.move_page(3, Direction.NEXT)
    assert pages.order == [1, 2, 3]


def test_rotation_follows_moved_page(pages):
    pages.set_rotation(1, 90)
    pages.move_page(1, Direction.NEXT)
    assert pages.rotations == {2: 90}


def test_geometry_follows_source_page(pages):
    pages.move_page(1, Direction.NEXT)
    assert pages.page_geometry(1) == PageGeometry(400, 500)
    assert pages.page_geometry(2) == PageGeometry(600, 800)


def test_delete_page_shifts_rotations(pages):
    pages.set_rotation(2, 90)
    pages.set_rotation(3, -90)
    pages.delete_page(2)
    assert pages.order == [1, 3]
    assert pages.rotations == {2: 270}


def test_cannot_delete_last_page():
    pages = PageOrderManager([PageGeometry(100, 100)])
    with pytest.raises(LastPageError):
        pages.delete_page(1)
    assert pages.order == [1]


def test_delete_out_of_range(pages):
    with pytest.raises(OutOfRangeError):
        pages.delete_page(4)


def test_rotation_wraps_and_clears_at_zero(pages):
    for _ in range(3):
        pages.set_rotation(1, 90)
    assert pages.rotation(1) == 270
    assert pages.set_rotation(1, 90) == 0
    assert 1 not in pages.rotations
    assert pages.set_rotation(1, -90) == 270


def test_rotation_rejects_other_steps(pages):
    with pytest.raises(ValueError):
        pages.set_rotation(1, 180)


def test_snapshot_is_detached(pages):
    layout = pages.snapshot()
    pages.move_page(1, Direction.NEXT)
    pages.set_rotation(1, 90)
    pages.restore(layout)
    assert pages.order == [1, 2, 3]
    assert pages.rotations == {}
