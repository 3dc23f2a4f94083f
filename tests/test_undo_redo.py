from inkboard.core.items import UndoRedoStack


def test_empty_stack():
    stack = UndoRedoStack()
    assert not stack.can_undo()
    assert not stack.can_redo()
    assert stack.undo("current") is None
    assert stack.redo("current") is None


def test_undo_then_redo_restores_state():
    stack = UndoRedoStack()
    stack.record(("a",))
    assert stack.undo(("a", "b")) == ("a",)
    assert stack.redo(("a",)) == ("a", "b")


def test_record_clears_redo():
    stack = UndoRedoStack()
    stack.record(())
    stack.undo(("x",))
    assert stack.can_redo()
    stack.record(())
    assert not stack.can_redo()


def test_unbounded_by_default():
    stack = UndoRedoStack()
    for i in range(500):
        stack.record((i,))
    assert len(stack.undo_stack) == 500


def test_max_size_drops_oldest():
    stack = UndoRedoStack(max_size=2)
    for i in range(3):
        stack.record((i,))
    assert stack.undo_stack == [(1,), (2,)]
