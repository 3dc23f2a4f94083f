"""
Undo/Redo functionality over immutable state snapshots.
"""
from typing import Generic, List, Optional, TypeVar

S = TypeVar("S")


class UndoRedoStack(Generic[S]):
    """
    Manages undo/redo over full snapshots.

    Snapshots must be immutable (tuples of frozen items, for example); the
    stack stores them as given. The most recent entry of each stack is its
    last element.
    """

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize the undo/redo stack.

        Args:
            max_size: Maximum number of undo states to keep, None for no limit
        """
        self.undo_stack: List[S] = []
        self.redo_stack: List[S] = []
        self.max_size = max_size

    def record(self, previous: S) -> None:
        """
        Record the state as it was right before a committed edit.

        Any pending redo states are discarded.

        Args:
            previous: Snapshot taken before the edit
        """
        self.undo_stack.append(previous)
        self.redo_stack.clear()

        if self.max_size is not None and len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self.redo_stack) > 0

    def undo(self, current: S) -> Optional[S]:
        """
        Perform undo and return the previous state.

        Args:
            current: Current state before undo

        Returns:
            Previous state, or None if undo not available
        """
        if not self.can_undo():
            return None

        self.redo_stack.append(current)
        return self.undo_stack.pop()

    def redo(self, current: S) -> Optional[S]:
        """
        Perform redo and return the next state.

        Args:
            current: Current state before redo

        Returns:
            Next state, or None if redo not available
        """
        if not self.can_redo():
            return None

        self.undo_stack.append(current)
        return self.redo_stack.pop()

    def clear(self) -> None:
        """Clear both stacks."""
        self.undo_stack.clear()
        self.redo_stack.clear()
