"""Undo/Redo history for ZXplorer.

History works on whole-graph snapshots: a save point is taken right before
each mutation so that undo brings back the graph as it was before it.
"""

import logging
from typing import Optional, List, Callable, Any
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_HISTORY = 50


class SnapshotRestoreError(Exception):
    """A history snapshot could not be restored."""


@dataclass(frozen=True)
class HistoryEntry:
    """A serialized graph plus a short label for menus."""
    snapshot: str
    description: str = ""


class HistoryManager:
    """Manages bounded undo/redo stacks of graph snapshots."""

    def __init__(self, max_undo: int = MAX_HISTORY, max_redo: int = MAX_HISTORY):
        self.max_undo = max_undo
        self.max_redo = max_redo
        self._undo_stack: List[HistoryEntry] = []
        self._redo_stack: List[HistoryEntry] = []

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    @property
    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0

    @property
    def undo_count(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_count(self) -> int:
        return len(self._redo_stack)

    @property
    def undo_description(self) -> str:
        """Get description of next undo action."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return ""

    @property
    def redo_description(self) -> str:
        """Get description of next redo action."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return ""

    def undo_snapshots(self) -> List[str]:
        """Undo stack contents, oldest first."""
        return [entry.snapshot for entry in self._undo_stack]

    def redo_snapshots(self) -> List[str]:
        return [entry.snapshot for entry in self._redo_stack]

    def save_state(self, snapshot: str, description: str = ""):
        """Record the graph as it is before a mutation."""
        self._undo_stack.append(HistoryEntry(snapshot, description))
        self._redo_stack.clear()  # Any new action invalidates the redo timeline

        while len(self._undo_stack) > self.max_undo:
            self._undo_stack.pop(0)

        self._notify_changed()

    def undo(self, current: str, restore: Callable[[str], Any]) -> Optional[Any]:
        """Restore the most recent snapshot.

        ``restore`` is called with the popped snapshot; ``current`` goes onto
        the redo stack only if it succeeds. Returns whatever ``restore``
        returned, or None when there is nothing to undo.
        """
        return self._step(self._undo_stack, self._redo_stack, self.max_redo,
                          current, restore, "undo")

    def redo(self, current: str, restore: Callable[[str], Any]) -> Optional[Any]:
        """Re-apply the most recently undone snapshot."""
        return self._step(self._redo_stack, self._undo_stack, self.max_undo,
                          current, restore, "redo")

    def _step(self, source: List[HistoryEntry], target: List[HistoryEntry],
              target_limit: int, current: str, restore: Callable[[str], Any],
              name: str) -> Optional[Any]:
        if not source:
            return None

        entry = source.pop()
        try:
            result = restore(entry.snapshot)
        except Exception as exc:
            source.append(entry)
            logger.error(f"Failed to {name}: {exc}")
            raise SnapshotRestoreError(f"Could not {name}: {exc}") from exc

        target.append(HistoryEntry(current, entry.description))
        while len(target) > target_limit:
            target.pop(0)

        self._notify_changed()
        return result

    def clear(self):
        """Clear all history."""
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._notify_changed()

    def _notify_changed(self):
        """Notify that undo/redo state changed."""
        if self.on_state_changed:
            self.on_state_changed()
