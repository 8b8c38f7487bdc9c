import pytest

from zxplorer.undo import HistoryManager, SnapshotRestoreError, MAX_HISTORY


class Document:
    """Minimal stand-in for a graph: the snapshot is the state itself."""

    def __init__(self, state="s0"):
        self.state = state

    def restore(self, snapshot):
        self.state = snapshot
        return snapshot


@pytest.fixture
def history():
    return HistoryManager()


def test_empty_history(history):
    assert not history.can_undo
    assert not history.can_redo
    assert history.undo(current="x", restore=lambda s: s) is None
    assert history.redo(current="x", restore=lambda s: s) is None


def test_history_is_bounded_and_keeps_most_recent(history):
    for i in range(MAX_HISTORY + 10):
        history.save_state(f"s{i}", f"edit {i}")
    assert history.undo_count == MAX_HISTORY
    assert history.undo_snapshots() == [f"s{i}" for i in range(10, MAX_HISTORY + 10)]
    assert history.undo_description == f"edit {MAX_HISTORY + 9}"


def test_undo_then_redo_restores_exact_states(history):
    doc = Document()
    states = []
    for i in range(1, 6):
        history.save_state(doc.state, f"edit {i}")
        states.append(doc.state)
        doc.state = f"s{i}"
    final = doc.state

    for expected in reversed(states[2:]):
        history.undo(doc.state, doc.restore)
        assert doc.state == expected
    assert history.redo_count == 3

    for _ in range(3):
        history.redo(doc.state, doc.restore)
    assert doc.state == final
    assert history.undo_count == 5
    assert not history.can_redo


def test_new_save_invalidates_redo(history):
    doc = Document()
    history.save_state(doc.state)
    doc.state = "s1"
    history.undo(doc.state, doc.restore)
    assert history.can_redo

    history.save_state(doc.state, "other edit")
    assert not history.can_redo


def test_failed_restore_keeps_entry_and_raises(history):
    history.save_state("s0", "edit")

    def broken(snapshot):
        raise ValueError("corrupt")

    with pytest.raises(SnapshotRestoreError):
        history.undo("s1", broken)
    assert history.undo_count == 1
    assert history.redo_count == 0
    assert history.undo_description == "edit"


def test_state_changed_callback(history):
    calls = []
    history.on_state_changed = lambda: calls.append(1)
    history.save_state("s0")
    history.undo("s1", lambda s: s)
    history.clear()
    assert len(calls) == 3
    assert not history.can_undo and not history.can_redo


def test_redo_stack_bound():
    history = HistoryManager(max_undo=10, max_redo=2)
    for i in range(5):
        history.save_state(f"s{i}")
    for i in range(5):
        history.undo(f"c{i}", lambda s: s)
    assert history.redo_count == 2
    assert history.redo_snapshots() == ["c3", "c4"]
