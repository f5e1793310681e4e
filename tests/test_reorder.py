from tuvung.gateway.result import Err, Ok
from tuvung.practice.reorder import ReorderController, compact_after_delete, move, reindex
from tests.utils import word_record


def _words():
    return [word_record(word_id, order=index) for index, word_id in enumerate("ABCD")]


def _ids(words):
    return [word.word_id for word in words]


class RecordingPersist:
    def __init__(self, result=None):
        self.result = result or Ok(None)
        self.calls = []

    def __call__(self, ids):
        self.calls.append(list(ids))
        return self.result


def test_drag_preview_then_drop_commits_new_order():
    controller = ReorderController(_words(), can_edit=True)
    persist = RecordingPersist()

    assert controller.begin_drag("C") is True
    preview = controller.drag_over("A")
    assert _ids(preview) == ["C", "A", "B", "D"]
    # Preview is transient; the committed order is untouched.
    assert _ids(controller.words) == ["A", "B", "C", "D"]

    outcome = controller.drop(persist)

    assert outcome.changed is True
    assert outcome.persisted is True
    assert persist.calls == [["C", "A", "B", "D"]]
    assert _ids(outcome.words) == ["C", "A", "B", "D"]
    assert [word.order_in_lecture for word in outcome.words] == [0, 1, 2, 3]
    assert controller.dragging is None


def test_moving_down_inserts_at_target_index():
    controller = ReorderController(_words(), can_edit=True)

    outcome = controller.apply("A", "C", RecordingPersist())

    assert _ids(outcome.words) == ["B", "C", "A", "D"]


def test_reorder_requires_edit_rights_and_empty_filter():
    readonly = ReorderController(_words(), can_edit=False)
    filtered = ReorderController(_words(), can_edit=True, query="ca")

    assert readonly.can_reorder is False
    assert readonly.begin_drag("A") is False
    assert filtered.can_reorder is False
    persist = RecordingPersist()
    assert filtered.apply("A", "B", persist).changed is False
    assert persist.calls == []


def test_drop_on_itself_changes_nothing():
    controller = ReorderController(_words(), can_edit=True)
    persist = RecordingPersist()

    outcome = controller.apply("B", "B", persist)

    assert outcome.changed is False
    assert persist.calls == []


def test_failed_persist_rolls_back_by_default():
    controller = ReorderController(_words(), can_edit=True)

    outcome = controller.apply("D", "A", RecordingPersist(Err("boom", code="500")))

    assert outcome.rolled_back is True
    assert outcome.error == "boom"
    assert _ids(controller.words) == ["A", "B", "C", "D"]


def test_failed_persist_can_keep_optimistic_order():
    controller = ReorderController(_words(), can_edit=True, rollback_on_failure=False)

    outcome = controller.apply("D", "A", RecordingPersist(Err("boom")))

    assert outcome.rolled_back is False
    assert outcome.changed is True
    assert _ids(controller.words) == ["D", "A", "B", "C"]


def test_remove_compacts_positions():
    words = [word_record("A", order=0), word_record("B", order=2), word_record("C", order=5)]
    controller = ReorderController(words, can_edit=True)
    persist = RecordingPersist()

    outcome = controller.remove("B", persist)

    assert persist.calls == [["A", "C"]]
    assert [(word.word_id, word.order_in_lecture) for word in outcome.words] == [("A", 0), ("C", 1)]


def test_remove_keeps_compacted_order_when_persist_fails():
    controller = ReorderController(_words(), can_edit=True)

    outcome = controller.remove("A", RecordingPersist(Err("offline")))

    assert outcome.error == "offline"
    assert _ids(controller.words) == ["B", "C", "D"]


def test_helpers_keep_positions_dense():
    words = _words()

    assert _ids(move(words, 3, 0)) == ["D", "A", "B", "C"]
    assert [word.order_in_lecture for word in reindex(move(words, 3, 0))] == [0, 1, 2, 3]
    compacted = compact_after_delete(words, "B")
    assert sorted(word.order_in_lecture for word in compacted) == list(range(len(compacted)))
