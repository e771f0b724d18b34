import pytest

from steps import ACTIVE, IdSource, StepRecorder, freeze


def test_recorded_state_is_a_snapshot():
    items = [1, 2]
    rec = StepRecorder()
    step = rec.record({"items": items})
    items.append(3)
    assert step.state["items"] == (1, 2)


def test_recorded_state_is_read_only():
    step = StepRecorder().record({"a": {"b": 1}})
    with pytest.raises(TypeError):
        step.state["a"]["b"] = 2


def test_highlight_iterable_gets_active_role_and_drops_none():
    step = StepRecorder().record({}, ["x", None, "y"])
    assert dict(step.highlights) == {"x": ACTIVE, "y": ACTIVE}
    assert step.role_of("x") == ACTIVE
    assert step.role_of("z") is None


def test_highlight_mapping_keeps_roles():
    step = StepRecorder().record({}, {"x": "found", None: "lost"})
    assert dict(step.highlights) == {"x": "found"}


def test_recorder_sequence():
    rec = StepRecorder()
    assert rec.last is None
    rec.record(1, message="one", pause=5)
    rec.record(2, message="two")
    assert len(rec) == 2
    assert [s.message for s in rec] == ["one", "two"]
    assert rec[0].pause == 5
    assert rec.last.state == 2


def test_freeze_sets_and_scalars():
    assert freeze({1, 2}) == frozenset({1, 2})
    assert freeze(None) is None
    assert freeze((1, [2])) == (1, (2,))


def test_id_source_never_reuses():
    ids = IdSource("t")
    assert [ids() for _ in range(3)] == ["t1", "t2", "t3"]
    assert IdSource("n")() == "n1"
