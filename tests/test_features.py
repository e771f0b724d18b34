import random

import pytest

from features import FEATURES, FEATURES_BY_KEY, parse_number, parse_text, random_values
from layout import Frame, frame_for
from settings import INSTANT
from sound import RecordingSound
from ui_viz import VizState


@pytest.fixture
def viz():
    def mount(key):
        return VizState(FEATURES_BY_KEY[key], pacing=INSTANT)

    return mount


@pytest.mark.parametrize("text, number", [("12", 12), (" 2.5 ", 2.5), ("-3", -3)])
def test_parse_number(text, number):
    value = parse_number(text)
    assert value == number
    assert type(value) is type(number)


@pytest.mark.parametrize("text", ["", "   ", "abc", "nan", "inf", "-inf"])
def test_parse_number_rejects(text):
    with pytest.raises(ValueError):
        parse_number(text)


def test_parse_text():
    assert parse_text("  hi ") == "hi"
    with pytest.raises(ValueError):
        parse_text(" ")


def test_random_values_are_distinct():
    values = random_values(7, random.Random(3))
    assert len(set(values)) == 7
    assert all(1 <= v < 100 for v in values)


def test_ten_features():
    assert len(FEATURES) == 10
    assert len(FEATURES_BY_KEY) == 10


@pytest.mark.parametrize("feature", FEATURES, ids=lambda f: f.key)
def test_every_feature_frames_its_idle_state(feature):
    engine = feature.factory(pacing=INSTANT, sound=RecordingSound())
    assert engine.feature == feature.key
    assert engine.context
    assert isinstance(frame_for(feature.key, engine.idle_step()), Frame)


def test_default_action():
    assert FEATURES_BY_KEY["bst"].default_action.label == "Insert"
    assert FEATURES_BY_KEY["graph"].default_action is None
    with pytest.raises(KeyError):
        FEATURES_BY_KEY["bst"].action("Rotate")


def test_submit_runs_the_default_action(viz):
    state = viz("bst")
    state.type_text("42")
    op = state.submit()
    assert state.running
    state.update(0)
    assert op.done
    assert not state.running
    assert state.engine.in_order() == [42]
    assert state.status == "Inserted 42."
    assert state.text == ""


def test_invalid_input_keeps_running_nothing(viz):
    state = viz("bst")
    state.type_text("abc")
    state.submit()
    assert state.status.startswith("Invalid input")
    assert state.operation is None


def test_value_actions_need_text(viz):
    state = viz("heap")
    state.perform(state.feature.action("Insert"))
    assert state.status == "Enter a value first."


def test_question_mark_highlights(viz):
    state = viz("linked_list")
    state.type_text("?20")
    state.submit()
    assert state.status == "Highlighted 1 element(s)."
    (nid,) = state.engine.ids_with_value(20)
    assert state.frame().element(nid).state == "highlighted"


def test_text_buffer_is_capped(viz):
    state = viz("stack")
    for _ in range(30):
        state.type_text("x")
    assert len(state.text) == 24
    state.backspace()
    assert len(state.text) == 23


def test_hash_insert_with_value(viz):
    state = viz("hash_table")
    state.type_text("apple=red")
    state.submit()
    state.update(0)
    assert state.engine.get("apple") == "red"


def test_queue_mode_cycles(viz):
    state = viz("queue")
    mode = state.feature.action("Mode")
    state.perform(mode)
    assert state.engine.mode == "circular"
    state.perform(mode)
    assert state.engine.mode == "priority"
    state.type_text("urgent,1")
    state.submit()
    state.update(0)
    assert state.engine.items[0].priority == 1


def test_graph_canvas_clicks(viz):
    state = viz("graph")
    state.canvas_press(100, 100)
    state.canvas_press(300, 100)
    a, b = state.engine.nodes
    state.canvas_press(102, 98)
    assert state.engine.selected == a
    state.canvas_release()
    state.canvas_press(300, 100)
    assert state.engine.find_edge(a, b) is not None
    state.canvas_press(300, 100, button=3)
    assert list(state.engine.nodes) == [a]


def test_graph_run_needs_a_start(viz):
    state = viz("graph")
    state.perform(state.feature.action("BFS"))
    assert state.status == "Please select a start node first!"


def test_graph_drag_moves_the_node(viz):
    state = viz("graph")
    state.canvas_press(100, 100)
    (nid,) = state.engine.nodes
    state.canvas_press(100, 100)
    state.canvas_drag(400, 300)
    state.canvas_release()
    node = state.engine.nodes[nid]
    assert (node.x, node.y) == (400, 300)


def test_grid_drag_draws_walls(viz):
    state = viz("pathfinding")
    size = state.frame().cell_size
    state.canvas_press(size * 0.5, size * 0.5)
    state.canvas_drag(size * 1.5, size * 0.5)
    state.canvas_drag(size * 1.6, size * 0.6)
    state.canvas_release()
    assert state.engine.walls == {(0, 0), (0, 1)}


def test_hull_clicks(viz):
    state = viz("convex_hull")
    state.canvas_press(100, 100)
    state.canvas_press(2000, 100)
    assert len(state.engine.points) == 1
    state.canvas_press(101, 101, button=3)
    assert state.engine.points == {}


def test_transport_ignored_while_running(viz):
    state = viz("stack")
    state.type_text("a")
    state.submit()
    state.step_backward()
    assert state.running
    state.update(0)
    total = state.total_steps
    assert state.current_index == total - 1
    state.step_backward()
    assert state.current_index == total - 2


def test_teardown_cancels(viz):
    state = viz("heap")
    state.type_text("5")
    op = state.submit()
    state.teardown()
    state.update(0)
    assert op.result.outcome.value == "cancelled"


def test_nan_never_reaches_the_tree(viz):
    state = viz("bst")
    for _ in range(2):
        state.type_text("nan")
        state.submit()
        assert state.status.startswith("Invalid input")
    state.type_text("5")
    state.submit()
    state.update(0)
    assert state.engine.in_order() == [5]
