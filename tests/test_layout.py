import pytest

from bst import BinarySearchTree
from hash_table import HashTable
from heap import Heap
from layout import (HIGHLIGHTED, frame_for, grid_cell_at, grid_cell_size, hit_test, list_order)
from linked_list import LinkedList
from pathfinding import Pathfinding
from queues import Queue
from stack import Stack


def positions(frame):
    return {el.label: (el.x, el.y) for el in frame.elements}


def test_tree_halves_the_offset_per_level(quick):
    tree = BinarySearchTree(**quick)
    tree.build([50, 30, 70, 20])
    frame = frame_for("bst", tree.idle_step())
    where = positions(frame)
    assert where["50"] == (500, 50)
    assert where["30"] == (250, 130)
    assert where["70"] == (750, 130)
    assert where["20"] == (125, 210)
    assert len(frame.connections) == 3


def test_heap_positions_follow_array_indices(quick):
    heap = Heap(**quick)
    heap.build([1, 2, 3])
    frame = frame_for("heap", heap.idle_step())
    assert [(el.x, el.y, el.detail) for el in frame.elements] == [
        (500, 60, "[0]"),
        (250, 140, "[1]"),
        (750, 140, "[2]"),
    ]


def test_linked_list_row_and_pointers(quick):
    linked = LinkedList(**quick)
    step = linked.idle_step()
    assert list_order(step.state) == [linked.list.head] + [
        nid for nid in step.state["nodes"] if nid != linked.list.head
    ]
    frame = frame_for("linked_list", step)
    assert [el.x for el in frame.elements] == [80, 220, 360]
    assert [note.text for note in frame.annotations] == ["head"]


def test_stack_grows_upward(quick):
    stack = Stack(**quick)
    stack.build(["a", "b"])
    frame = frame_for("stack", stack.idle_step())
    ys = [el.y for el in frame.elements]
    assert ys[0] > ys[1]
    texts = [note.text for note in frame.annotations]
    assert "top" in texts
    assert "2/10" in texts


def test_circular_queue_ring(quick):
    queue = Queue(mode="circular", capacity=4, **quick)
    result = queue.enqueue(7).run()
    frame = frame_for("queue", result.steps[-1])
    slots = [el for el in frame.elements if el.id.startswith("slot")]
    assert len(slots) == 4
    assert [el.state for el in slots[1:]] == ["empty"] * 3
    assert len([c for c in frame.connections if c.state == "ring"]) == 4
    assert {note.text for note in frame.annotations} == {"head", "tail", "front"}


def test_priority_queue_detail(quick):
    queue = Queue(mode="priority", **quick)
    queue.enqueue("x", 2).run()
    frame = frame_for("queue", queue.idle_step())
    assert frame.elements[0].detail == "p2"


def test_hash_table_buckets(quick):
    table = HashTable(**quick)
    table.insert("3").run()
    frame = frame_for("hash_table", table.idle_step())
    b3 = frame.element("b3")
    assert b3.state == "default"
    assert frame.element("b0").state == "empty"
    item = [el for el in frame.elements if el.label == "3" and el.id != "b3"][0]
    assert item.y == b3.y
    assert item.x > b3.x


def test_overlay_wins_over_step_roles(quick):
    tree = BinarySearchTree(**quick)
    result = tree.insert(5).run()
    step = result.steps[-1]
    nid = result.value
    assert frame_for("bst", step).element(nid).state == "found"
    assert frame_for("bst", step, {nid: HIGHLIGHTED}).element(nid).state == HIGHLIGHTED


def test_grid_frame(quick):
    grid = Pathfinding(rows=5, cols=5, start=(0, 0), finish=(4, 4), **quick)
    grid.toggle_wall(2, 2)
    frame = frame_for("pathfinding", grid.idle_step())
    assert frame.cell_size == grid_cell_size(5, 5) == 120
    assert (frame.width, frame.height) == (600, 600)
    assert {el.id: el.state for el in frame.elements} == {
        "c0-0": "start",
        "c4-4": "finish",
        "c2-2": "wall",
    }


@pytest.mark.parametrize("x, y, cell", [(130, 10, (0, 1)), (599, 599, (4, 4)), (610, 10, None), (-1, 5, None)])
def test_grid_cell_at(x, y, cell):
    assert grid_cell_at(5, 5, x, y) == cell


def test_hit_test(quick):
    tree = BinarySearchTree(**quick)
    tree.build([50, 30])
    frame = frame_for("bst", tree.idle_step())
    left = tree.ids_with_value(30)[0]
    assert hit_test(frame, 240, 135) == left
    assert hit_test(frame, 400, 400) is None


def test_unknown_feature(quick):
    with pytest.raises(ValueError):
        frame_for("trie", Stack(**quick).idle_step())
