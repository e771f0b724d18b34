import pytest

from linked_list import LinkedList
from operation import Outcome


@pytest.fixture
def linked(quick):
    return LinkedList(**quick)


def messages(result):
    return [s.message for s in result.steps]


def test_starts_with_three_nodes(linked):
    assert linked.values() == [10, 20, 30]
    assert linked.idle_step().pointers["head"] == linked.list.head


def test_insert_head(linked, sound):
    result = linked.insert_head(5)
    assert result.ok
    assert linked.values() == [5, 10, 20, 30]
    assert messages(result) == [
        "Start",
        "Create new node 5",
        "Point new node to current head",
        "Update Head pointer",
        "Complete",
    ]
    assert result.steps[1].pointers["new"] == result.value
    assert sound.events == ["insert"]


def test_insert_tail_walks_the_list(linked):
    result = linked.insert_tail(40)
    assert linked.values() == [10, 20, 30, 40]
    assert messages(result).count("Traverse to next node") == 2
    assert "Link last node to new node" in messages(result)


def test_insert_tail_into_empty_list(quick):
    linked = LinkedList(values=(), **quick)
    result = linked.insert_tail(1)
    assert "List empty, new node is Head" in messages(result)
    assert linked.values() == [1]


def test_timeline_autoplays_from_the_first_step(linked):
    linked.insert_tail(40)
    assert linked.player.is_playing
    assert linked.current_step().message == "Start"
    # The first step still shows the list before the insert
    assert len(linked.current_step().state["nodes"]) == 3
    assert linked.player.steps[0].state["nodes"][linked.list.head]["value"] == 10


def test_delete_head(linked):
    result = linked.delete(10)
    assert result.ok
    assert "Found 10 at Head" in messages(result)
    assert linked.values() == [20, 30]


def test_delete_middle(linked):
    result = linked.delete(20)
    assert "Update previous node's next pointer" in messages(result)
    assert linked.values() == [10, 30]
    assert len(linked) == 2


def test_delete_missing(linked):
    result = linked.delete(99)
    assert result.outcome is Outcome.NOT_FOUND
    assert result.message == "Value 99 not found"
    assert linked.values() == [10, 20, 30]


def test_delete_from_empty(quick):
    linked = LinkedList(values=(), **quick)
    result = linked.delete(1)
    assert result.outcome is Outcome.NOT_FOUND
    assert result.message == "List is empty"


def test_reverse(linked):
    result = linked.reverse()
    assert linked.values() == [30, 20, 10]
    assert messages(result)[-2] == "Update Head to last node"
    saved = [s for s in result.steps if s.message == "Save next node"]
    assert len(saved) == 3
    assert set(saved[0].pointers) == {"prev", "curr", "next"}


def test_build_and_clear(linked):
    linked.player.pause()
    assert linked.build([1, 2]).ok
    assert linked.values() == [1, 2]
    assert linked.clear().ok
    assert linked.values() == []
    assert linked.list.head is None


@pytest.mark.parametrize("values", [(), (7,), (1, 2), (10, 20, 30, 40)])
def test_reverse_twice_restores_the_order(quick, values):
    linked = LinkedList(values=values, **quick)
    assert linked.reverse().ok
    assert linked.values() == list(reversed(values))
    linked.player.pause()
    assert linked.reverse().ok
    assert linked.values() == list(values)
