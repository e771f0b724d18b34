import pytest

from bst import FOUND, BinarySearchTree
from operation import Outcome


@pytest.fixture
def tree(quick):
    t = BinarySearchTree(**quick)
    t.build([50, 30, 70, 20, 40, 60, 80])
    return t


def test_build_keeps_order(tree):
    assert tree.in_order() == [20, 30, 40, 50, 60, 70, 80]
    assert tree.height() == 3
    assert tree.nodes[tree.root].value == 50


def test_insert_narrates_the_descent(tree, sound):
    result = tree.insert(65).run()
    assert result.ok
    assert [s.message for s in result.steps] == [
        "Inserting 65...",
        "65 > 50. Going Right.",
        "65 < 70. Going Left.",
        "65 > 60. Going Right.",
        "Inserted 65.",
    ]
    assert result.steps[-1].role_of(result.value) == FOUND
    assert sound.events == ["insert"]
    assert tree.contains(65)


def test_insert_into_empty_tree(quick):
    t = BinarySearchTree(**quick)
    result = t.insert(5).run()
    assert "Tree is empty. Setting 5 as root." in [s.message for s in result.steps]
    assert t.nodes[t.root].value == 5


def test_duplicate_insert(tree):
    result = tree.insert(40).run()
    assert result.outcome is Outcome.DUPLICATE
    assert len(tree.nodes) == 7


def test_search(tree):
    found = tree.search(60).run()
    assert found.ok
    assert tree.nodes[found.value].value == 60
    missing = tree.search(65).run()
    assert missing.outcome is Outcome.NOT_FOUND
    assert missing.message == "65 not found in the tree."


def test_search_steps_carry_curr_pointer(tree):
    result = tree.search(20).run()
    pointed = [s.pointers.get("curr") for s in result.steps if "curr" in s.pointers]
    assert [tree.nodes[nid].value for nid in pointed] == [50, 30, 20]


@pytest.mark.parametrize("value", [20, 30, 70, 50])
def test_delete_keeps_order(tree, value):
    assert tree.delete(value).run().ok
    assert tree.in_order() == [v for v in [20, 30, 40, 50, 60, 70, 80] if v != value]
    assert value not in tree.in_order()


def test_delete_with_two_children_uses_successor(tree):
    result = tree.delete(50).run()
    assert result.ok
    assert tree.nodes[tree.root].value == 60
    assert "In-order successor is 60. Copying it up." in [s.message for s in result.steps]
    assert tree.in_order() == [20, 30, 40, 60, 70, 80]


def test_delete_missing(tree):
    result = tree.delete(99).run()
    assert result.outcome is Outcome.NOT_FOUND
    assert len(tree.nodes) == 7


def test_clear(tree):
    assert tree.clear().ok
    assert tree.root is None
    assert tree.in_order() == []


def test_place_and_discard_are_silent(quick, sound):
    t = BinarySearchTree(**quick)
    assert t.place(3) is not None
    assert t.place(3) is None
    assert t.discard(3)
    assert sound.events == []
    assert t.player.total_steps == 0
