import math
import random

import pytest

from avl import AVLTree
from operation import Outcome


@pytest.fixture
def avl(quick):
    return AVLTree(**quick)


def messages(result):
    return [s.message for s in result.steps]


def assert_balanced(tree):
    for nid in tree.nodes:
        assert -1 <= tree.balance(nid) <= 1
    assert tree.in_order() == sorted(tree.in_order())


def test_right_right_case_rotates_left(avl):
    for value in (10, 20):
        avl.insert(value).run()
    result = avl.insert(30).run()
    assert result.ok
    assert "Imbalance at 10 (Balance: -2). Needs Left Rotation." in messages(result)
    assert "Performing Left Rotation on 10..." in messages(result)
    assert avl.nodes[avl.root].value == 20
    assert avl.rotations == 1
    assert avl.stats == {"avl_height": 2, "bst_height": 3, "avl_rotations": 1}


def test_left_right_case_rotates_twice(avl):
    for value in (30, 10):
        avl.insert(value).run()
    result = avl.insert(20).run()
    assert "Imbalance at 30 (Left-Right Case). Rotating Left child first." in messages(result)
    assert avl.nodes[avl.root].value == 20
    assert avl.rotations == 2


def test_inserted_leaf_reported_once(avl):
    avl.insert(10).run()
    result = avl.insert(5).run()
    assert messages(result).count("Inserted 5") == 1
    assert messages(result)[-1] == "Balanced."


def test_empty_tree_message(avl):
    result = avl.insert(1).run()
    assert "Tree is empty. Setting 1 as root." in messages(result)
    assert messages(result).count("Inserted 1") == 1


def test_duplicate(avl):
    avl.insert(1).run()
    result = avl.insert(1).run()
    assert result.outcome is Outcome.DUPLICATE
    assert len(avl.nodes) == 1


def test_node_view_carries_height_and_balance(avl):
    avl.build([2, 1, 3])
    root = avl.snapshot()["nodes"][avl.root]
    assert root["height"] == 2
    assert root["balance"] == 0


def test_build_counts_rotations_and_fills_mirror(avl):
    avl.build([1, 2, 3, 4, 5, 6, 7])
    assert avl.height() == 3
    assert avl.mirror.height() == 7
    assert avl.rotations == 4


def test_delete_keeps_balance(avl):
    values = list(range(1, 32))
    random.Random(7).shuffle(values)
    avl.build(values)
    for value in values[:20]:
        assert avl.delete(value).run().ok
        assert_balanced(avl)
    assert avl.in_order() == sorted(values[20:])


def test_delete_missing(avl):
    avl.build([1, 2, 3])
    result = avl.delete(9).run()
    assert result.outcome is Outcome.NOT_FOUND
    assert avl.in_order() == [1, 2, 3]


def test_mirror_skips_rejected_operations(avl):
    pending = avl.insert(1)
    assert avl.insert(2).result.outcome is Outcome.REJECTED
    pending.run()
    assert avl.mirror.in_order() == [1]


def test_reset(avl):
    avl.build([1, 2, 3])
    assert avl.reset().ok
    assert avl.root is None
    assert avl.rotations == 0
    assert avl.mirror.root is None


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_every_insert_keeps_the_tree_balanced(avl, seed):
    values = random.Random(seed).sample(range(1000), 60)
    for n, value in enumerate(values, 1):
        assert avl.insert(value).run().ok
        assert_balanced(avl)
        assert avl.height() <= 1.45 * math.log2(n + 2)
        assert avl.in_order() == sorted(values[:n])


def test_rotation_keeps_in_order_values(avl):
    for value in (30, 20):
        avl.insert(value).run()
    before = avl.in_order()
    avl.insert(10).run()
    assert avl.rotations == 1
    assert avl.in_order() == sorted(before + [10])
