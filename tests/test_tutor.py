import pytest

from bst import BinarySearchTree
from layout import HIGHLIGHTED
from queues import Queue
from settings import HIGHLIGHT_DURATION_MS
from tutor import TutorBridge


@pytest.fixture
def tree(quick):
    engine = BinarySearchTree(**quick)
    engine.build([50, 30, 70])
    return engine


def test_context_defaults_to_the_engine(tree):
    assert TutorBridge(tree).context == tree.context
    assert TutorBridge(tree, context="custom").context == "custom"


def test_highlight_matches_numeric_text(tree):
    bridge = TutorBridge(tree)
    assert bridge.highlight_value("30") == 1
    (nid,) = tree.ids_with_value(30)
    assert bridge.highlights == {nid: HIGHLIGHTED}
    assert bridge.active


def test_highlight_fades(tree):
    bridge = TutorBridge(tree)
    bridge.highlight_value(70)
    bridge.update(HIGHLIGHT_DURATION_MS - 1)
    assert bridge.active
    bridge.update(1)
    assert not bridge.active
    assert bridge.highlights == {}


def test_highlight_missing_value(tree):
    bridge = TutorBridge(tree)
    assert bridge.highlight_value("nope") == 0
    assert not bridge.active


def test_highlight_text_values(quick):
    queue = Queue(**quick)
    queue.build(["job", "task"])
    bridge = TutorBridge(queue)
    assert bridge.highlight_value("task") == 1


def test_build_from_replaces_the_structure(tree):
    bridge = TutorBridge(tree)
    bridge.highlight_value(50)
    result = bridge.build_from([8, 4, 12])
    assert result.ok
    assert tree.in_order() == [4, 8, 12]
    assert not bridge.active
