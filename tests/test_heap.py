import pytest

from heap import Heap
from operation import Outcome


@pytest.fixture
def heap(quick):
    h = Heap(**quick)
    for value in (5, 3, 8, 1):
        h.insert(value).run()
    return h


def test_insert_bubbles_up(heap):
    assert heap.values() == [1, 3, 8, 5]
    assert heap.is_valid()


def test_insert_steps(quick):
    h = Heap(**quick)
    h.insert(5).run()
    result = h.insert(2).run()
    messages = [s.message for s in result.steps]
    assert "Added 2 at end (index 1)" in messages
    assert "Comparing 2 with parent 5..." in messages
    assert messages[-1] == "Inserted 2."


def test_extract_root(heap):
    result = heap.extract_root().run()
    assert result.value == 1
    assert heap.values() == [3, 5, 8]
    assert heap.sorted_output == [1]
    assert heap.is_valid()


def test_extract_empty(quick):
    result = Heap(**quick).extract_root().run()
    assert result.outcome is Outcome.UNDERFLOW
    assert result.message == "Heap is empty."


def test_sort(heap):
    result = heap.sort().run()
    assert result.value == [1, 3, 5, 8]
    assert len(heap) == 0
    assert heap.aux() == {"sorted": [1, 3, 5, 8]}


def test_max_heap_sort(quick):
    h = Heap(kind="max", **quick)
    h.build([4, 9, 2, 7])
    assert h.values()[0] == 9
    assert h.sort().run().value == [9, 7, 4, 2]


def test_toggle_type_rebuilds(quick):
    h = Heap(**quick)
    h.build([1, 2, 3, 4, 5])
    h.sorted_output.append(0)
    result = h.toggle_type().run()
    assert result.steps[0].state["kind"] == "min"
    assert result.steps[0].message == "Switching to Max Heap..."
    assert result.message == "Switched to Max Heap."
    assert h.kind == "max"
    assert h.values()[0] == 5
    assert h.is_valid()
    assert h.sorted_output == []


def test_build_heapifies(quick):
    h = Heap(**quick)
    h.build([9, 8, 7, 6, 5, 4])
    assert h.values()[0] == 4
    assert h.is_valid()


def test_invalid_kind():
    with pytest.raises(ValueError):
        Heap(kind="median")
