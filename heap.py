# heap.py
# Array-backed binary heap engine (min or max) with heap sort

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from operation import Engine, Operation, OperationResult, Outcome, done, failed
from steps import ACTIVE, IdSource, StepRecorder

COMPARING = "comparing"
HEAP_TYPES = ("min", "max")


@dataclass
class HeapNode:
    id: str
    value: float


def parent(i: int) -> int:
    return (i - 1) // 2


def children(i: int):
    return 2 * i + 1, 2 * i + 2


class Heap(Engine):
    feature = "heap"
    context = "Binary Heap. Insert with bubble up, extract root with bubble down, heap sort."

    def __init__(self, kind: str = "min", **kwargs):
        if kind not in HEAP_TYPES:
            raise ValueError(f"unknown heap type: {kind}")
        super().__init__(**kwargs)
        self.kind = kind
        self.nodes: List[HeapNode] = []
        self.sorted_output: List[float] = []
        self._new_id = IdSource("p")

    # --- state ---

    def compare(self, a, b) -> bool:
        """True when a belongs above b."""
        return a < b if self.kind == "min" else a > b

    def snapshot(self) -> dict:
        return {"kind": self.kind, "nodes": [{"id": n.id, "value": n.value} for n in self.nodes]}

    def aux(self) -> dict:
        return {"sorted": list(self.sorted_output)}

    def values(self) -> list:
        return [n.value for n in self.nodes]

    def __len__(self) -> int:
        return len(self.nodes)

    def is_valid(self) -> bool:
        return all(not self.compare(self.nodes[i].value, self.nodes[parent(i)].value)
                   for i in range(1, len(self.nodes)))

    def ids_with_value(self, value) -> List[str]:
        return [n.id for n in self.nodes if n.value == value]

    @property
    def _label(self) -> str:
        return "Min" if self.kind == "min" else "Max"

    # --- public operations ---

    def insert(self, value) -> Operation:
        return self._begin(f"insert {value}", lambda rec: self._insert(rec, value))

    def extract_root(self) -> Operation:
        return self._begin("extract root", self._extract_root)

    def sort(self) -> Operation:
        return self._begin("sort", self._sort)

    def toggle_type(self) -> Operation:
        return self._begin("toggle type", self._toggle_type)

    def reset(self) -> OperationResult:
        def action():
            self.nodes.clear()
            self.sorted_output.clear()
            return done("Heap Cleared.")

        return self._sync("reset", action)

    clear = reset

    def build(self, values: Sequence[float]) -> OperationResult:
        def action():
            self.nodes = [HeapNode(self._new_id(), v) for v in values]
            self.sorted_output.clear()
            self._silently(self._heapify(None))
            return done(f"Built {self._label} Heap with {len(self.nodes)} nodes.")

        return self._sync("build", action)

    # --- step generators ---

    def _swap(self, rec, i: int, j: int):
        self.nodes[i], self.nodes[j] = self.nodes[j], self.nodes[i]
        self._play("pop")
        yield self._step(rec, {self.nodes[i].id: ACTIVE, self.nodes[j].id: ACTIVE})

    def _insert(self, rec: StepRecorder, value):
        yield self._step(rec, message=f"Inserting {value}...", delay=0)
        node = HeapNode(self._new_id(), value)
        self.nodes.append(node)
        index = len(self.nodes) - 1
        yield self._step(rec, {node.id: ACTIVE}, message=f"Added {value} at end (index {index})")

        while index > 0:
            up = parent(index)
            val, parent_val = self.nodes[index].value, self.nodes[up].value
            yield self._step(rec, {self.nodes[index].id: COMPARING, self.nodes[up].id: COMPARING},
                             message=f"Comparing {val} with parent {parent_val}...")
            if not self.compare(val, parent_val):
                yield self._step(rec, message="Heap property satisfied.", delay=0)
                break
            self.message = f"{val} is {'smaller' if self.kind == 'min' else 'larger'}. Swapping."
            yield from self._swap(rec, index, up)
            index = up

        self._play("insert")
        yield self._step(rec, message=f"Inserted {value}.", delay=0)
        return done(f"Inserted {value}.", node.id)

    def _sift_down(self, rec, index: int, length: int):
        curr = index
        while True:
            best = curr
            for child in children(curr):
                if child < length:
                    yield self._step(rec, {self.nodes[best].id: COMPARING, self.nodes[child].id: COMPARING},
                                     delay=self.step_delay / 4)
                    if self.compare(self.nodes[child].value, self.nodes[best].value):
                        best = child
            if best == curr:
                return
            self.message = f"Bubbling down: swapping {self.nodes[curr].value} with {self.nodes[best].value}"
            yield from self._swap(rec, curr, best)
            curr = best

    def _pop_root(self, rec):
        root = self.nodes[0]
        last = len(self.nodes) - 1
        if last > 0:
            yield from self._swap(rec, 0, last)
        self.nodes.pop()
        self.sorted_output.append(root.value)
        yield self._step(rec, message=f"Moved {root.value} to sorted list.")
        if self.nodes:
            yield from self._sift_down(rec, 0, len(self.nodes))
        return root

    def _extract_root(self, rec: StepRecorder):
        if not self.nodes:
            yield self._step(rec, message="Heap is empty.", delay=0)
            self._play("error")
            return failed(Outcome.UNDERFLOW, "Heap is empty.")

        yield self._step(rec, {self.nodes[0].id: ACTIVE}, message=f"Extracting Root: {self.nodes[0].value}")
        root = yield from self._pop_root(rec)
        yield self._step(rec, message="Extraction complete.", delay=0)
        self._play("delete")
        return done("Extraction complete.", root.value)

    def _sort(self, rec: StepRecorder):
        if not self.nodes:
            yield self._step(rec, message="Heap is empty.", delay=0)
            return failed(Outcome.UNDERFLOW, "Heap is empty.")

        yield self._step(rec, message="Heap Sort: Extracting all elements...")
        while self.nodes:
            yield from self._pop_root(rec)
            yield self._step(rec, delay=300)
        yield self._step(rec, message="Heap Sort Complete.", delay=0)
        self._play("success")
        return done("Heap Sort Complete.", list(self.sorted_output))

    def _heapify(self, rec):
        for i in range(len(self.nodes) // 2 - 1, -1, -1):
            yield from self._sift_down(rec, i, len(self.nodes))

    def _toggle_type(self, rec: StepRecorder):
        target = "Max" if self.kind == "min" else "Min"
        yield self._step(rec, message=f"Switching to {target} Heap...", delay=0)
        self.kind = "max" if self.kind == "min" else "min"
        self.sorted_output.clear()
        if not self.nodes:
            yield self._step(rec, message=f"Switched to {self._label} Heap.", delay=0)
            return done(f"Switched to {self._label} Heap.")

        yield self._step(rec, message=f"Rebuilding as {self._label} Heap...")
        yield from self._heapify(rec)
        yield self._step(rec, message=f"Switched to {self._label} Heap.", delay=0)
        self._play("success")
        return done(f"Switched to {self._label} Heap.")
