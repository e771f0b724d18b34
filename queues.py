# queues.py
# Queue engine: simple FIFO, circular buffer and priority disciplines

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from operation import Engine, Operation, OperationResult, Outcome, done, failed
from settings import DEFAULT_PRIORITY, QUEUE_CAPACITY
from steps import ACTIVE, IdSource, StepRecorder

ENQUEUEING = "enqueueing"
DEQUEUEING = "dequeueing"
PEEK = "peek"

MODES = {
    "simple": "Simple Queue (FIFO)",
    "circular": "Circular Queue",
    "priority": "Priority Queue",
}
KINDS = ("default", "job", "person", "process")


@dataclass
class QueueItem:
    id: str
    value: object
    priority: int = DEFAULT_PRIORITY
    kind: str = "default"


class Queue(Engine):
    """
    One engine, three disciplines selected by mode.

    simple and priority keep an ordered list (priority re-sorts by ascending
    priority on every enqueue, stable for equal priorities). circular keeps a
    fixed buffer with head/tail indices; head == -1 means empty and the
    buffer is full when the slot after tail is head.
    """

    feature = "queue"
    context = "Queue (FIFO). Simple, circular buffer and priority modes."

    def __init__(self, capacity: int = QUEUE_CAPACITY, mode: str = "simple", **kwargs):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if mode not in MODES:
            raise ValueError(f"unknown queue mode: {mode}")
        super().__init__(**kwargs)
        self.capacity = capacity
        self.mode = mode
        self._new_id = IdSource("q")
        self.items: List[QueueItem] = []
        self.buffer: List[Optional[QueueItem]] = [None] * capacity
        self.head = -1
        self.tail = -1
        self.message = "Ready to Queue"

    # --- state ---

    def snapshot(self) -> dict:
        def view(item):
            if item is None:
                return None
            return {"id": item.id, "value": item.value, "priority": item.priority, "kind": item.kind}

        if self.mode == "circular":
            return {
                "mode": self.mode,
                "capacity": self.capacity,
                "buffer": [view(i) for i in self.buffer],
                "head": self.head,
                "tail": self.tail,
            }
        return {"mode": self.mode, "capacity": self.capacity, "items": [view(i) for i in self.items]}

    def aux(self) -> dict:
        return {"size": len(self), "mode": self.mode}

    def __len__(self) -> int:
        if self.mode != "circular":
            return len(self.items)
        if self.head == -1:
            return 0
        return (self.tail - self.head) % self.capacity + 1

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def is_full(self) -> bool:
        if self.mode == "circular":
            return self.head != -1 and (self.tail + 1) % self.capacity == self.head
        return len(self.items) >= self.capacity

    def values(self) -> list:
        """Values in service order, front first."""
        if self.mode != "circular":
            return [i.value for i in self.items]
        return [self.buffer[(self.head + k) % self.capacity].value for k in range(len(self))]

    def front(self) -> Optional[QueueItem]:
        if self.is_empty:
            return None
        return self.buffer[self.head] if self.mode == "circular" else self.items[0]

    def ids_with_value(self, value) -> List[str]:
        pool = self.buffer if self.mode == "circular" else self.items
        return [i.id for i in pool if i is not None and str(i.value) == str(value)]

    # --- public operations ---

    def change_mode(self, mode: str) -> OperationResult:
        if mode not in MODES:
            raise ValueError(f"unknown queue mode: {mode}")

        def action():
            self.mode = mode
            self._empty()
            return done(f"Switched to {MODES[mode]}")

        return self._sync("change mode", action)

    def enqueue(self, value, priority: int = DEFAULT_PRIORITY, kind: str = "default") -> Operation:
        return self._begin(f"enqueue {value}", lambda rec: self._enqueue(rec, value, priority, kind))

    def dequeue(self) -> Operation:
        return self._begin("dequeue", self._dequeue)

    def peek(self) -> Operation:
        return self._begin("peek", self._peek)

    def clear(self) -> OperationResult:
        def action():
            self._empty()
            return done("Queue cleared.")

        return self._sync("clear", action)

    def build(self, values: Sequence) -> OperationResult:
        def action():
            self._empty()
            for value in list(values)[: self.capacity]:
                self._place(QueueItem(self._new_id(), value))
            return done(f"Built queue with {len(self)} items.")

        return self._sync("build", action)

    def scenario(self, name: str) -> Operation:
        scenarios = {
            "print": self._print_spooler,
            "restaurant": self._restaurant,
            "bfs": self._bfs_preview,
        }
        if name not in scenarios:
            raise ValueError(f"unknown scenario: {name}")
        return self._begin(f"scenario {name}", scenarios[name])

    # --- structure ---

    def _empty(self):
        self.items = []
        self.buffer = [None] * self.capacity
        self.head = -1
        self.tail = -1

    def _place(self, item: QueueItem):
        if self.mode == "circular":
            if self.head == -1:
                self.head = self.tail = 0
            else:
                self.tail = (self.tail + 1) % self.capacity
            self.buffer[self.tail] = item
        elif self.mode == "priority":
            self.items.append(item)
            self.items.sort(key=lambda i: i.priority)
        else:
            self.items.append(item)

    def _take(self) -> QueueItem:
        if self.mode != "circular":
            return self.items.pop(0)
        item = self.buffer[self.head]
        self.buffer[self.head] = None
        if self.head == self.tail:
            self.head = self.tail = -1
        else:
            self.head = (self.head + 1) % self.capacity
        return item

    def _pointers(self) -> dict:
        front = self.front()
        if self.mode == "circular":
            return {"head": self.head, "tail": self.tail, "front": front.id if front else None}
        return {"front": front.id if front else None}

    # --- step generators ---

    def _enqueue(self, rec: StepRecorder, value, priority: int = DEFAULT_PRIORITY, kind: str = "default"):
        yield self._step(rec, pointers=self._pointers(), message=f'Enqueueing "{value}"...', delay=0)
        if self.is_full:
            msg = "Queue Overflow! Buffer is full." if self.mode == "circular" else "Queue Overflow! Max capacity reached."
            yield self._step(rec, pointers=self._pointers(), message=msg, delay=0)
            self._play("error")
            return failed(Outcome.OVERFLOW, msg)

        item = QueueItem(self._new_id(), value, priority, kind)
        self._place(item)
        self._play("insert")
        yield self._step(rec, {item.id: ENQUEUEING}, self._pointers())
        yield self._step(rec, {item.id: ACTIVE}, self._pointers(), f'Enqueued "{value}".', delay=0)
        return done(f'Enqueued "{value}".', item)

    def _dequeue(self, rec: StepRecorder):
        front = self.front()
        if front is None:
            yield self._step(rec, pointers=self._pointers(), message="Queue Underflow! Queue is empty.", delay=0)
            self._play("error")
            return failed(Outcome.UNDERFLOW, "Queue Underflow! Queue is empty.")

        yield self._step(rec, {front.id: DEQUEUEING}, self._pointers(), f'Dequeueing "{front.value}"...',
                         delay=self.step_delay / 2)
        item = self._take()
        self._play("pop")
        yield self._step(rec, pointers=self._pointers(), message=f'Dequeued "{item.value}".', delay=self.step_delay / 2)
        return done(f'Dequeued "{item.value}".', item)

    def _peek(self, rec: StepRecorder):
        front = self.front()
        if front is None:
            yield self._step(rec, message="Queue is empty.", delay=0)
            return failed(Outcome.UNDERFLOW, "Queue is empty.")

        if self.mode == "circular":
            msg = f'Front is "{front.value}" at index {self.head}'
        else:
            msg = f'Front is "{front.value}"'
        yield self._step(rec, {front.id: PEEK}, self._pointers(), msg, delay=1500)
        yield self._step(rec, pointers=self._pointers(), delay=0)
        return done(msg, front)

    def _switch(self, rec, mode: str):
        yield self._step(rec, pointers=self._pointers(), message=f"Switching to {MODES[mode]}...", delay=0)
        self.mode = mode
        self._empty()
        yield self._step(rec, message=f"Switched to {MODES[mode]}", delay=300)

    def _print_spooler(self, rec: StepRecorder):
        yield from self._switch(rec, "simple")
        for doc in ("Report.pdf", "Image.png", "Thesis.docx", "Ticket.pdf", "Graph.svg"):
            result = yield from self._enqueue(rec, doc, DEFAULT_PRIORITY, "job")
            if not result:
                break
            yield self._step(rec, delay=200)

        yield self._step(rec, delay=1000)
        while not self.is_empty:
            yield self._step(rec, message="Printer Processing...", delay=0)
            yield from self._dequeue(rec)
            yield self._step(rec, delay=500)
        yield self._step(rec, message="All print jobs finished.", delay=0)
        return done("All print jobs finished.")

    def _restaurant(self, rec: StepRecorder):
        yield from self._switch(rec, "priority")
        yield self._step(rec, message="Opening Restaurant Queue...", delay=0)
        guests = (("Walk-in Group", 3), ("VIP Couple", 1), ("Reservation 7pm", 2), ("Solo Diner", 3))
        for name, priority in guests:
            yield from self._enqueue(rec, name, priority, "person")

        yield self._step(rec, message="Seating customers based on Priority...", delay=1000)
        seated = []
        while not self.is_empty:
            result = yield from self._dequeue(rec)
            seated.append(result.value.value)
            yield self._step(rec, delay=500)
        yield self._step(rec, message="All customers seated.", delay=0)
        return done("All customers seated.", seated)

    def _bfs_preview(self, rec: StepRecorder):
        yield from self._switch(rec, "simple")
        yield self._step(rec, message="BFS: Start at Node A", delay=0)
        yield from self._enqueue(rec, "Node A", DEFAULT_PRIORITY, "process")
        yield self._step(rec, delay=800)

        visited = []
        result = yield from self._dequeue(rec)
        visited.append(result.value.value)
        yield self._step(rec, message=f"Visited {result.value.value}. Enqueueing neighbors B & C", delay=800)
        yield from self._enqueue(rec, "Node B", DEFAULT_PRIORITY, "process")
        yield from self._enqueue(rec, "Node C", DEFAULT_PRIORITY, "process")
        yield self._step(rec, delay=800)

        result = yield from self._dequeue(rec)
        visited.append(result.value.value)
        yield self._step(rec, message=f"Visited {result.value.value}. Enqueueing neighbor D", delay=0)
        yield from self._enqueue(rec, "Node D", DEFAULT_PRIORITY, "process")
        yield self._step(rec, delay=800)

        while not self.is_empty:
            result = yield from self._dequeue(rec)
            visited.append(result.value.value)
        yield self._step(rec, message="Graph Traversal Complete.", delay=0)
        return done("Graph Traversal Complete.", visited)
