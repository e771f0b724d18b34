# linked_list.py
# Singly linked list engine; every operation is precomputed into a timeline

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from operation import Engine, OperationResult, Outcome, done, failed
from steps import IdSource, StepRecorder

NEW = "new"


@dataclass
class ListNode:
    id: str
    value: float
    next: Optional[str] = None


@dataclass
class ListState:
    nodes: Dict[str, ListNode] = field(default_factory=dict)
    head: Optional[str] = None

    def clone(self) -> "ListState":
        return copy.deepcopy(self)

    def view(self) -> dict:
        return {
            "head": self.head,
            "nodes": {nid: {"value": n.value, "next": n.next} for nid, n in self.nodes.items()},
        }

    def values(self) -> List[float]:
        out = []
        nid = self.head
        while nid is not None:
            node = self.nodes[nid]
            out.append(node.value)
            nid = node.next
        return out

    def order(self) -> List[str]:
        out = []
        nid = self.head
        while nid is not None:
            out.append(nid)
            nid = self.nodes[nid].next
        return out


class LinkedList(Engine):
    feature = "linked_list"
    context = "Singly Linked List. Head/tail insertion, deletion by value, in-place reversal."

    def __init__(self, values: Sequence[float] = (10, 20, 30), **kwargs):
        super().__init__(**kwargs)
        self._new_id = IdSource("n")
        self.list = ListState()
        self._fill(self.list, values)

    def _fill(self, state: ListState, values: Sequence[float]):
        prev = None
        for value in values:
            node = ListNode(self._new_id(), value)
            state.nodes[node.id] = node
            if prev is None:
                state.head = node.id
            else:
                prev.next = node.id
            prev = node

    # --- state ---

    def snapshot(self) -> dict:
        return self.list.view()

    def values(self) -> List[float]:
        return self.list.values()

    def __len__(self) -> int:
        return len(self.list.nodes)

    def ids_with_value(self, value) -> List[str]:
        return [nid for nid, node in self.list.nodes.items() if node.value == value]

    def idle_step(self):
        rec = StepRecorder()
        return rec.record(self.snapshot(), None, {"head": self.list.head}, self.message)

    # --- operations ---

    def _run(self, name: str, algorithm) -> OperationResult:
        """Runs algorithm(rec, work) on a clone, wrapped in Start/Complete steps, then commits."""

        def factory(rec: StepRecorder):
            work = self.list.clone()
            self._record(rec, work, message="Start")
            result = yield from algorithm(rec, work)
            self._record(rec, work, message="Complete")
            self.list = work
            return result

        return self._precompute(name, factory)

    def _record(self, rec, work: ListState, highlights=None, pointers=None, message=""):
        if pointers is None:
            pointers = {"head": work.head}
        return self._step(rec, highlights, pointers, message, state=work.view())

    def insert_head(self, value) -> OperationResult:
        return self._run(f"insert head {value}", lambda rec, work: self._insert_head(rec, work, value))

    def insert_tail(self, value) -> OperationResult:
        return self._run(f"insert tail {value}", lambda rec, work: self._insert_tail(rec, work, value))

    def delete(self, value) -> OperationResult:
        return self._run(f"delete {value}", lambda rec, work: self._delete(rec, work, value))

    remove = delete

    def reverse(self) -> OperationResult:
        return self._run("reverse", self._reverse)

    def clear(self) -> OperationResult:
        def action():
            self.list = ListState()
            return done("List cleared.")

        return self._sync("clear", action)

    def build(self, values: Sequence[float]) -> OperationResult:
        def action():
            self.list = ListState()
            self._fill(self.list, values)
            return done(f"Built list with {len(values)} nodes.")

        return self._sync("build", action)

    # --- step generators ---

    def _insert_head(self, rec, work: ListState, value):
        node = ListNode(self._new_id(), value)
        work.nodes[node.id] = node
        yield self._record(rec, work, [node.id], {"head": work.head, NEW: node.id}, f"Create new node {value}")

        node.next = work.head
        yield self._record(rec, work, [node.id], {"head": work.head, NEW: node.id}, "Point new node to current head")

        work.head = node.id
        yield self._record(rec, work, [node.id], {"head": work.head}, "Update Head pointer")
        self._play("insert")
        return done(f"Inserted {value} at head.", node.id)

    def _insert_tail(self, rec, work: ListState, value):
        node = ListNode(self._new_id(), value)
        work.nodes[node.id] = node

        if work.head is None:
            work.head = node.id
            yield self._record(rec, work, [node.id], {"head": node.id}, "List empty, new node is Head")
            self._play("insert")
            return done(f"Inserted {value} at tail.", node.id)

        curr = work.nodes[work.head]
        yield self._record(rec, work, [curr.id], {"head": work.head, "curr": curr.id}, "Start at Head")
        while curr.next is not None:
            curr = work.nodes[curr.next]
            yield self._record(rec, work, [curr.id], {"head": work.head, "curr": curr.id}, "Traverse to next node")

        curr.next = node.id
        yield self._record(rec, work, [curr.id, node.id], {"head": work.head, "curr": curr.id},
                           "Link last node to new node")
        self._play("insert")
        return done(f"Inserted {value} at tail.", node.id)

    def _delete(self, rec, work: ListState, value):
        if work.head is None:
            yield self._record(rec, work, pointers={}, message="List is empty")
            self._play("error")
            return failed(Outcome.NOT_FOUND, "List is empty")

        curr: Optional[ListNode] = work.nodes[work.head]
        prev: Optional[ListNode] = None
        yield self._record(rec, work, [curr.id], {"head": work.head, "curr": curr.id}, f"Searching for {value}...")

        if curr.value == value:
            yield self._record(rec, work, [curr.id], {"head": work.head, "curr": curr.id}, f"Found {value} at Head")
            work.head = curr.next
            del work.nodes[curr.id]
            yield self._record(rec, work, message="Updated Head pointer")
            self._play("delete")
            return done(f"Deleted {value}.")

        while curr is not None:
            if curr.value == value:
                pointers = {"head": work.head, "prev": prev.id, "curr": curr.id}
                yield self._record(rec, work, [curr.id], pointers, f"Found {value}")
                prev.next = curr.next
                yield self._record(rec, work, [prev.id, curr.id], pointers, "Update previous node's next pointer")
                del work.nodes[curr.id]
                yield self._record(rec, work, message="Remove node from memory")
                self._play("delete")
                return done(f"Deleted {value}.")

            prev = curr
            curr = work.nodes[curr.next] if curr.next is not None else None
            if curr is not None:
                yield self._record(rec, work, [curr.id], {"head": work.head, "prev": prev.id, "curr": curr.id},
                                   "Traversing...")

        yield self._record(rec, work, message=f"Value {value} not found")
        self._play("error")
        return failed(Outcome.NOT_FOUND, f"Value {value} not found")

    def _reverse(self, rec, work: ListState):
        prev: Optional[str] = None
        curr: Optional[str] = work.head
        yield self._record(rec, work, pointers={"head": work.head, "prev": None, "curr": curr},
                           message="Initialize pointers")

        while curr is not None:
            node = work.nodes[curr]
            nxt = node.next
            yield self._record(rec, work, [curr], {"prev": prev, "curr": curr, "next": nxt}, "Save next node")

            node.next = prev
            yield self._record(rec, work, [curr], {"prev": prev, "curr": curr, "next": nxt},
                               "Reverse pointer: Curr -> Prev")

            prev, curr = curr, nxt
            yield self._record(rec, work, pointers={"prev": prev, "curr": curr}, message="Shift pointers forward")

        work.head = prev
        yield self._record(rec, work, message="Update Head to last node")
        self._play("success")
        return done("List reversed.")
