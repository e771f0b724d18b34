# bst.py
# Binary search tree engine (arena of nodes addressed by id)

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from operation import Engine, Operation, OperationResult, Outcome, done, failed
from steps import ACTIVE, IdSource, StepRecorder

FOUND = "found"
MODIFYING = "modifying"


@dataclass
class TreeNode:
    id: str
    value: float
    left: Optional[str] = None
    right: Optional[str] = None
    height: int = 1


def _compare_text(value, other) -> str:
    if value < other:
        return f"{value} < {other}. Going Left."
    return f"{value} > {other}. Going Right."


class BinarySearchTree(Engine):
    feature = "bst"
    context = "Binary Search Tree. Insertion, search, deletion, in-order successor."

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.nodes: Dict[str, TreeNode] = {}
        self.root: Optional[str] = None
        self._new_id = IdSource("t")
        self.message = "Ready to visualize"

    # --- state ---

    def _node_view(self, node: TreeNode) -> dict:
        return {"value": node.value, "left": node.left, "right": node.right}

    def snapshot(self) -> dict:
        return {
            "root": self.root,
            "nodes": {nid: self._node_view(node) for nid, node in self.nodes.items()},
        }

    def _make_node(self, value) -> TreeNode:
        node = TreeNode(self._new_id(), value)
        self.nodes[node.id] = node
        return node

    def in_order(self) -> List[float]:
        values: List[float] = []

        def walk(nid: Optional[str]):
            if nid is None:
                return
            node = self.nodes[nid]
            walk(node.left)
            values.append(node.value)
            walk(node.right)

        walk(self.root)
        return values

    def height(self) -> int:
        return self._subtree_height(self.root)

    def _subtree_height(self, nid: Optional[str]) -> int:
        if nid is None:
            return 0
        node = self.nodes[nid]
        return 1 + max(self._subtree_height(node.left), self._subtree_height(node.right))

    def contains(self, value) -> bool:
        nid = self.root
        while nid is not None:
            node = self.nodes[nid]
            if value == node.value:
                return True
            nid = node.left if value < node.value else node.right
        return False

    def ids_with_value(self, value) -> List[str]:
        return [nid for nid, node in self.nodes.items() if node.value == value]

    # --- public operations ---

    def insert(self, value) -> Operation:
        return self._begin(f"insert {value}", lambda rec: self._insert(rec, value))

    def search(self, value) -> Operation:
        return self._begin(f"search {value}", lambda rec: self._search(rec, value))

    def delete(self, value) -> Operation:
        return self._begin(f"delete {value}", lambda rec: self._delete(rec, value))

    remove = delete

    def clear(self) -> OperationResult:
        def action():
            self.nodes.clear()
            self.root = None
            return done("Tree cleared.")

        return self._sync("clear", action)

    def build(self, values: Sequence[float]) -> OperationResult:
        def action():
            self.nodes.clear()
            self.root = None
            for value in values:
                self.place(value)
            return done(f"Built tree with {len(self.nodes)} nodes.")

        return self._sync("build", action)

    def place(self, value) -> Optional[str]:
        """Unanimated insert. Returns the new node id, or None for a duplicate."""
        result = self._silently(self._insert(None, value))
        return result.value if result.ok else None

    def discard(self, value) -> bool:
        """Unanimated delete."""
        return self._silently(self._delete(None, value)).ok

    # --- step generators ---

    def _insert(self, rec: Optional[StepRecorder], value):
        yield self._step(rec, message=f"Inserting {value}...")

        if self.root is None:
            yield self._step(rec, message=f"Tree is empty. Setting {value} as root.")
            node = self._make_node(value)
            self.root = node.id
            yield self._step(rec, {node.id: FOUND}, message=f"Inserted {value}.")
            self._play("insert")
            return done(f"Inserted {value}.", node.id)

        current = self.nodes[self.root]
        while True:
            if value == current.value:
                yield self._step(rec, {current.id: FOUND}, {"curr": current.id}, f"{value} already exists.")
                self._play("error")
                return failed(Outcome.DUPLICATE, f"{value} already exists.")

            yield self._step(rec, {current.id: ACTIVE}, {"curr": current.id}, _compare_text(value, current.value))
            side = "left" if value < current.value else "right"
            child = getattr(current, side)
            if child is None:
                node = self._make_node(value)
                setattr(current, side, node.id)
                break
            current = self.nodes[child]

        yield self._step(rec, {node.id: FOUND}, message=f"Inserted {value}.")
        self._play("insert")
        return done(f"Inserted {value}.", node.id)

    def _search(self, rec: Optional[StepRecorder], value):
        yield self._step(rec, message=f"Searching for {value}...")

        nid = self.root
        while nid is not None:
            node = self.nodes[nid]
            if value == node.value:
                yield self._step(rec, {nid: FOUND}, {"curr": nid}, f"Found {value}!")
                self._play("success")
                return done(f"Found {value}!", nid)
            yield self._step(rec, {nid: ACTIVE}, {"curr": nid}, _compare_text(value, node.value))
            nid = node.left if value < node.value else node.right

        yield self._step(rec, message=f"{value} not found in the tree.")
        self._play("error")
        return failed(Outcome.NOT_FOUND, f"{value} not found in the tree.")

    def _delete(self, rec: Optional[StepRecorder], value):
        yield self._step(rec, message=f"Searching for {value} to delete...")

        parent: Optional[TreeNode] = None
        nid = self.root
        while nid is not None:
            node = self.nodes[nid]
            yield self._step(rec, {nid: ACTIVE}, {"curr": nid})
            if value == node.value:
                break
            parent = node
            nid = node.left if value < node.value else node.right

        if nid is None:
            yield self._step(rec, message=f"Node {value} not found.")
            self._play("error")
            return failed(Outcome.NOT_FOUND, f"Node {value} not found.")

        node = self.nodes[nid]
        yield self._step(rec, {nid: MODIFYING}, {"curr": nid}, f"Found {value}. Deleting...")

        if node.left is not None and node.right is not None:
            succ = self.nodes[node.right]
            yield self._step(rec, {nid: MODIFYING, succ.id: ACTIVE}, {"succ": succ.id},
                             "Two children: looking for the minimum of the right subtree.")
            while succ.left is not None:
                succ = self.nodes[succ.left]
                yield self._step(rec, {nid: MODIFYING, succ.id: ACTIVE}, {"succ": succ.id})
            yield self._step(rec, {nid: MODIFYING, succ.id: FOUND}, {"succ": succ.id},
                             f"In-order successor is {succ.value}. Copying it up.")
            node.value = succ.value
            node.right = self._delete_node(node.right, succ.value)
            yield self._step(rec, {nid: FOUND}, message=f"Replaced {value} with {node.value} and removed the successor.")
        else:
            child = node.left if node.left is not None else node.right
            if parent is None:
                self.root = child
            elif parent.left == nid:
                parent.left = child
            else:
                parent.right = child
            del self.nodes[nid]
            yield self._step(rec, message=f"Deleted {value}.")

        self._play("delete")
        return done(f"Deleted {value}.")

    def _delete_node(self, nid: Optional[str], value) -> Optional[str]:
        """Recursive delete; returns the new root id of the subtree."""
        if nid is None:
            return None
        node = self.nodes[nid]
        if value < node.value:
            node.left = self._delete_node(node.left, value)
            return nid
        if value > node.value:
            node.right = self._delete_node(node.right, value)
            return nid

        if node.left is None or node.right is None:
            child = node.left if node.left is not None else node.right
            del self.nodes[nid]
            return child

        succ = self.nodes[node.right]
        while succ.left is not None:
            succ = self.nodes[succ.left]
        node.value = succ.value
        node.right = self._delete_node(node.right, succ.value)
        return nid
