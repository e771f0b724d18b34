# avl.py
# AVL tree engine with rotation steps and a plain BST mirror for comparison

from __future__ import annotations

from typing import Optional, Sequence

from bst import FOUND, BinarySearchTree, TreeNode, _compare_text
from operation import Operation, OperationResult, Outcome, done, failed
from settings import INSTANT
from steps import ACTIVE, StepRecorder

IMBALANCED = "imbalanced"

ROTATE_DELAY = 600
IMBALANCE_DELAY = 800
DESCEND_DELAY = 200


class AVLTree(BinarySearchTree):
    feature = "avl"
    context = "AVL Tree. Self-balancing BST with rotations (LL, RR, LR, RL)."

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.mirror = BinarySearchTree(pacing=INSTANT)
        self.rotations = 0
        self.message = "AVL Tree Ready"
        # Flags raised by the recursive generators
        self._inserted: Optional[str] = None
        self._duplicate = False
        self._missing = False

    # --- heights ---

    def _h(self, nid: Optional[str]) -> int:
        return self.nodes[nid].height if nid is not None else 0

    def balance(self, nid: Optional[str]) -> int:
        if nid is None:
            return 0
        node = self.nodes[nid]
        return self._h(node.left) - self._h(node.right)

    def _update_height(self, node: TreeNode):
        node.height = 1 + max(self._h(node.left), self._h(node.right))

    def height(self) -> int:
        return self._h(self.root)

    # --- state ---

    def _node_view(self, node: TreeNode) -> dict:
        view = super()._node_view(node)
        view["height"] = node.height
        view["balance"] = self.balance(node.id)
        return view

    @property
    def stats(self) -> dict:
        return {
            "avl_height": self.height(),
            "bst_height": self.mirror.height(),
            "avl_rotations": self.rotations,
        }

    def aux(self) -> dict:
        return self.stats

    # --- public operations ---

    def insert(self, value) -> Operation:
        self._sync_mirror(lambda: self.mirror.place(value))
        return self._begin(f"insert {value}", lambda rec: self._insert(rec, value))

    def delete(self, value) -> Operation:
        self._sync_mirror(lambda: self.mirror.discard(value))
        return self._begin(f"delete {value}", lambda rec: self._delete(rec, value))

    remove = delete

    def _sync_mirror(self, action):
        # The mirror only follows operations that will actually run
        if not self.control.busy and self.control.alive:
            action()

    def reset(self) -> OperationResult:
        def action():
            self.nodes.clear()
            self.root = None
            self.mirror.nodes.clear()
            self.mirror.root = None
            self.rotations = 0
            return done("Tree Cleared")

        return self._sync("reset", action)

    clear = reset

    def build(self, values: Sequence[float]) -> OperationResult:
        def action():
            self.nodes.clear()
            self.root = None
            self.mirror.nodes.clear()
            self.mirror.root = None
            self.rotations = 0
            for value in values:
                self.place(value)
                self.mirror.place(value)
            return done(f"Built tree with {len(self.nodes)} nodes.")

        return self._sync("build", action)

    def place(self, value) -> Optional[str]:
        result = self._silently(self._insert(None, value))
        return result.value if result.ok else None

    def discard(self, value) -> bool:
        return self._silently(self._delete(None, value)).ok

    # --- insert ---

    def _insert(self, rec: Optional[StepRecorder], value):
        self._inserted = None
        self._duplicate = False
        yield self._step(rec, message=f"Inserting {value}...")
        if self.root is None:
            yield self._step(rec, message=f"Tree is empty. Setting {value} as root.")

        self.root = yield from self._insert_at(rec, self.root, value)
        if self._duplicate:
            self._play("error")
            return failed(Outcome.DUPLICATE, f"{value} already exists.")
        if self._inserted is not None and self._inserted == self.root and self._newly_linked(self.root):
            yield self._step(rec, {self.root: FOUND}, message=f"Inserted {value}")
            self._play("insert")

        yield self._step(rec, message="Balanced.")
        return done("Balanced.", self._inserted)

    def _insert_at(self, rec, nid: Optional[str], value):
        if nid is None:
            node = self._make_node(value)
            self._inserted = node.id
            return node.id

        node = self.nodes[nid]
        if value == node.value:
            self._duplicate = True
            yield self._step(rec, {nid: FOUND}, message=f"{value} already exists.")
            return nid

        yield self._step(rec, {nid: ACTIVE}, {"curr": nid}, _compare_text(value, node.value), delay=DESCEND_DELAY)
        side = "left" if value < node.value else "right"
        child = yield from self._insert_at(rec, getattr(node, side), value)
        setattr(node, side, child)
        if self._duplicate:
            return nid
        if child == self._inserted and getattr(node, side) == child and self._newly_linked(child):
            yield self._step(rec, {child: FOUND}, message=f"Inserted {value}")
            self._play("insert")

        self._update_height(node)
        return (yield from self._rebalance(rec, nid))

    def _newly_linked(self, nid: str) -> bool:
        # A fresh leaf still has height 1 and no children
        node = self.nodes[nid]
        return node.left is None and node.right is None and node.height == 1

    # --- delete ---

    def _delete(self, rec: Optional[StepRecorder], value):
        self._missing = False
        yield self._step(rec, message=f"Searching for {value} to delete...")
        self.root = yield from self._delete_at(rec, self.root, value)
        if self._missing:
            yield self._step(rec, message=f"Node {value} not found.")
            self._play("error")
            return failed(Outcome.NOT_FOUND, f"Node {value} not found.")
        yield self._step(rec, message=f"Deleted {value}. Balanced.")
        self._play("delete")
        return done(f"Deleted {value}.")

    def _delete_at(self, rec, nid: Optional[str], value):
        if nid is None:
            self._missing = True
            return None

        node = self.nodes[nid]
        yield self._step(rec, {nid: ACTIVE}, {"curr": nid}, delay=DESCEND_DELAY)
        if value < node.value:
            node.left = yield from self._delete_at(rec, node.left, value)
        elif value > node.value:
            node.right = yield from self._delete_at(rec, node.right, value)
        elif node.left is None or node.right is None:
            child = node.left if node.left is not None else node.right
            del self.nodes[nid]
            return child
        else:
            succ = self.nodes[node.right]
            while succ.left is not None:
                succ = self.nodes[succ.left]
            yield self._step(rec, {nid: IMBALANCED, succ.id: FOUND}, {"succ": succ.id},
                             f"In-order successor of {node.value} is {succ.value}.")
            node.value = succ.value
            node.right = yield from self._delete_at(rec, node.right, succ.value)

        if self._missing:
            return nid
        self._update_height(node)
        return (yield from self._rebalance(rec, nid))

    # --- balancing ---

    def _rebalance(self, rec, nid: str):
        node = self.nodes[nid]
        balance = self.balance(nid)

        if balance > 1:
            if self.balance(node.left) >= 0:
                yield self._step(rec, {nid: IMBALANCED},
                                 message=f"Imbalance at {node.value} (Balance: {balance}). Needs Right Rotation.",
                                 delay=IMBALANCE_DELAY)
                self._play("error")
                return (yield from self._rotate_right(rec, nid))
            yield self._step(rec, {nid: IMBALANCED},
                             message=f"Imbalance at {node.value} (Left-Right Case). Rotating Left child first.",
                             delay=IMBALANCE_DELAY)
            self._play("error")
            node.left = yield from self._rotate_left(rec, node.left)
            yield self._step(rec, {nid: IMBALANCED, node.left: ACTIVE}, delay=ROTATE_DELAY)
            return (yield from self._rotate_right(rec, nid))

        if balance < -1:
            if self.balance(node.right) <= 0:
                yield self._step(rec, {nid: IMBALANCED},
                                 message=f"Imbalance at {node.value} (Balance: {balance}). Needs Left Rotation.",
                                 delay=IMBALANCE_DELAY)
                self._play("error")
                return (yield from self._rotate_left(rec, nid))
            yield self._step(rec, {nid: IMBALANCED},
                             message=f"Imbalance at {node.value} (Right-Left Case). Rotating Right child first.",
                             delay=IMBALANCE_DELAY)
            self._play("error")
            node.right = yield from self._rotate_right(rec, node.right)
            yield self._step(rec, {nid: IMBALANCED, node.right: ACTIVE}, delay=ROTATE_DELAY)
            return (yield from self._rotate_left(rec, nid))

        return nid

    def _rotate_right(self, rec, yid: str):
        y = self.nodes[yid]
        x = self.nodes[y.left]
        yield self._step(rec, {yid: ACTIVE, x.id: ACTIVE},
                         message=f"Performing Right Rotation on {y.value}...", delay=ROTATE_DELAY)
        y.left = x.right
        x.right = yid
        self._update_height(y)
        self._update_height(x)
        self.rotations += 1
        self._play("pop")
        return x.id

    def _rotate_left(self, rec, xid: str):
        x = self.nodes[xid]
        y = self.nodes[x.right]
        yield self._step(rec, {xid: ACTIVE, y.id: ACTIVE},
                         message=f"Performing Left Rotation on {x.value}...", delay=ROTATE_DELAY)
        x.right = y.left
        y.left = xid
        self._update_height(x)
        self._update_height(y)
        self.rotations += 1
        self._play("pop")
        return y.id
