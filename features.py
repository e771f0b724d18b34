# features.py
# The ten features the menu offers: titles, intro text, engine factories and panel actions

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from avl import AVLTree
from bst import BinarySearchTree
from convex_hull import ConvexHull
from graph import Graph
from hash_table import HashTable
from heap import Heap
from linked_list import LinkedList
from operation import Engine, Operation, OperationResult
from pathfinding import Pathfinding
from queues import MODES, Queue
from stack import Stack

Handler = Callable[[Engine, str], Union[Operation, OperationResult]]


def parse_number(text: str):
    """'12' -> 12, '2.5' -> 2.5. Raises ValueError for anything else."""
    text = text.strip()
    if not text:
        raise ValueError("Enter a value first.")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: '{text}'")
    return int(number) if number.is_integer() else number


def parse_text(text: str) -> str:
    text = text.strip()
    if not text:
        raise ValueError("Enter a value first.")
    return text


def random_values(count: int = 7, rng: Optional[random.Random] = None) -> List[int]:
    rng = rng or random.Random()
    return rng.sample(range(1, 100), count)


@dataclass
class Action:
    label: str
    handler: Handler
    needs_value: bool = False


@dataclass
class Feature:
    key: str
    title: str
    description: List[str]
    factory: Callable[..., Engine]
    actions: List[Action] = field(default_factory=list)

    def action(self, label: str) -> Action:
        for action in self.actions:
            if action.label == label:
                return action
        raise KeyError(label)

    @property
    def default_action(self) -> Optional[Action]:
        return next((a for a in self.actions if a.needs_value), None)


# --- feature specific handlers ---

def _enqueue(queue: Queue, text: str):
    value, _, priority = text.partition(",")
    if priority.strip():
        return queue.enqueue(parse_text(value), int(priority))
    return queue.enqueue(parse_text(value))


def _next_mode(queue: Queue, _text: str):
    modes = list(MODES)
    return queue.change_mode(modes[(modes.index(queue.mode) + 1) % len(modes)])


def _hash_insert(table: HashTable, text: str):
    key, sep, value = parse_text(text).partition("=")
    return table.insert(key.strip(), value.strip() if sep else key.strip())


def _hash_method(table: HashTable, _text: str):
    return table.set_method("linear_probing" if table.method == "chaining" else "chaining")


def _graph_run(algorithm: str) -> Handler:
    def handler(graph: Graph, text: str):
        start_label, _, target_label = text.strip().partition(">")
        start = graph.node_by_label(start_label.strip()) if start_label.strip() else graph.selected
        target = graph.node_by_label(target_label.strip()) if target_label.strip() else None
        return graph.run(algorithm, start, target)

    return handler


def _preset(name: str) -> Handler:
    return lambda graph, _text: graph.load_preset(name)


def _grid_run(algorithm: str) -> Handler:
    return lambda grid, _text: grid.run(algorithm)


def _hull_run(algorithm: str) -> Handler:
    return lambda hull, _text: hull.run(algorithm)


def _build_random(engine: Engine, _text: str):
    return engine.build(random_values())


FEATURES: List[Feature] = [
    Feature(
        "bst",
        "Binary Search Tree",
        [
            "Every node keeps smaller values on its left and larger values on its right.",
            "",
            "Insert walks down from the root comparing at each node.",
            "Search follows the same path and stops when it finds the value.",
            "Delete handles leaves, single children and two children",
            "(the in-order successor replaces the removed value).",
        ],
        BinarySearchTree,
        [
            Action("Insert", lambda t, s: t.insert(parse_number(s)), True),
            Action("Search", lambda t, s: t.search(parse_number(s)), True),
            Action("Delete", lambda t, s: t.delete(parse_number(s)), True),
            Action("Random", _build_random),
            Action("Clear", lambda t, _s: t.clear()),
        ],
    ),
    Feature(
        "avl",
        "AVL Tree",
        [
            "A binary search tree that keeps itself balanced.",
            "",
            "After each insert or delete the heights on the way back up are updated.",
            "When a node's balance factor leaves [-1, 1] one of four cases applies:",
            "   LL and RR need a single rotation, LR and RL need two.",
            "",
            "The stats compare the AVL height with a plain BST fed the same values.",
        ],
        AVLTree,
        [
            Action("Insert", lambda t, s: t.insert(parse_number(s)), True),
            Action("Delete", lambda t, s: t.delete(parse_number(s)), True),
            Action("Random", _build_random),
            Action("Clear", lambda t, _s: t.clear()),
        ],
    ),
    Feature(
        "linked_list",
        "Linked List",
        [
            "A chain of nodes, each pointing at the next one.",
            "",
            "Watch the head, curr, prev and next pointers move while the list",
            "is walked for tail insertion, deletion and in-place reversal.",
            "Use the timeline to step through an operation at your own pace.",
        ],
        LinkedList,
        [
            Action("Head", lambda l, s: l.insert_head(parse_number(s)), True),
            Action("Tail", lambda l, s: l.insert_tail(parse_number(s)), True),
            Action("Delete", lambda l, s: l.delete(parse_number(s)), True),
            Action("Reverse", lambda l, _s: l.reverse()),
            Action("Clear", lambda l, _s: l.clear()),
        ],
    ),
    Feature(
        "stack",
        "Stack",
        [
            "Last in, first out. Only the top is ever touched.",
            "",
            "Push onto a full stack overflows, pop from an empty one underflows.",
            "The scenarios replay browser history, a recursive factorial",
            "and a parentheses balance check.",
        ],
        Stack,
        [
            Action("Push", lambda st, s: st.push(parse_text(s)), True),
            Action("Pop", lambda st, _s: st.pop()),
            Action("Peek", lambda st, _s: st.peek()),
            Action("Clear", lambda st, _s: st.clear()),
            Action("Browser", lambda st, _s: st.scenario("browser")),
            Action("Factorial", lambda st, _s: st.scenario("recursion")),
            Action("Parens", lambda st, _s: st.scenario("parentheses")),
        ],
    ),
    Feature(
        "queue",
        "Queue",
        [
            "First in, first out, in three flavours:",
            "   simple (a growing row), circular (a ring buffer with head and tail)",
            "   and priority (lower number served first, ties in arrival order).",
            "",
            "Enqueue 'value' or 'value,priority'. Mode cycles the flavour.",
        ],
        Queue,
        [
            Action("Enqueue", _enqueue, True),
            Action("Dequeue", lambda q, _s: q.dequeue()),
            Action("Peek", lambda q, _s: q.peek()),
            Action("Mode", _next_mode),
            Action("Clear", lambda q, _s: q.clear()),
            Action("Printer", lambda q, _s: q.scenario("print")),
            Action("Restaurant", lambda q, _s: q.scenario("restaurant")),
            Action("BFS", lambda q, _s: q.scenario("bfs")),
        ],
    ),
    Feature(
        "hash_table",
        "Hash Table",
        [
            "Keys are hashed to a bucket index.",
            "",
            "Collisions are resolved by chaining or by linear probing.",
            "Once the load factor passes the limit the table doubles and rehashes.",
            "Insert 'key' or 'key=value'.",
        ],
        HashTable,
        [
            Action("Insert", _hash_insert, True),
            Action("Search", lambda h, s: h.search(parse_text(s)), True),
            Action("Delete", lambda h, s: h.delete(parse_text(s)), True),
            Action("Rehash", lambda h, _s: h.rehash()),
            Action("Method", _hash_method),
            Action("Clear", lambda h, _s: h.clear()),
        ],
    ),
    Feature(
        "heap",
        "Binary Heap",
        [
            "A complete binary tree stored in an array.",
            "",
            "Insert adds at the end and bubbles up, extract moves the last",
            "element to the root and bubbles it down.",
            "Sort extracts everything into the sorted row.",
        ],
        Heap,
        [
            Action("Insert", lambda h, s: h.insert(parse_number(s)), True),
            Action("Extract", lambda h, _s: h.extract_root()),
            Action("Sort", lambda h, _s: h.sort()),
            Action("Min/Max", lambda h, _s: h.toggle_type()),
            Action("Random", _build_random),
            Action("Clear", lambda h, _s: h.clear()),
        ],
    ),
    Feature(
        "graph",
        "Graph Traversal",
        [
            "Click empty space to add a node, click two nodes to connect them,",
            "right click a node to remove it.",
            "",
            "Select a start node (or type 'A' or 'A>F') and run BFS, DFS or Dijkstra.",
            "The side panel shows the queue, the stack or the distance table.",
        ],
        Graph,
        [
            Action("BFS", _graph_run("bfs")),
            Action("DFS", _graph_run("dfs")),
            Action("Dijkstra", _graph_run("dijkstra")),
            Action("Tree", _preset("tree")),
            Action("Cycle", _preset("cycle")),
            Action("Weighted", _preset("weighted")),
            Action("Clear", lambda g, _s: g.clear()),
        ],
    ),
    Feature(
        "pathfinding",
        "Pathfinding",
        [
            "Drag on the grid to draw walls, drag the start or finish cell to move it.",
            "",
            "Dijkstra and A* expand the cheapest cell first (A* adds the Manhattan",
            "distance to the finish). BFS floods evenly, DFS dives deep.",
            "Once a search has finished, moving an endpoint re-runs it instantly.",
        ],
        Pathfinding,
        [
            Action("Dijkstra", _grid_run("dijkstra")),
            Action("A*", _grid_run("astar")),
            Action("BFS", _grid_run("bfs")),
            Action("DFS", _grid_run("dfs")),
            Action("Maze", lambda g, _s: g.generate_maze()),
            Action("Clear Path", lambda g, _s: g.clear_path()),
            Action("Clear All", lambda g, _s: g.reset(clear_walls=True)),
        ],
    ),
    Feature(
        "convex_hull",
        "Convex Hull",
        [
            "Click to add points, right click a point to remove it.",
            "",
            "Graham scan sorts by angle around the lowest point and pops right turns.",
            "Jarvis march wraps the set like a gift, one hull edge at a time.",
            "Monotone chain builds the lower and upper halves from sorted x.",
        ],
        ConvexHull,
        [
            Action("Graham", _hull_run("graham")),
            Action("Jarvis", _hull_run("jarvis")),
            Action("Monotone", _hull_run("monotone")),
            Action("Random", lambda h, _s: h.generate_points()),
            Action("Clear", lambda h, _s: h.clear()),
        ],
    ),
]

FEATURES_BY_KEY: Dict[str, Feature] = {f.key: f for f in FEATURES}
