# layout.py
# Turns a recorded Step into positioned elements and connections on the logical canvas

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from settings import CANVAS_HEIGHT, CANVAS_WIDTH, HULL_HEIGHT, HULL_WIDTH
from steps import Step

DEFAULT = "default"
HIGHLIGHTED = "highlighted"

TREE_TOP = 50
TREE_LEVEL_GAP = 80
AVL_MIN_OFFSET = 40
HEAP_TOP = 60
HEAP_LEVEL_GAP = 80
LIST_LEFT = 80
LIST_GAP = 140
STACK_SLOT_HEIGHT = 45
QUEUE_GAP = 100
RING_RADIUS = 200
BUCKET_LEFT = 60
CHAIN_GAP = 110


@dataclass
class PlacedElement:
    id: str
    x: float
    y: float
    label: str
    state: str = DEFAULT
    detail: str = ""


@dataclass
class Connection:
    x1: float
    y1: float
    x2: float
    y2: float
    state: str = DEFAULT
    label: str = ""


@dataclass
class Annotation:
    text: str
    x: float
    y: float


@dataclass
class Frame:
    elements: List[PlacedElement] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    width: float = CANVAS_WIDTH
    height: float = CANVAS_HEIGHT
    cell_size: float = 0.0

    def element(self, element_id: str) -> Optional[PlacedElement]:
        for el in self.elements:
            if el.id == element_id:
                return el
        return None


def _fmt(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class _Builder:
    """Collects elements while resolving roles from the step and an optional overlay."""

    def __init__(self, step: Step, overlay: Optional[Mapping[str, str]]):
        self.step = step
        self.overlay = overlay or {}
        self.frame = Frame()
        self.positions: Dict[str, Tuple[float, float]] = {}

    def role(self, element_id: str, base: str = DEFAULT) -> str:
        return self.overlay.get(element_id) or self.step.role_of(element_id) or base

    def place(self, element_id: str, x: float, y: float, label, base: str = DEFAULT, detail: str = ""):
        self.positions[element_id] = (x, y)
        self.frame.elements.append(PlacedElement(element_id, x, y, _fmt(label), self.role(element_id, base), detail))

    def connect(self, a: str, b: str, state: str = DEFAULT, label: str = ""):
        if a in self.positions and b in self.positions:
            (x1, y1), (x2, y2) = self.positions[a], self.positions[b]
            self.frame.connections.append(Connection(x1, y1, x2, y2, state, label))

    def pointers(self, dy: float = -50, resolve: Callable[[object], Optional[str]] = None):
        stacked: Dict[str, int] = {}
        for name, target in self.step.pointers.items():
            if resolve is not None:
                target = resolve(target)
            if target is None or target not in self.positions:
                continue
            x, y = self.positions[target]
            shift = stacked.get(target, 0)
            stacked[target] = shift + 1
            self.frame.annotations.append(Annotation(name, x, y + dy - shift * 18))


# --- trees ---

def layout_tree(step: Step, overlay=None, min_offset: float = 0) -> Frame:
    b = _Builder(step, overlay)
    state = step.state
    nodes = state["nodes"]

    def place(nid, x, y, level):
        if nid is None:
            return
        node = nodes[nid]
        detail = ""
        if "balance" in node:
            detail = f"h{node['height']} b{node['balance']}"
        b.place(nid, x, y, node["value"], detail=detail)
        offset = max(CANVAS_WIDTH / 2 ** (level + 2), min_offset)
        for child, dx in ((node["left"], -offset), (node["right"], offset)):
            if child is not None:
                place(child, x + dx, y + TREE_LEVEL_GAP, level + 1)
                b.connect(nid, child)

    place(state["root"], CANVAS_WIDTH / 2, TREE_TOP, 0)
    return b.frame


def layout_avl(step: Step, overlay=None) -> Frame:
    return layout_tree(step, overlay, AVL_MIN_OFFSET)


def layout_heap(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    nodes = step.state["nodes"]
    for i, node in enumerate(nodes):
        level = int(math.log2(i + 1))
        pos = i + 1 - 2 ** level
        span = CANVAS_WIDTH / 2 ** level
        b.place(node["id"], pos * span + span / 2, HEAP_TOP + level * HEAP_LEVEL_GAP, node["value"],
                detail=f"[{i}]")
    for i in range(1, len(nodes)):
        b.connect(nodes[(i - 1) // 2]["id"], nodes[i]["id"])
    return b.frame


# --- linear structures ---

def list_order(state: Mapping) -> List[str]:
    """Nodes reachable from head, then the detached ones in creation order."""
    nodes = state["nodes"]
    order: List[str] = []
    nid = state["head"]
    while nid is not None and nid not in order:
        order.append(nid)
        nid = nodes[nid]["next"]
    order.extend(n for n in nodes if n not in order)
    return order


def layout_linked_list(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    nodes = step.state["nodes"]
    per_row = max(1, int((CANVAS_WIDTH - LIST_LEFT) // LIST_GAP))
    for i, nid in enumerate(list_order(step.state)):
        b.place(nid, LIST_LEFT + (i % per_row) * LIST_GAP, 260 + (i // per_row) * 140, nodes[nid]["value"])
    for nid, node in nodes.items():
        if node["next"] is not None:
            b.connect(nid, node["next"])
    b.pointers()
    return b.frame


def layout_stack(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    items = step.state["items"]
    bottom = CANVAS_HEIGHT - 60
    for i, item in enumerate(items):
        b.place(item["id"], CANVAS_WIDTH / 2, bottom - i * STACK_SLOT_HEIGHT, item["value"], detail=item["kind"])
    if items:
        x, y = b.positions[items[-1]["id"]]
        b.frame.annotations.append(Annotation("top", x + 120, y))
    b.frame.annotations.append(Annotation(f"{len(items)}/{step.state['capacity']}", CANVAS_WIDTH / 2, bottom + 40))
    return b.frame


def layout_queue(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    state = step.state
    if state["mode"] != "circular":
        items = state["items"]
        left = (CANVAS_WIDTH - (len(items) - 1) * QUEUE_GAP) / 2 if items else CANVAS_WIDTH / 2
        for i, item in enumerate(items):
            detail = f"p{item['priority']}" if state["mode"] == "priority" else item["kind"]
            b.place(item["id"], left + i * QUEUE_GAP, CANVAS_HEIGHT / 2, item["value"], detail=detail)
        for a, c in zip(items, items[1:]):
            b.connect(a["id"], c["id"])
        b.pointers(dy=-60)
        return b.frame

    capacity = state["capacity"]
    cx, cy = CANVAS_WIDTH / 2, CANVAS_HEIGHT / 2
    for i, item in enumerate(state["buffer"]):
        angle = 2 * math.pi * i / capacity - math.pi / 2
        x, y = cx + RING_RADIUS * math.cos(angle), cy + RING_RADIUS * math.sin(angle)
        slot = f"slot{i}"
        b.place(slot, x, y, i, base="empty")
        if item is not None:
            b.place(item["id"], x, y, item["value"], detail=item["kind"])
    for i in range(capacity):
        b.connect(f"slot{i}", f"slot{(i + 1) % capacity}", state="ring")

    def slot_of(target):
        if isinstance(target, int) and not isinstance(target, bool):
            return f"slot{target}" if target >= 0 else None
        return target

    b.pointers(dy=-40, resolve=slot_of)
    return b.frame


# --- hash table ---

def layout_hash_table(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    buckets = step.state["buckets"]
    row = min(50.0, (CANVAS_HEIGHT - 40) / max(1, len(buckets)))
    for bucket in buckets:
        y = 30 + bucket["index"] * row
        b.place(bucket["id"], BUCKET_LEFT, y, bucket["index"], base="empty" if not bucket["items"] else DEFAULT)
        prev = bucket["id"]
        for j, item in enumerate(bucket["items"]):
            b.place(item["id"], BUCKET_LEFT + 120 + j * CHAIN_GAP, y, item["key"], detail=item["value"])
            b.connect(prev, item["id"])
            prev = item["id"]
    return b.frame


# --- graphs ---

def layout_graph(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    state = step.state
    for nid, node in state["nodes"].items():
        b.place(nid, node["x"], node["y"], node["label"])
    for eid, edge in state["edges"].items():
        weight = "" if edge["weight"] is None else _fmt(edge["weight"])
        b.connect(edge["source"], edge["target"], b.role(eid), weight)
    return b.frame


def grid_cell_size(rows: int, cols: int) -> float:
    return min(CANVAS_WIDTH / cols, CANVAS_HEIGHT / rows)


def layout_pathfinding(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    state = step.state
    size = grid_cell_size(state["rows"], state["cols"])
    b.frame.cell_size = size
    b.frame.width, b.frame.height = state["cols"] * size, state["rows"] * size
    kinds: Dict[Tuple[int, int], str] = {tuple(c): "visited" for c in state["visited"]}
    kinds.update({tuple(c): "path" for c in state["path"]})
    kinds.update({tuple(c): "wall" for c in state["walls"]})
    kinds[tuple(state["start"])] = "start"
    kinds[tuple(state["finish"])] = "finish"
    for (row, col), kind in kinds.items():
        b.place(f"c{row}-{col}", col * size + size / 2, row * size + size / 2, "", base=kind)
    for element_id in step.highlights:
        if element_id not in b.positions:
            row, col = (int(part) for part in element_id[1:].split("-"))
            b.place(element_id, col * size + size / 2, row * size + size / 2, "")
    return b.frame


def grid_cell_at(rows: int, cols: int, x: float, y: float) -> Optional[Tuple[int, int]]:
    size = grid_cell_size(rows, cols)
    row, col = int(y // size), int(x // size)
    if 0 <= row < rows and 0 <= col < cols and x >= 0 and y >= 0:
        return row, col
    return None


def layout_convex_hull(step: Step, overlay=None) -> Frame:
    b = _Builder(step, overlay)
    state = step.state
    b.frame.width, b.frame.height = HULL_WIDTH, HULL_HEIGHT
    for pid, point in state["points"].items():
        b.place(pid, point["x"], point["y"], "")
    hull = list(state["hull"])
    for a, c in zip(hull, hull[1:]):
        b.connect(a, c, "hull")
    if state["closed"] and len(hull) >= 3:
        b.connect(hull[-1], hull[0], "hull")
    if state["candidate"]:
        b.connect(*state["candidate"], "candidate")
    return b.frame


LAYOUTS: Dict[str, Callable[..., Frame]] = {
    "bst": layout_tree,
    "avl": layout_avl,
    "heap": layout_heap,
    "linked_list": layout_linked_list,
    "stack": layout_stack,
    "queue": layout_queue,
    "hash_table": layout_hash_table,
    "graph": layout_graph,
    "pathfinding": layout_pathfinding,
    "convex_hull": layout_convex_hull,
}


def frame_for(feature: str, step: Step, overlay: Optional[Mapping[str, str]] = None) -> Frame:
    try:
        layout = LAYOUTS[feature]
    except KeyError:
        raise ValueError(f"no layout for feature: {feature}") from None
    return layout(step, overlay)


def hit_test(frame: Frame, x: float, y: float, radius: float = 25) -> Optional[str]:
    """Id of the element nearest to (x, y) within radius, or None."""
    best, best_d = None, radius * radius
    for el in frame.elements:
        d = (el.x - x) ** 2 + (el.y - y) ** 2
        if d <= best_d:
            best, best_d = el.id, d
    return best
