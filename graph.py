# graph.py
# Editable graph with BFS, DFS and Dijkstra replayed from a precomputed timeline

from __future__ import annotations

import math
import string
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from operation import Engine, OperationResult, Outcome, done, failed
from steps import IdSource, StepRecorder

VISITED = "visited"
CURRENT = "current"
FRONTIER = "frontier"
PATH = "path"
TRAVERSED = "traversed"

ALGORITHMS = ("bfs", "dfs", "dijkstra")

PRESETS = {
    "tree": {
        "nodes": [("A", 500, 80), ("B", 300, 200), ("C", 700, 200), ("D", 200, 330),
                  ("E", 400, 330), ("F", 600, 330), ("G", 800, 330)],
        "edges": [("A", "B", None), ("A", "C", None), ("B", "D", None), ("B", "E", None),
                  ("C", "F", None), ("C", "G", None)],
    },
    "cycle": {
        "nodes": [("A", 500, 100), ("B", 700, 240), ("C", 620, 450), ("D", 380, 450), ("E", 300, 240)],
        "edges": [("A", "B", None), ("B", "C", None), ("C", "D", None), ("D", "E", None), ("E", "A", None)],
    },
    "weighted": {
        "nodes": [("A", 150, 300), ("B", 350, 150), ("C", 350, 450), ("D", 600, 150),
                  ("E", 600, 450), ("F", 850, 300)],
        "edges": [("A", "B", 4), ("A", "C", 2), ("B", "C", 1), ("B", "D", 5), ("C", "E", 8),
                  ("C", "D", 10), ("D", "E", 2), ("D", "F", 6), ("E", "F", 3)],
    },
}


def node_label(index: int) -> str:
    """A, B, ... Z, A1, B1, ..."""
    letter = string.ascii_uppercase[index % 26]
    cycle = index // 26
    return f"{letter}{cycle}" if cycle else letter


@dataclass
class GraphNode:
    id: str
    label: str
    x: float
    y: float


@dataclass
class GraphEdge:
    id: str
    source: str
    target: str
    weight: Optional[float] = None


@dataclass
class Traversal:
    order: List[str] = field(default_factory=list)
    distances: Dict[str, float] = field(default_factory=dict)
    path: List[str] = field(default_factory=list)


class Graph(Engine):
    feature = "graph"
    context = "Graph Theory. Nodes, Edges, BFS, DFS, Dijkstra."

    def __init__(self, directed: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.directed = directed
        self.nodes: Dict[str, GraphNode] = {}
        self.edges: Dict[str, GraphEdge] = {}
        self.selected: Optional[str] = None
        self._new_node_id = IdSource("g")
        self._new_edge_id = IdSource("e")
        self._labels = 0
        self.message = "Click to add nodes, select two nodes to connect."

    # --- state ---

    def snapshot(self) -> dict:
        return {
            "directed": self.directed,
            "nodes": {n.id: {"label": n.label, "x": n.x, "y": n.y} for n in self.nodes.values()},
            "edges": {e.id: {"source": e.source, "target": e.target, "weight": e.weight}
                      for e in self.edges.values()},
        }

    def idle_step(self):
        highlights = {self.selected: CURRENT} if self.selected else None
        return StepRecorder().record(self.snapshot(), highlights, None, self.message)

    def label(self, nid: str) -> str:
        return self.nodes[nid].label

    def node_by_label(self, label: str) -> Optional[str]:
        for node in self.nodes.values():
            if node.label == label:
                return node.id
        return None

    def ids_with_value(self, value) -> List[str]:
        return [n.id for n in self.nodes.values() if n.label == str(value)]

    def find_edge(self, a: str, b: str) -> Optional[GraphEdge]:
        for edge in self.edges.values():
            if edge.source == a and edge.target == b:
                return edge
            if not self.directed and edge.source == b and edge.target == a:
                return edge
        return None

    def neighbors(self, nid: str) -> List[Tuple[str, GraphEdge]]:
        out = []
        for edge in self.edges.values():
            if edge.source == nid:
                out.append((edge.target, edge))
            elif not self.directed and edge.target == nid:
                out.append((edge.source, edge))
        return out

    # --- editing ---

    def add_node(self, x: float, y: float, label: Optional[str] = None) -> OperationResult:
        def action():
            node = GraphNode(self._new_node_id(), label or node_label(self._labels), x, y)
            self._labels += 1
            self.nodes[node.id] = node
            return done(f"Added node {node.label}.", node.id)

        return self._sync("add node", action)

    def move_node(self, nid: str, x: float, y: float) -> OperationResult:
        def action():
            if nid not in self.nodes:
                return failed(Outcome.NOT_FOUND, "Node not found.")
            node = self.nodes[nid]
            node.x, node.y = x, y
            return done("", nid)

        return self._sync("move node", action)

    def remove_node(self, nid: str) -> OperationResult:
        def action():
            if nid not in self.nodes:
                return failed(Outcome.NOT_FOUND, "Node not found.")
            node = self.nodes.pop(nid)
            for eid in [e.id for e in self.edges.values() if nid in (e.source, e.target)]:
                del self.edges[eid]
            if self.selected == nid:
                self.selected = None
            return done(f"Removed node {node.label}.")

        return self._sync("remove node", action)

    def add_edge(self, source: str, target: str, weight: Optional[float] = None) -> OperationResult:
        def action():
            if source not in self.nodes or target not in self.nodes:
                return failed(Outcome.NOT_FOUND, "Node not found.")
            if source == target:
                return failed(Outcome.REJECTED, "Self loops are not allowed.")
            if self.find_edge(source, target) is not None:
                return failed(Outcome.DUPLICATE, "Edge already exists.")
            edge = GraphEdge(self._new_edge_id(), source, target, weight)
            self.edges[edge.id] = edge
            return done(f"Connected {self.label(source)} - {self.label(target)}.", edge.id)

        return self._sync("add edge", action)

    def remove_edge(self, eid: str) -> OperationResult:
        def action():
            if self.edges.pop(eid, None) is None:
                return failed(Outcome.NOT_FOUND, "Edge not found.")
            return done("Edge removed.")

        return self._sync("remove edge", action)

    def click_node(self, nid: str) -> OperationResult:
        """Two-click connect: the first click selects, a click on another node connects."""
        if nid not in self.nodes:
            return failed(Outcome.NOT_FOUND, "Node not found.")
        if self.player.is_playing or self.busy:
            return self._reject("click node")
        self.player.clear()
        if self.selected is None:
            self.selected = nid
            self.message = f"Selected {self.label(nid)}."
            return done(self.message, nid)
        if self.selected == nid:
            self.selected = None
            self.message = "Selection cleared."
            return done(self.message)
        source, self.selected = self.selected, None
        return self.add_edge(source, nid)

    def reset(self) -> OperationResult:
        def action():
            self.nodes.clear()
            self.edges.clear()
            self.selected = None
            self._labels = 0
            return done("Graph cleared.")

        return self._sync("reset", action)

    clear = reset

    def load_preset(self, name: str) -> OperationResult:
        if name not in PRESETS:
            raise ValueError(f"unknown preset: {name}")
        preset = PRESETS[name]

        def action():
            self.nodes.clear()
            self.edges.clear()
            self.selected = None
            ids = {}
            for label, x, y in preset["nodes"]:
                node = GraphNode(self._new_node_id(), label, x, y)
                self.nodes[node.id] = node
                ids[label] = node.id
            self._labels = len(preset["nodes"])
            for a, b, weight in preset["edges"]:
                edge = GraphEdge(self._new_edge_id(), ids[a], ids[b], weight)
                self.edges[edge.id] = edge
            return done(f"Loaded {name} preset.")

        return self._sync("preset", action)

    def build(self, values) -> OperationResult:
        """Lays the values out as labelled nodes of a chain."""
        values = list(values)

        def action():
            self.nodes.clear()
            self.edges.clear()
            self.selected = None
            prev = None
            for i, value in enumerate(values):
                node = GraphNode(self._new_node_id(), str(value), 100 + (i % 8) * 110, 150 + (i // 8) * 150)
                self.nodes[node.id] = node
                if prev is not None:
                    edge = GraphEdge(self._new_edge_id(), prev, node.id)
                    self.edges[edge.id] = edge
                prev = node.id
            self._labels = len(values)
            return done(f"Built graph with {len(values)} nodes.")

        return self._sync("build", action)

    # --- algorithms ---

    def run(self, algorithm: str, start: str, target: Optional[str] = None) -> OperationResult:
        if algorithm not in ALGORITHMS:
            raise ValueError(f"unknown algorithm: {algorithm}")
        if start not in self.nodes:
            return failed(Outcome.NOT_FOUND, "Please select a start node first!")
        if target is not None and target not in self.nodes:
            return failed(Outcome.NOT_FOUND, "Target node not found.")
        generators = {"bfs": self._bfs, "dfs": self._dfs, "dijkstra": self._dijkstra}
        self.selected = None
        return self._precompute(algorithm, lambda rec: generators[algorithm](rec, start, target))

    def bfs(self, start: str, target: Optional[str] = None) -> OperationResult:
        return self.run("bfs", start, target)

    def dfs(self, start: str, target: Optional[str] = None) -> OperationResult:
        return self.run("dfs", start, target)

    def dijkstra(self, start: str, target: Optional[str] = None) -> OperationResult:
        return self.run("dijkstra", start, target)

    def _record(self, rec, highlights, message, kind, items):
        if kind == "table":
            aux_items = [{"id": nid, "label": self.label(nid), "dist": dist} for nid, dist in items]
        else:
            aux_items = [{"id": nid, "label": self.label(nid)} for nid in items]
        return self._step(rec, highlights, None, message, delay=0, aux={"kind": kind, "items": aux_items})

    def _path_to(self, parents: Dict[str, Optional[str]], target: Optional[str]) -> List[str]:
        if target is None or target not in parents:
            return []
        path = []
        node = target
        while node is not None:
            path.append(node)
            node = parents[node]
        path.reverse()
        return path

    def _path_highlights(self, path: List[str]) -> Dict[str, str]:
        marks = {nid: PATH for nid in path}
        for a, b in zip(path, path[1:]):
            marks[self.find_edge(a, b).id] = PATH
        return marks

    def _finish(self, rec, traversal: Traversal, parents, marks, target, kind, items, name):
        if target is not None:
            traversal.path = self._path_to(parents, target)
        if traversal.path:
            marks = dict(marks, **self._path_highlights(traversal.path))
            message = f"{name} complete. Path: {' -> '.join(self.label(n) for n in traversal.path)}"
        elif target is not None:
            message = f"{name} complete. {self.label(target)} is unreachable."
        else:
            message = f"{name} complete. Visited {len(traversal.order)} nodes."
        yield self._record(rec, marks, message, kind, items)
        self._play("success")
        return done(message, traversal)

    def _bfs(self, rec: StepRecorder, start: str, target: Optional[str]):
        traversal = Traversal()
        parents: Dict[str, Optional[str]] = {start: None}
        marks: Dict[str, str] = {start: FRONTIER}
        queue = deque([start])
        yield self._record(rec, marks, f"Start BFS from {self.label(start)}", "queue", queue)

        while queue:
            nid = queue.popleft()
            traversal.order.append(nid)
            marks[nid] = CURRENT
            yield self._record(rec, marks, f"Visiting {self.label(nid)}", "queue", queue)
            if nid == target:
                marks[nid] = VISITED
                yield self._record(rec, marks, f"Reached target {self.label(nid)}", "queue", queue)
                break
            for other, edge in self.neighbors(nid):
                if other in parents:
                    continue
                parents[other] = nid
                queue.append(other)
                marks[other] = FRONTIER
                marks[edge.id] = TRAVERSED
                yield self._record(rec, marks, f"Enqueue {self.label(other)}", "queue", queue)
            marks[nid] = VISITED

        return (yield from self._finish(rec, traversal, parents, marks, target, "queue", queue, "BFS"))

    def _dfs(self, rec: StepRecorder, start: str, target: Optional[str]):
        traversal = Traversal()
        parents: Dict[str, Optional[str]] = {}
        visited = set()
        marks: Dict[str, str] = {start: FRONTIER}
        stack: List[Tuple[str, Optional[str], Optional[str]]] = [(start, None, None)]
        yield self._record(rec, marks, f"Start DFS from {self.label(start)}", "stack", [s[0] for s in stack])

        while stack:
            nid, via, edge_id = stack.pop()
            if nid in visited:
                yield self._record(rec, marks, f"{self.label(nid)} already visited", "stack", [s[0] for s in stack])
                continue
            visited.add(nid)
            parents[nid] = via
            traversal.order.append(nid)
            marks[nid] = CURRENT
            if edge_id is not None:
                marks[edge_id] = TRAVERSED
            yield self._record(rec, marks, f"Visiting {self.label(nid)}", "stack", [s[0] for s in stack])
            if nid == target:
                marks[nid] = VISITED
                yield self._record(rec, marks, f"Reached target {self.label(nid)}", "stack", [s[0] for s in stack])
                break
            # Reversed so the first neighbor is explored first
            for other, edge in reversed(self.neighbors(nid)):
                if other not in visited:
                    stack.append((other, nid, edge.id))
                    marks.setdefault(other, FRONTIER)
            marks[nid] = VISITED
            yield self._record(rec, marks, f"Push unvisited neighbors of {self.label(nid)}", "stack",
                               [s[0] for s in stack])

        return (yield from self._finish(rec, traversal, parents, marks, target, "stack", [s[0] for s in stack], "DFS"))

    def _dijkstra(self, rec: StepRecorder, start: str, target: Optional[str]):
        traversal = Traversal()
        dist: Dict[str, float] = {nid: math.inf for nid in self.nodes}
        dist[start] = 0
        parents: Dict[str, Optional[str]] = {start: None}
        unvisited = list(self.nodes)
        marks: Dict[str, str] = {start: FRONTIER}

        def table():
            return [(nid, dist[nid]) for nid in self.nodes]

        yield self._record(rec, marks, f"Start Dijkstra from {self.label(start)}", "table", table())

        while unvisited:
            # sorted() is stable, so equal distances keep insertion order
            nid = sorted(unvisited, key=lambda n: dist[n])[0]
            if math.isinf(dist[nid]):
                yield self._record(rec, marks, "Remaining nodes are unreachable", "table", table())
                break
            unvisited.remove(nid)
            traversal.order.append(nid)
            marks[nid] = CURRENT
            yield self._record(rec, marks, f"Visiting {self.label(nid)} (distance {dist[nid]:g})", "table", table())
            if nid == target:
                marks[nid] = VISITED
                yield self._record(rec, marks, f"Reached target {self.label(nid)}", "table", table())
                break

            for other, edge in self.neighbors(nid):
                if other not in unvisited:
                    continue
                candidate = dist[nid] + (edge.weight if edge.weight is not None else 1)
                if candidate < dist[other]:
                    dist[other] = candidate
                    parents[other] = nid
                    marks[other] = FRONTIER
                    marks[edge.id] = TRAVERSED
                    yield self._record(rec, marks, f"Update {self.label(other)}: distance {candidate:g}",
                                       "table", table())
            marks[nid] = VISITED

        traversal.distances = {nid: d for nid, d in dist.items()}
        return (yield from self._finish(rec, traversal, parents, marks, target, "table", table(), "Dijkstra"))
