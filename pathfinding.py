# pathfinding.py
# Grid pathfinding engine: Dijkstra, A*, BFS and DFS over 4-connected cells

from __future__ import annotations

import heapq
import itertools
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from operation import Engine, OperationResult, Outcome, done, failed
from settings import GRID_COLS, GRID_FINISH, GRID_PLAYBACK_SPEED, GRID_ROWS, GRID_START, MAZE_DENSITY
from steps import StepRecorder

Cell = Tuple[int, int]

ALGORITHMS = ("dijkstra", "astar", "bfs", "dfs")
VISITED = "visited"
PATH = "path"
CURRENT = "current"


def cell_id(cell: Cell) -> str:
    return f"c{cell[0]}-{cell[1]}"


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass
class SearchResult:
    visited: List[Cell] = field(default_factory=list)
    parents: Dict[Cell, Optional[Cell]] = field(default_factory=dict)
    path: List[Cell] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.path)


class GridSearch:
    """Runs one algorithm over a fixed grid; no recording, no timing."""

    def __init__(self, rows: int, cols: int, walls: Set[Cell], start: Cell, finish: Cell):
        self.rows = rows
        self.cols = cols
        self.walls = walls
        self.start = start
        self.finish = finish

    def neighbors(self, cell: Cell) -> List[Cell]:
        row, col = cell
        out = []
        if row > 0:
            out.append((row - 1, col))
        if row < self.rows - 1:
            out.append((row + 1, col))
        if col > 0:
            out.append((row, col - 1))
        if col < self.cols - 1:
            out.append((row, col + 1))
        return [c for c in out if c not in self.walls]

    def run(self, algorithm: str) -> SearchResult:
        search = {
            "dijkstra": self.dijkstra,
            "astar": self.astar,
            "bfs": self.bfs,
            "dfs": self.dfs,
        }[algorithm]
        result = search()
        result.path = self.reconstruct(result.parents)
        return result

    def reconstruct(self, parents: Dict[Cell, Optional[Cell]]) -> List[Cell]:
        if self.finish not in parents:
            return []
        path = []
        cell: Optional[Cell] = self.finish
        while cell is not None:
            path.append(cell)
            cell = parents[cell]
        path.reverse()
        return path

    def _best_first(self, priority) -> SearchResult:
        result = SearchResult(parents={self.start: None})
        cost = {self.start: 0}
        counter = itertools.count()
        frontier = [(priority(0, self.start), next(counter), self.start)]
        closed: Set[Cell] = set()
        while frontier:
            _, _, cell = heapq.heappop(frontier)
            if cell in closed:
                continue
            closed.add(cell)
            result.visited.append(cell)
            if cell == self.finish:
                break
            for other in self.neighbors(cell):
                if other in closed:
                    continue
                g = cost[cell] + 1
                if g < cost.get(other, float("inf")):
                    cost[other] = g
                    result.parents[other] = cell
                    heapq.heappush(frontier, (priority(g, other), next(counter), other))
        return result

    def dijkstra(self) -> SearchResult:
        return self._best_first(lambda g, cell: g)

    def astar(self) -> SearchResult:
        return self._best_first(lambda g, cell: g + manhattan(cell, self.finish))

    def bfs(self) -> SearchResult:
        result = SearchResult(parents={self.start: None})
        queue = deque([self.start])
        while queue:
            cell = queue.popleft()
            result.visited.append(cell)
            if cell == self.finish:
                break
            for other in self.neighbors(cell):
                if other not in result.parents:
                    result.parents[other] = cell
                    queue.append(other)
        return result

    def dfs(self) -> SearchResult:
        result = SearchResult()
        stack: List[Tuple[Cell, Optional[Cell]]] = [(self.start, None)]
        while stack:
            cell, via = stack.pop()
            if cell in result.parents:
                continue
            result.parents[cell] = via
            result.visited.append(cell)
            if cell == self.finish:
                break
            for other in self.neighbors(cell):
                if other not in result.parents:
                    stack.append((other, cell))
        return result


class Pathfinding(Engine):
    feature = "pathfinding"
    context = "Grid pathfinding. Dijkstra, A*, BFS and DFS with walls and draggable endpoints."

    def __init__(
        self,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        start: Cell = GRID_START,
        finish: Cell = GRID_FINISH,
        rerun_on_drag: bool = True,
        **kwargs,
    ):
        if rows <= 0 or cols <= 0:
            raise ValueError("grid dimensions must be positive")
        super().__init__(**kwargs)
        self.rows = rows
        self.cols = cols
        self.start = tuple(start)
        self.finish = tuple(finish)
        if not (self.in_bounds(self.start) and self.in_bounds(self.finish)) or self.start == self.finish:
            raise ValueError("start and finish must be distinct cells inside the grid")
        self.walls: Set[Cell] = set()
        self.algorithm = "dijkstra"
        self.rerun_on_drag = rerun_on_drag
        self.result: Optional[SearchResult] = None
        self.mouse_mode = "idle"
        self.player.set_speed(GRID_PLAYBACK_SPEED)
        self.message = "Draw walls, drag start or finish, then run."

    # --- state ---

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell[0] < self.rows and 0 <= cell[1] < self.cols

    def cell_type(self, cell: Cell) -> str:
        if cell == self.start:
            return "start"
        if cell == self.finish:
            return "finish"
        if cell in self.walls:
            return "wall"
        if self.result is not None:
            if cell in self.result.path:
                return PATH
            if cell in self.result.visited:
                return VISITED
        return "empty"

    @property
    def finished(self) -> bool:
        return self.result is not None

    @property
    def stats(self) -> dict:
        if self.result is None:
            return {"visited": 0, "length": 0}
        return {"visited": len(self.result.visited), "length": len(self.result.path)}

    def _view(self, visited=(), path=()) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "start": self.start,
            "finish": self.finish,
            "walls": sorted(self.walls),
            "visited": list(visited),
            "path": list(path),
        }

    def snapshot(self) -> dict:
        if self.result is None:
            return self._view()
        return self._view(self.result.visited, self.result.path)

    def aux(self) -> dict:
        return self.stats

    # --- editing ---

    def _invalidate(self):
        self.result = None
        self.player.clear()

    def _editable(self, name: str) -> Optional[OperationResult]:
        if self.player.is_playing or self.busy:
            return self._reject(name)
        return None

    def toggle_wall(self, row: int, col: int) -> OperationResult:
        cell = (row, col)
        rejected = self._editable("toggle wall")
        if rejected is not None:
            return rejected
        if not self.in_bounds(cell) or cell in (self.start, self.finish):
            return failed(Outcome.REJECTED, "Cannot place a wall there.")
        if cell in self.walls:
            self.walls.discard(cell)
        else:
            self.walls.add(cell)
        self._invalidate()
        self._play("click")
        return done("", cell in self.walls)

    def _move_endpoint(self, which: str, row: int, col: int) -> OperationResult:
        cell = (row, col)
        rejected = self._editable(f"move {which}")
        if rejected is not None:
            return rejected
        other = self.finish if which == "start" else self.start
        if not self.in_bounds(cell) or cell in self.walls or cell == other:
            return failed(Outcome.REJECTED, f"Cannot move {which} there.")
        rerun = self.finished and self.rerun_on_drag
        setattr(self, which, cell)
        self._invalidate()
        if rerun:
            return self.run(self.algorithm, animate=False)
        return done(f"Moved {which}.")

    def move_start(self, row: int, col: int) -> OperationResult:
        return self._move_endpoint("start", row, col)

    def move_finish(self, row: int, col: int) -> OperationResult:
        return self._move_endpoint("finish", row, col)

    def mouse_down(self, row: int, col: int) -> OperationResult:
        if self.player.is_playing:
            return self._reject("mouse down")
        cell = (row, col)
        if cell == self.start:
            self.mouse_mode = "move_start"
            return done("")
        if cell == self.finish:
            self.mouse_mode = "move_finish"
            return done("")
        self.mouse_mode = "wall"
        return self.toggle_wall(row, col)

    def mouse_enter(self, row: int, col: int) -> OperationResult:
        if self.mouse_mode == "move_start":
            return self.move_start(row, col)
        if self.mouse_mode == "move_finish":
            return self.move_finish(row, col)
        if self.mouse_mode == "wall":
            return self.toggle_wall(row, col)
        return done("")

    def mouse_up(self):
        self.mouse_mode = "idle"

    def clear_path(self) -> OperationResult:
        def action():
            self.result = None
            return done("Path cleared.")

        return self._sync("clear path", action)

    def reset(self, clear_walls: bool = False) -> OperationResult:
        def action():
            self.result = None
            if clear_walls:
                self.walls.clear()
            return done("Board cleared." if clear_walls else "Path cleared.")

        return self._sync("reset", action)

    clear = reset

    def generate_maze(self, density: float = MAZE_DENSITY, rng: Optional[random.Random] = None) -> OperationResult:
        rng = rng or random.Random()

        def action():
            self.result = None
            self.walls = {
                (r, c)
                for r in range(self.rows)
                for c in range(self.cols)
                if (r, c) not in (self.start, self.finish) and rng.random() < density
            }
            return done(f"Generated maze with {len(self.walls)} walls.")

        return self._sync("maze", action)

    def build(self, values) -> OperationResult:
        """Treats each value as a column index and raises a wall down that column."""
        values = list(values)

        def action():
            self.result = None
            self.walls = set()
            for value in values:
                col = int(value) % self.cols
                self.walls.update((r, col) for r in range(self.rows) if (r, col) not in (self.start, self.finish))
            return done(f"Built {len(values)} wall columns.")

        return self._sync("build", action)

    # --- algorithms ---

    def run(self, algorithm: Optional[str] = None, animate: bool = True) -> OperationResult:
        algorithm = algorithm or self.algorithm
        if algorithm not in ALGORITHMS:
            raise ValueError(f"unknown algorithm: {algorithm}")
        self.algorithm = algorithm
        result = self._precompute(algorithm, lambda rec: self._run(rec, algorithm), autoplay=animate)
        if not animate:
            self.player.seek_end()
        return result

    def _run(self, rec: StepRecorder, algorithm: str):
        search = GridSearch(self.rows, self.cols, set(self.walls), self.start, self.finish).run(algorithm)
        name = {"dijkstra": "Dijkstra", "astar": "A*", "bfs": "BFS", "dfs": "DFS"}[algorithm]

        yield self._step(rec, message=f"Running {name}...", state=self._view(), aux={"visited": 0, "length": 0})
        for i, cell in enumerate(search.visited, 1):
            yield self._step(rec, {cell_id(cell): CURRENT}, state=self._view(search.visited[:i]),
                             aux={"visited": i, "length": 0})

        if not search.found:
            self.result = search
            yield self._step(rec, message="No path found.", state=self._view(search.visited),
                             aux=self.stats)
            self._play("error")
            return done("No path found.", search)

        for i in range(1, len(search.path) + 1):
            yield self._step(rec, state=self._view(search.visited, search.path[:i]),
                             aux={"visited": len(search.visited), "length": i})
        self.result = search
        message = f"{name} complete. Visited {len(search.visited)} cells, path length {len(search.path)}."
        yield self._step(rec, message=message, aux=self.stats)
        self._play("success")
        return done(message, search)
