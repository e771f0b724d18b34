# convex_hull.py
# Convex hull engine: Graham scan, Jarvis march and monotone chain
#
# Screen coordinates grow downward. turn() flips the vertical axis so a
# positive value is a counter-clockwise (left) turn as seen on screen. Every
# algorithm walks the hull counter-clockwise on screen and keeps strict left
# turns only, so collinear boundary points are left out.

from __future__ import annotations

import functools
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from operation import Engine, OperationResult, Outcome, done, failed
from settings import HULL_HEIGHT, HULL_PADDING, HULL_WIDTH
from steps import ACTIVE, IdSource, StepRecorder

logger = logging.getLogger(__name__)

ALGORITHMS = ("graham", "jarvis", "monotone")
HULL = "hull"
CANDIDATE = "candidate"
CHECKING = "checking"


@dataclass
class HullPoint:
    id: str
    x: float
    y: float


def turn(o: HullPoint, a: HullPoint, b: HullPoint) -> float:
    """Cross product of o->a and o->b with y pointing up. > 0 means a left turn on screen."""
    return (a.x - o.x) * (o.y - b.y) - (o.y - a.y) * (b.x - o.x)


def dist_sq(a: HullPoint, b: HullPoint) -> float:
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2


class ConvexHull(Engine):
    feature = "convex_hull"
    context = "Convex Hull. Graham scan, Jarvis march, monotone chain, orientation tests."

    def __init__(self, width: float = HULL_WIDTH, height: float = HULL_HEIGHT, **kwargs):
        super().__init__(**kwargs)
        self.width = width
        self.height = height
        self.points: Dict[str, HullPoint] = {}
        self.hull: List[str] = []
        self.algorithm = "graham"
        self._new_id = IdSource("pt")
        self.message = "Ready. Add points or generate random set."

    # --- state ---

    def _view(self, hull: Sequence[str] = (), candidate=None, closed: bool = False) -> dict:
        return {
            "points": {p.id: {"x": p.x, "y": p.y} for p in self.points.values()},
            "hull": list(hull),
            "candidate": list(candidate) if candidate else None,
            "closed": closed,
        }

    def snapshot(self) -> dict:
        return self._view(self.hull, closed=bool(self.hull))

    def ids_with_value(self, value) -> List[str]:
        return [pid for pid in self.points if pid == str(value)]

    def _record(self, rec, hull, highlights=None, message="", candidate=None, closed=False):
        marks = {pid: HULL for pid in hull}
        marks.update(highlights or {})
        return self._step(rec, marks, None, message, delay=0, state=self._view(hull, candidate, closed))

    # --- editing ---

    def add_point(self, x: float, y: float) -> OperationResult:
        def action():
            point = HullPoint(self._new_id(), x, y)
            self.points[point.id] = point
            if self.hull:
                self.hull = []
                return done("Point added. Re-run algorithm.", point.id)
            return done("", point.id)

        return self._sync("add point", action)

    def remove_point(self, pid: str) -> OperationResult:
        def action():
            if self.points.pop(pid, None) is None:
                return failed(Outcome.NOT_FOUND, "Point not found.")
            self.hull = []
            return done("Point removed.")

        return self._sync("remove point", action)

    def generate_points(self, count: int = 20, rng: Optional[random.Random] = None) -> OperationResult:
        rng = rng or random.Random()

        def action():
            self.points.clear()
            self.hull = []
            for _ in range(count):
                point = HullPoint(
                    self._new_id(),
                    HULL_PADDING + rng.random() * (self.width - 2 * HULL_PADDING),
                    HULL_PADDING + rng.random() * (self.height - 2 * HULL_PADDING),
                )
                self.points[point.id] = point
            return done(f"Generated {count} random points.")

        return self._sync("generate", action)

    def clear(self) -> OperationResult:
        def action():
            self.points.clear()
            self.hull = []
            return done("Canvas cleared.")

        return self._sync("clear", action)

    reset = clear

    def build(self, values) -> OperationResult:
        """Pairs consecutive values into (x, y) points."""
        values = list(values)

        def action():
            self.points.clear()
            self.hull = []
            for x, y in zip(values[::2], values[1::2]):
                point = HullPoint(self._new_id(), x, y)
                self.points[point.id] = point
            return done(f"Placed {len(self.points)} points.")

        return self._sync("build", action)

    # --- algorithms ---

    def run(self, algorithm: Optional[str] = None) -> OperationResult:
        algorithm = algorithm or self.algorithm
        if algorithm not in ALGORITHMS:
            raise ValueError(f"unknown algorithm: {algorithm}")
        self.algorithm = algorithm
        if len(self.points) < 3:
            self.message = "Need at least 3 points to form a hull."
            return failed(Outcome.REJECTED, self.message)
        generators = {"graham": self._graham, "jarvis": self._jarvis, "monotone": self._monotone}
        return self._precompute(algorithm, lambda rec: self._run(rec, generators[algorithm]))

    def _run(self, rec: StepRecorder, algorithm):
        hull = yield from algorithm(rec, list(self.points.values()))
        self.hull = [p.id for p in hull]
        yield self._record(rec, self.hull, message="Convex Hull Complete.", closed=True)
        self._play("success")
        return done("Convex Hull Complete.", list(self.hull))

    def _graham(self, rec, points: List[HullPoint]):
        anchor = points[0]
        for p in points:
            if p.y > anchor.y or (p.y == anchor.y and p.x < anchor.x):
                anchor = p
        yield self._record(rec, [], {anchor.id: ACTIVE},
                           "Step 1: Finding the lowest Y-coordinate point (Start Point).")

        def by_angle(a, b):
            t = turn(anchor, a, b)
            if t > 0:
                return -1
            if t < 0:
                return 1
            da, db = dist_sq(anchor, a), dist_sq(anchor, b)
            return (da > db) - (da < db)

        ordered = sorted((p for p in points if p.id != anchor.id), key=functools.cmp_to_key(by_angle))
        # Points on the closing ray are walked far to near so the nearer ones get popped
        i = len(ordered) - 1
        while i > 0 and turn(anchor, ordered[i - 1], ordered[-1]) == 0:
            i -= 1
        if i > 0:
            ordered[i:] = reversed(ordered[i:])
        yield self._record(rec, [], {p.id: CHECKING for p in ordered},
                           "Step 2: Sorting points by polar angle around the start point.")

        stack = [anchor]
        for p in ordered:
            while len(stack) >= 2 and turn(stack[-2], stack[-1], p) <= 0:
                yield self._record(rec, [s.id for s in stack], {stack[-1].id: ACTIVE, p.id: CANDIDATE},
                                   "Right turn or collinear. Popping the last hull point.",
                                   candidate=(stack[-1].id, p.id))
                stack.pop()
            stack.append(p)
            yield self._record(rec, [s.id for s in stack], {p.id: ACTIVE}, "Left turn. Pushing point onto the hull.")

        while len(stack) >= 3 and turn(stack[-2], stack[-1], anchor) <= 0:
            stack.pop()
        return stack

    def _jarvis(self, rec, points: List[HullPoint]):
        start = points[0]
        for p in points:
            if p.x < start.x or (p.x == start.x and p.y > start.y):
                start = p
        yield self._record(rec, [], {start.id: ACTIVE}, "Starting from the leftmost point.")

        hull: List[HullPoint] = []
        current = start
        limit = len(points) + 1
        for _ in range(limit):
            hull.append(current)
            candidate = next(p for p in points if p.id != current.id)
            for r in points:
                if r.id in (current.id, candidate.id):
                    continue
                t = turn(current, candidate, r)
                yield self._record(rec, [h.id for h in hull], {candidate.id: CANDIDATE, r.id: CHECKING},
                                   candidate=(current.id, candidate.id))
                if t < 0 or (t == 0 and dist_sq(current, r) > dist_sq(current, candidate)):
                    candidate = r
                    yield self._record(rec, [h.id for h in hull], {candidate.id: CANDIDATE},
                                       "Found a more clockwise point. New candidate.",
                                       candidate=(current.id, candidate.id))
            current = candidate
            if current.id == start.id:
                return hull
            yield self._record(rec, [h.id for h in hull] + [current.id], {current.id: ACTIVE},
                               "Added point to hull.")

        logger.warning("jarvis march stopped after %d iterations", limit)
        self.message = "Iteration limit reached; hull may be incomplete."
        return hull

    def _monotone(self, rec, points: List[HullPoint]):
        ordered = sorted(points, key=lambda p: (p.x, -p.y))
        yield self._record(rec, [], {p.id: CHECKING for p in ordered}, "Sorting points by x, then y.")

        def chain(sequence, label):
            out: List[HullPoint] = []
            for p in sequence:
                while len(out) >= 2 and turn(out[-2], out[-1], p) <= 0:
                    yield self._record(rec, [q.id for q in out], {out[-1].id: ACTIVE, p.id: CANDIDATE},
                                       f"Building {label} hull: popping non-left turn.",
                                       candidate=(out[-1].id, p.id))
                    out.pop()
                out.append(p)
                yield self._record(rec, [q.id for q in out], {p.id: ACTIVE}, f"Building {label} hull...")
            return out

        lower = yield from chain(ordered, "lower")
        upper = yield from chain(list(reversed(ordered)), "upper")
        return lower[:-1] + upper[:-1]
