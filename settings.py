# settings.py
# Capacities, sizes and animation delays shared by the engines

from __future__ import annotations

from dataclasses import dataclass

# Logical canvas the layout functions place elements on
CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 600

# Stack / queue
STACK_CAPACITY = 10
QUEUE_CAPACITY = 8
DEFAULT_PRIORITY = 3

# Hash table
HASH_INITIAL_SIZE = 10
LOAD_FACTOR_LIMIT = 0.7

# Pathfinding grid
GRID_ROWS = 25
GRID_COLS = 50
GRID_START = (10, 5)
GRID_FINISH = (10, 44)
MAZE_DENSITY = 0.3
# Grid timelines are long; one cell every 20 ms
GRID_PLAYBACK_SPEED = 50.0

# Convex hull canvas
HULL_WIDTH = 800
HULL_HEIGHT = 500
HULL_PADDING = 50

# Tutor highlight lifetime
HIGHLIGHT_DURATION_MS = 2000

# Default delay (ms) after one visual step, per feature
STEP_DELAYS: dict[str, int] = {
    "bst": 500,
    "avl": 500,
    "stack": 400,
    "queue": 800,
    "hash_table": 600,
    "heap": 800,
}

# Playback speed multiplier for precomputed timelines (1000 / speed ms per step)
DEFAULT_SPEED = 1.0


@dataclass
class Pacing:
    """Scales every suspension an engine requests. scale=0 runs instantly."""
    scale: float = 1.0

    def delay(self, ms: float) -> float:
        return max(0.0, ms * self.scale)


INSTANT = Pacing(scale=0.0)
