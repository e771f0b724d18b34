import random

import pytest

from operation import Outcome
from pathfinding import GridSearch, Pathfinding, cell_id, manhattan


@pytest.fixture
def grid(quick):
    return Pathfinding(rows=5, cols=5, start=(0, 0), finish=(4, 4), **quick)


def test_manhattan():
    assert manhattan((0, 0), (4, 4)) == 8


@pytest.mark.parametrize("algorithm", ["dijkstra", "astar", "bfs"])
def test_shortest_path_on_open_grid(algorithm):
    result = GridSearch(5, 5, set(), (0, 0), (4, 4)).run(algorithm)
    assert len(result.path) == 9
    assert result.path[0] == (0, 0)
    assert result.path[-1] == (4, 4)


def test_astar_visits_fewer_cells_than_dijkstra():
    search = GridSearch(9, 9, set(), (4, 0), (4, 8))
    assert len(search.run("astar").visited) < len(search.run("dijkstra").visited)


def test_dfs_finds_some_path():
    result = GridSearch(5, 5, set(), (0, 0), (4, 4)).run("dfs")
    assert result.found
    for a, b in zip(result.path, result.path[1:]):
        assert manhattan(a, b) == 1


def test_walls_block_the_path():
    walls = {(r, 2) for r in range(5)}
    result = GridSearch(5, 5, walls, (0, 0), (4, 4)).run("bfs")
    assert not result.found
    assert all(cell[1] < 2 for cell in result.visited)


def test_run_records_visits_then_path(grid):
    result = grid.run("bfs")
    assert result.ok
    assert grid.stats == {"visited": len(result.value.visited), "length": 9}
    assert result.steps[0].message == "Running BFS..."
    assert result.message.startswith("BFS complete.")
    assert len(result.steps) == 1 + len(result.value.visited) + 9 + 1
    assert result.steps[1].role_of(cell_id((0, 0))) == "current"
    assert grid.player.is_playing


def test_no_path(grid, sound):
    for cell in ((0, 1), (1, 0)):
        grid.toggle_wall(*cell)
    result = grid.run("dijkstra")
    assert result.message == "No path found."
    assert result.value.visited == [(0, 0)]
    assert sound.events[-1] == "error"


def test_edits_rejected_while_playing(grid):
    grid.run("astar")
    assert grid.toggle_wall(2, 2).outcome is Outcome.REJECTED
    grid.player.pause()
    assert grid.toggle_wall(2, 2).ok
    assert grid.result is None


def test_walls_cannot_cover_endpoints(grid):
    assert grid.toggle_wall(0, 0).outcome is Outcome.REJECTED
    assert grid.toggle_wall(9, 9).outcome is Outcome.REJECTED


def test_drag_start_reruns_instantly(grid):
    grid.run("bfs", animate=False)
    assert not grid.player.is_playing
    grid.mouse_down(0, 0)
    result = grid.mouse_enter(1, 0)
    grid.mouse_up()
    assert grid.start == (1, 0)
    assert result.ok
    assert grid.stats["length"] == 8
    assert grid.player.at_end


def test_drag_paints_walls(grid):
    grid.mouse_down(2, 1)
    grid.mouse_enter(2, 2)
    grid.mouse_up()
    assert grid.walls == {(2, 1), (2, 2)}
    assert grid.mouse_enter(2, 3).ok
    assert (2, 3) not in grid.walls


def test_full_density_maze(grid):
    result = grid.generate_maze(density=1.0, rng=random.Random(1))
    assert result.message == "Generated maze with 23 walls."
    assert grid.cell_type((0, 0)) == "start"
    assert grid.cell_type((1, 1)) == "wall"


def test_reset(grid):
    grid.toggle_wall(1, 1)
    grid.run("bfs", animate=False)
    assert grid.reset().message == "Path cleared."
    assert grid.walls == {(1, 1)}
    assert grid.reset(clear_walls=True).message == "Board cleared."
    assert grid.walls == set()


def test_invalid_grid():
    with pytest.raises(ValueError):
        Pathfinding(rows=3, cols=3, start=(0, 0), finish=(0, 0))
    with pytest.raises(ValueError):
        Pathfinding(rows=3, cols=3, start=(0, 0), finish=(5, 5))
