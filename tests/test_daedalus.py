import random

import pytest

from labyrinth.daedalus import Maze
from labyrinth.generators import _generate_void, empty_rooms, full_rooms, generate
from labyrinth.mazelib import (
    BOTTOM,
    LEFT,
    RIGHT,
    TOP,
    Blocked,
    MazeError,
    OutOfBounds,
    Victory,
)


@pytest.mark.unit
def test_survey_does_not_change_the_maze():
    maze = generate(6, 4, "prim", random.Random(9))
    first = maze.survey(2, 3)
    first.set_wall(TOP, not first.top)
    assert maze.survey(2, 3) == maze.survey(2, 3)
    assert maze.survey(2, 3) != first
    assert maze.steps_taken == 0


@pytest.mark.unit
def test_survey_outside_the_grid():
    maze = Maze(full_rooms(3, 3))
    with pytest.raises(OutOfBounds):
        maze.survey(3, 0)
    with pytest.raises(OutOfBounds):
        maze.survey(0, -1)


@pytest.mark.unit
def test_walls_are_checked_before_the_grid_edge():
    maze = Maze(_generate_void(3, 3, random.Random(0)))
    maze.set_start_point(0, 0)
    maze.set_treasure(2, 2)
    with pytest.raises(Blocked):
        maze.move(LEFT)
    assert maze.icarus == (0, 0)
    assert maze.steps_taken == 0


@pytest.mark.unit
def test_missing_border_wall_is_out_of_bounds():
    maze = Maze(empty_rooms(3, 3))
    maze.set_start_point(0, 0)
    maze.set_treasure(2, 2)
    with pytest.raises(OutOfBounds):
        maze.move(TOP)
    assert maze.icarus == (0, 0)
    assert maze.steps_taken == 0


@pytest.mark.unit
def test_steps_count_only_successful_moves(corridor):
    maze = corridor(5)
    assert maze.move(RIGHT) == maze.survey(1, 0)
    maze.move("right")
    with pytest.raises(Blocked, match="walls"):
        maze.move(BOTTOM)
    assert maze.icarus == (2, 0)
    assert maze.steps_taken == 2

    maze.move(LEFT)
    assert maze.steps_taken == 3


@pytest.mark.unit
def test_reaching_the_treasure(corridor):
    maze = corridor(3)
    maze.move(RIGHT)
    maze.move(RIGHT)
    with pytest.raises(Victory) as info:
        maze.move(RIGHT)
    assert info.value.steps == 3
    assert info.value.message == "Victory achieved in 3 steps"
    assert maze.icarus == maze.treasure

    # every later look around keeps reporting it
    with pytest.raises(Victory):
        maze.look_around()


@pytest.mark.unit
def test_look_around_before_placing_icarus():
    maze = Maze(full_rooms(2, 2))
    with pytest.raises(MazeError):
        maze.look_around()


@pytest.mark.unit
def test_start_and_treasure_must_differ():
    maze = Maze(full_rooms(2, 2))
    maze.set_start_point(1, 1)
    with pytest.raises(MazeError):
        maze.set_treasure(1, 1)

    maze = Maze(full_rooms(2, 2))
    maze.set_treasure(0, 1)
    with pytest.raises(MazeError):
        maze.set_start_point(0, 1)


@pytest.mark.unit
def test_start_and_treasure_are_placed_once():
    maze = Maze(full_rooms(3, 1))
    maze.set_start_point(0, 0)
    maze.set_treasure(2, 0)
    with pytest.raises(MazeError):
        maze.set_start_point(1, 0)
    with pytest.raises(MazeError):
        maze.set_treasure(1, 0)
    with pytest.raises(OutOfBounds):
        Maze(full_rooms(3, 1)).set_treasure(3, 0)


@pytest.mark.unit
def test_unknown_direction():
    maze = Maze(full_rooms(2, 1))
    maze.set_start_point(0, 0)
    maze.set_treasure(1, 0)
    with pytest.raises(ValueError):
        maze.move("sideways")


@pytest.mark.unit
def test_empty_grid():
    with pytest.raises(ValueError):
        Maze([])
