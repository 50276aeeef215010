"""
Pytest configuration and shared fixtures for the labyrinth test suite.
"""

import random

import pytest

from labyrinth.daedalus import Maze
from labyrinth.generators import carve, full_rooms
from labyrinth.mazelib import OFFSETS, RIGHT


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (server and explorer together)")


@pytest.fixture
def rng():
    """Seeded random source so failures can be replayed."""
    return random.Random(1234)


@pytest.fixture
def corridor():
    """Factory for a single straight corridor: start at one end, treasure `length` rooms away."""

    def build(length, reverse=False):
        rooms = full_rooms(length + 1, 1)
        for x in range(length):
            carve(rooms, x, 0, RIGHT)
        maze = Maze(rooms)
        if reverse:
            maze.set_start_point(length, 0)
            maze.set_treasure(0, 0)
        else:
            maze.set_start_point(0, 0)
            maze.set_treasure(length, 0)
        return maze

    return build


@pytest.fixture
def flood_fill():
    """Every room reachable from `origin` through open walls."""

    def fill(maze, origin):
        seen = {tuple(origin)}
        stack = [tuple(origin)]
        while stack:
            x, y = stack.pop()
            for direction in maze.get_room(x, y).walls.open_directions():
                dx, dy = OFFSETS[direction]
                neighbor = (x + dx, y + dy)
                if maze.in_bounds(*neighbor) and neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        return seen

    return fill
