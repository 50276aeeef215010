"""
The labyrinth as Daedalus holds it: a fixed grid of rooms plus the position
of Icarus and the number of steps he has taken.

Rooms are stored row-major, rooms[y][x]. Generators build the grid and hand it
over. The Maze only enforces the rules of movement.
"""
import logging

from labyrinth.mazelib import (
    Blocked,
    Coordinate,
    MazeError,
    OutOfBounds,
    Victory,
    move_coordinate,
    parse_direction,
)

logger = logging.getLogger(__name__)


class Maze:
    def __init__(self, rooms):
        if not rooms or not rooms[0]:
            raise ValueError("a maze needs at least one row and one column")
        self.rooms = rooms
        self.start = None
        self.treasure = None
        self.icarus = None
        self.steps_taken = 0

    @property
    def width(self):
        return len(self.rooms[0])

    @property
    def height(self):
        return len(self.rooms)

    def in_bounds(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def get_room(self, x, y):
        if not self.in_bounds(x, y):
            raise OutOfBounds(f"room ({x}, {y}) outside of maze boundaries")
        return self.rooms[y][x]

    def set_start_point(self, x, y):
        """Place the start room and wake Icarus there."""
        room = self.get_room(x, y)
        if room.treasure:
            raise MazeError("can't start in the treasure")
        if self.start is not None:
            raise MazeError("start point already placed")
        room.start = True
        self.start = Coordinate(x, y)
        self.icarus = Coordinate(x, y)

    def set_treasure(self, x, y):
        room = self.get_room(x, y)
        if room.start:
            raise MazeError("can't have the treasure at the start")
        if self.treasure is not None:
            raise MazeError("treasure already placed")
        room.treasure = True
        self.treasure = Coordinate(x, y)

    def survey(self, x, y):
        """Walls of the room at (x, y). Reading never changes the maze."""
        return self.get_room(x, y).walls.copy()

    def look_around(self):
        """Survey Icarus's room, or raise Victory if he is on the treasure."""
        if self.icarus is None:
            raise MazeError("Icarus has not been placed in the maze")
        if self.icarus == self.treasure:
            raise Victory(self.steps_taken)
        return self.survey(*self.icarus)

    def move(self, direction):
        """Move Icarus one room. Walls are checked before the grid edge."""
        direction = parse_direction(direction)
        walls = self.look_around()
        if walls.has_wall(direction):
            raise Blocked("Can't walk through walls")

        destination = move_coordinate(self.icarus, direction)
        self.get_room(*destination)

        self.icarus = destination
        self.steps_taken += 1
        logger.debug("Icarus moved to %s (%d steps)", tuple(destination), self.steps_taken)
        return self.look_around()
