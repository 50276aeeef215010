"""
Shared vocabulary for Daedalus (the maze server) and Icarus (the explorer).

Coordinates: (x, y) where x is the column and y is the row. Origin (0, 0)
is top-left for Daedalus. Icarus does not know where he woke up, so his
own coordinates start at (0, 0) on his first room and may go negative.

Directions are integers so they can be rotated with modular arithmetic:
    TOP = 0, RIGHT = 1, BOTTOM = 2, LEFT = 3
Adding 1 (mod 4) turns clockwise, adding 2 turns around.
On the wire they travel as 'up', 'right', 'down' and 'left'.
"""
import collections
from dataclasses import dataclass, field, replace

TOP, RIGHT, BOTTOM, LEFT = 0, 1, 2, 3

DIRECTION_NAMES = ("up", "right", "down", "left")

# (dx, dy) for each direction, indexed by TOP..LEFT
OFFSETS = ((0, -1), (1, 0), (0, 1), (-1, 0))

WALL_FIELDS = ("top", "right", "bottom", "left")


Coordinate = collections.namedtuple("Coordinate", ["x", "y"])


def opposite(direction):
    return (direction + 2) % 4


def rotation(first):
    """The four directions, clockwise, starting at `first`."""
    return [(first + n) % 4 for n in range(4)]


def move_coordinate(coord, direction):
    dx, dy = OFFSETS[direction]
    return Coordinate(coord[0] + dx, coord[1] + dy)


def direction_between(origin, target):
    """Direction of a single step from `origin` to the adjacent `target`."""
    dx, dy = target[0] - origin[0], target[1] - origin[1]
    for direction, offset in enumerate(OFFSETS):
        if offset == (dx, dy):
            return direction
    raise ValueError(f"{tuple(origin)} and {tuple(target)} are not adjacent")


def parse_direction(value):
    """Accepts 0-3 or one of the wire names and returns the integer direction."""
    if isinstance(value, int) and not isinstance(value, bool):
        if TOP <= value <= LEFT:
            return value
        raise ValueError(f"invalid direction: {value}")
    name = str(value).strip().lower()
    if name in DIRECTION_NAMES:
        return DIRECTION_NAMES.index(name)
    raise ValueError(f"invalid direction: {value!r}")


@dataclass
class Survey:
    """What Icarus sees in a room: True means a wall blocks that side."""
    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False

    @classmethod
    def closed(cls):
        return cls(True, True, True, True)

    def has_wall(self, direction):
        return getattr(self, WALL_FIELDS[direction])

    def set_wall(self, direction, present=True):
        setattr(self, WALL_FIELDS[direction], present)

    def open_directions(self):
        return [d for d in range(4) if not self.has_wall(d)]

    def copy(self):
        return replace(self)

    def to_dict(self):
        return {name: bool(getattr(self, name)) for name in WALL_FIELDS}

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(**{name: bool(data.get(name, False)) for name in WALL_FIELDS})


@dataclass
class Room:
    walls: Survey = field(default_factory=Survey)
    visited: bool = False
    start: bool = False
    treasure: bool = False


# --- Errors ---

class MazeError(Exception):
    """Base class for everything that can go wrong inside the labyrinth."""


class OutOfBounds(MazeError):
    """A coordinate outside the grid. Only a bookkeeping bug can trigger it during play."""


class Blocked(MazeError):
    """Tried to walk through a standing wall."""


class NoPath(MazeError):
    """Icarus ran out of places to go: the breadcrumb trail is empty."""


class TransportError(MazeError):
    """The server could not be reached or answered with something unreadable."""


class Victory(Exception):
    """Icarus stands on the treasure. Not a failure: it ends the current run."""

    def __init__(self, steps=None, message=None):
        self.steps = steps
        if message is None:
            message = f"Victory achieved in {steps} steps" if steps is not None else "Victory achieved"
        self.message = message
        super().__init__(message)


# --- Replies exchanged between Daedalus and Icarus ---

def make_reply(survey=None, victory=False, error=False, message="", steps=None, blocked=False):
    """`blocked` marks an error caused by a wall or the grid edge, as opposed to a bad request."""
    reply = {
        "survey": (survey or Survey()).to_dict(),
        "victory": bool(victory),
        "error": bool(error or blocked),
        "blocked": bool(blocked),
        "message": message,
    }
    if steps is not None:
        reply["steps"] = steps
    return reply


def survey_from_reply(reply):
    """Decode a reply and raise the signal it carries, if any."""
    if not isinstance(reply, dict):
        raise TransportError(f"malformed reply: {reply!r}")
    if reply.get("victory"):
        raise Victory(reply.get("steps"), reply.get("message") or None)
    if reply.get("blocked"):
        raise Blocked(reply.get("message") or "move refused")
    if reply.get("error"):
        raise TransportError(f"Daedalus refused the request: {reply.get('message') or 'no reason given'}")
    return Survey.from_dict(reply.get("survey"))


def avg_scores(scores):
    """Integer average of the step counts, 0 for an empty session."""
    if not scores:
        return 0
    return sum(scores) // len(scores)
