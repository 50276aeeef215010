"""
Maze generation for Daedalus.

Every generator receives a grid of rooms and a random source and carves (or
raises) walls on it. Carving is always done on both sides of an edge so that
neighbouring rooms agree on the wall between them.

Start and treasure are placed once carving is finished, in two distinct
random rooms.
"""
import logging
import random

from labyrinth.daedalus import Maze
from labyrinth.mazelib import (
    BOTTOM,
    LEFT,
    OFFSETS,
    RIGHT,
    TOP,
    Room,
    Survey,
    opposite,
)

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "prim"

# Hand-made 4x4 tile used by the pattern maze: (top, right, bottom, left) per room
PATTERN = (
    ((1, 0, 0, 1), (1, 1, 1, 0), (1, 0, 0, 1), (1, 1, 0, 0)),
    ((0, 1, 0, 1), (1, 0, 0, 1), (0, 1, 1, 0), (0, 1, 1, 1)),
    ((0, 0, 1, 1), (0, 0, 0, 0), (1, 1, 0, 0), (1, 1, 0, 1)),
    ((1, 0, 1, 1), (0, 1, 1, 0), (0, 0, 1, 1), (0, 1, 1, 0)),
)
PATTERN_SIZE = 4


# --- Grid helpers ---

def empty_rooms(width, height):
    """Rooms without any wall. Starting point for additive algorithms."""
    return [[Room() for _ in range(width)] for _ in range(height)]


def full_rooms(width, height):
    """Rooms with all four walls. Starting point for carving algorithms."""
    return [[Room(walls=Survey.closed()) for _ in range(width)] for _ in range(height)]


def _neighbor(rooms, x, y, direction):
    dx, dy = OFFSETS[direction]
    nx, ny = x + dx, y + dy
    if 0 <= ny < len(rooms) and 0 <= nx < len(rooms[0]):
        return nx, ny
    return None


def carve(rooms, x, y, direction):
    """Knock down the wall on `direction` of (x, y) and its twin on the neighbour."""
    rooms[y][x].walls.set_wall(direction, False)
    neighbor = _neighbor(rooms, x, y, direction)
    if neighbor is not None:
        nx, ny = neighbor
        rooms[ny][nx].walls.set_wall(opposite(direction), False)


def build_wall(rooms, x, y, direction):
    rooms[y][x].walls.set_wall(direction, True)
    neighbor = _neighbor(rooms, x, y, direction)
    if neighbor is not None:
        nx, ny = neighbor
        rooms[ny][nx].walls.set_wall(opposite(direction), True)


def _backtrack_from(rooms, start, rng):
    """Carve a spanning tree over every unvisited room reachable from `start`.

    High-level overview:
      - The stack holds the rooms from `start` to the current room.
      - Directions are scanned clockwise starting just after the direction we
        came in from, shifted by a random offset. The first unvisited
        neighbour wins: we carve into it and push it.
      - When no neighbour is left we pop (retreat) without touching walls.
    Rooms already marked visited act as "already carved" and are never entered.
    """
    sx, sy = start
    rooms[sy][sx].visited = True
    stack = [start]
    last_direction = rng.randrange(4)

    while stack:
        x, y = stack[-1]
        first = (last_direction + 1 + rng.randrange(4)) % 4
        for n in range(4):
            direction = (first + n) % 4
            neighbor = _neighbor(rooms, x, y, direction)
            if neighbor is None:
                continue
            nx, ny = neighbor
            if rooms[ny][nx].visited:
                continue
            carve(rooms, x, y, direction)
            rooms[ny][nx].visited = True
            stack.append(neighbor)
            last_direction = direction
            break
        else:
            stack.pop()


# --- Algorithms ---

def _generate_prim(width, height, rng):
    """Randomized Prim's algorithm.

    Algorithm:
      1. Mark a random room visited and put its walls in the frontier
      2. While the frontier is not empty:
         a. Take a uniformly random wall out of the frontier
         b. If the room on its far side is already visited, drop it
         c. Otherwise carve it, mark the room visited and add its walls
            towards unvisited rooms to the frontier
      3. Result: spanning tree, short dead ends and a lot of branching
    """
    rooms = full_rooms(width, height)
    x, y = rng.randrange(width), rng.randrange(height)
    rooms[y][x].visited = True

    frontier = []

    def add_frontier_walls(cx, cy):
        for direction in (TOP, RIGHT, BOTTOM, LEFT):
            neighbor = _neighbor(rooms, cx, cy, direction)
            if neighbor is not None and not rooms[neighbor[1]][neighbor[0]].visited:
                frontier.append((cx, cy, direction))

    add_frontier_walls(x, y)

    while frontier:
        cx, cy, direction = frontier.pop(rng.randrange(len(frontier)))
        nx, ny = _neighbor(rooms, cx, cy, direction)
        if rooms[ny][nx].visited:
            continue
        carve(rooms, cx, cy, direction)
        rooms[ny][nx].visited = True
        add_frontier_walls(nx, ny)

    return rooms


def _generate_backtrack(width, height, rng):
    """Recursive backtracker (randomized depth-first search): long corridors."""
    rooms = full_rooms(width, height)
    _backtrack_from(rooms, (rng.randrange(width), rng.randrange(height)), rng)
    return rooms


def _generate_rightdown(width, height, rng):
    """Every right and down wall in random order; carve into unvisited rooms.

    Each room except (0, 0) is entered exactly once, from its left or top
    neighbour, so following those edges back always ends at (0, 0): a
    spanning tree rooted at the top-left corner.
    """
    rooms = full_rooms(width, height)
    walls = [(x, y, RIGHT) for x in range(width - 1) for y in range(height)]
    walls += [(x, y, BOTTOM) for x in range(width) for y in range(height - 1)]
    rng.shuffle(walls)

    rooms[0][0].visited = True
    for x, y, direction in walls:
        nx, ny = _neighbor(rooms, x, y, direction)
        if not rooms[ny][nx].visited:
            carve(rooms, x, y, direction)
            rooms[ny][nx].visited = True
    return rooms


def _generate_circle(width, height, rng):
    """Concentric square rings of walls, each with a single gap.

    Ring k is the wall between the rooms at distance k - 1 and k from the
    border. Only closed rings (k smaller than half the width and half the
    height) need a gap; a gap is opened on a random side at a random room.
    """
    rooms = empty_rooms(width, height)
    cx, cy = width // 2, height // 2

    # ring 0 is the border, even on a grid one room wide or tall
    for i in range(max(1, cx)):
        for j in range(i, height - i):
            build_wall(rooms, i, j, LEFT)
            build_wall(rooms, width - 1 - i, j, RIGHT)

    for j in range(max(1, cy)):
        for i in range(j, width - j):
            build_wall(rooms, i, j, TOP)
            build_wall(rooms, i, height - 1 - j, BOTTOM)

    for k in range(1, min(cx, cy)):
        side = rng.randrange(4)
        if side == TOP:
            carve(rooms, rng.randint(k, width - 1 - k), k, TOP)
        elif side == BOTTOM:
            carve(rooms, rng.randint(k, width - 1 - k), height - 1 - k, BOTTOM)
        elif side == LEFT:
            carve(rooms, k, rng.randint(k, height - 1 - k), LEFT)
        else:
            carve(rooms, width - 1 - k, rng.randint(k, height - 1 - k), RIGHT)

    return rooms


def _generate_horizontal_spiky(width, height, rng):
    """Rows are open corridors, split in two halves by a central column wall.

    The left half is tied together by its first column, the right half by
    its last column. That column is cut at the middle row, so each part of
    the right half reaches the left half through its own gap: one in the
    top row, one in the bottom row.
    """
    rooms = full_rooms(width, height)
    middle_x, middle_y = width // 2, height // 2

    for y in range(height):
        for x in range(width - 1):
            if x != middle_x:
                carve(rooms, x, y, RIGHT)
    for y in range(height - 1):
        carve(rooms, 0, y, BOTTOM)
        carve(rooms, width - 1, y, BOTTOM)

    if middle_x + 1 < width:
        carve(rooms, middle_x, 0, RIGHT)
        carve(rooms, middle_x, height - 1, RIGHT)
        if middle_y + 1 < height:
            build_wall(rooms, width - 1, middle_y, BOTTOM)
    return rooms


def _generate_vertical_spiky(width, height, rng):
    """Columns are open corridors, split in two halves by a central row wall.

    The first and last rows join the columns of each half, and a single gap
    in the first column joins the two halves.
    """
    rooms = full_rooms(width, height)
    middle_y = height // 2

    for x in range(width):
        for y in range(height - 1):
            if y != middle_y - 1:
                carve(rooms, x, y, BOTTOM)
    for x in range(width - 1):
        carve(rooms, x, 0, RIGHT)
        carve(rooms, x, height - 1, RIGHT)

    if middle_y >= 1:
        carve(rooms, 0, middle_y - 1, BOTTOM)
    return rooms


def _generate_void(width, height, rng):
    """No inner wall at all, only the border."""
    rooms = empty_rooms(width, height)
    for y in range(height):
        rooms[y][0].walls.left = True
        rooms[y][width - 1].walls.right = True
    for x in range(width):
        rooms[0][x].walls.top = True
        rooms[height - 1][x].walls.bottom = True
    return rooms


def _generate_pattern(width, height, rng):
    """Tile PATTERN over the grid, backtracker for the leftovers, one gap per shared tile edge."""
    rooms = full_rooms(width, height)
    tiles_x, tiles_y = width // PATTERN_SIZE, height // PATTERN_SIZE

    for tx in range(tiles_x):
        for ty in range(tiles_y):
            for dy, row in enumerate(PATTERN):
                for dx, walls in enumerate(row):
                    room = rooms[PATTERN_SIZE * ty + dy][PATTERN_SIZE * tx + dx]
                    room.walls = Survey(*(bool(w) for w in walls))
                    room.visited = True

    # Rooms outside the tiles form an L-shaped strip around the bottom-right corner
    if width > PATTERN_SIZE * tiles_x or height > PATTERN_SIZE * tiles_y:
        _backtrack_from(rooms, (width - 1, height - 1), rng)

    for tx in range(tiles_x):
        for ty in range(tiles_y):
            left, top = PATTERN_SIZE * tx, PATTERN_SIZE * ty
            if left + PATTERN_SIZE < width:
                carve(rooms, left + PATTERN_SIZE - 1, top + rng.randrange(PATTERN_SIZE), RIGHT)
            if top + PATTERN_SIZE < height:
                carve(rooms, left + rng.randrange(PATTERN_SIZE), top + PATTERN_SIZE - 1, BOTTOM)

    return rooms


ALGORITHMS = {
    "prim": _generate_prim,
    "backtrack": _generate_backtrack,
    "rightdown": _generate_rightdown,
    "circle": _generate_circle,
    "horizontalspiky": _generate_horizontal_spiky,
    "verticalspiky": _generate_vertical_spiky,
    "void": _generate_void,
    "pattern": _generate_pattern,
}


def place_start_and_treasure(maze, rng):
    """Random start and treasure, never the same room (no fun then)."""
    sx, sy = rng.randrange(maze.width), rng.randrange(maze.height)
    tx, ty = rng.randrange(maze.width), rng.randrange(maze.height)
    while (sx, sy) == (tx, ty):
        tx, ty = rng.randrange(maze.width), rng.randrange(maze.height)
    maze.set_start_point(sx, sy)
    maze.set_treasure(tx, ty)


def generate(width, height, algorithm=DEFAULT_ALGORITHM, rng=None):
    """Build a maze of `width` x `height` rooms with the named algorithm."""
    if width < 1 or height < 1:
        raise ValueError(f"maze dimensions must be at least 1x1, got {width}x{height}")
    if width * height < 2:
        raise ValueError("a maze needs at least two rooms to hold a start and a treasure")
    try:
        builder = ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"unknown maze algorithm {algorithm!r}, expected one of {sorted(ALGORITHMS)}") from None

    if rng is None:
        rng = random.Random()

    maze = Maze(builder(width, height, rng))
    place_start_and_treasure(maze, rng)
    logger.info("Generated %dx%d '%s' maze, start %s, treasure %s",
                width, height, algorithm, tuple(maze.start), tuple(maze.treasure))
    return maze
