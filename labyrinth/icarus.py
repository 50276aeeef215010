"""
Icarus: wakes up somewhere in the labyrinth and looks for the treasure.

Due to the darkness he only sees the walls of the room he stands in. He takes
one step and then discovers the walls of the new room. He does not know the
size of the maze, so his own map starts at (0, 0) on the room he woke up in
and grows in every direction, negative coordinates included.

Two strategies:
  - classic: depth-first exploration with a breadcrumb trail. At a dead end
    Icarus walks back one room and tries again from there.
  - nearest: same forward exploration, but at a dead end he searches his own
    map for the closest room he has not visited yet and walks straight there.

Each strategy picks the first direction to try with a policy:
  - same-direction: keep going the way he went last
  - random: any direction
  - clockwise: always start at the top and turn clockwise
"""
import logging
import random
import time
from dataclasses import dataclass

from labyrinth.mazelib import (
    LEFT,
    TOP,
    Blocked,
    Coordinate,
    NoPath,
    Survey,
    TransportError,
    Victory,
    direction_between,
    move_coordinate,
    rotation,
)

logger = logging.getLogger(__name__)

MAX_STEPS = 1000

POLICIES = ("same-direction", "random", "clockwise")


@dataclass
class CellRecord:
    """What Icarus remembers about a room of his own map."""
    visited: bool = False
    walls: Survey = None


# --- Nearest unvisited room ---

def find_nearest_unvisited(known, path, max_length):
    """Shortest route from path[-1] to a room Icarus has not visited yet.

    The search only walks through visited rooms (their walls are known) and
    never enters a room twice on the same route. The first room that is not
    visited ends a route. Among the shortest routes the first one in scan
    order wins (top, right, bottom, left at every room).

    Returns (route, len(route)) with route starting at path[0], or
    ([], max_length) when no route shorter than `max_length` rooms exists.

    Routes are searched depth-first with an explicit stack, one depth bound at
    a time (iterative deepening). This gives the same answer as a full
    depth-first search that keeps the shortest route found so far, while
    never following a branch longer than the answer. On very open maps the
    number of routes still grows exponentially with the distance.
    """
    path = list(path)
    if not path:
        raise ValueError("the search needs a starting room")
    if len(path) >= max_length:
        return [], max_length

    origin = known.get(path[-1])
    if origin is None or not origin.visited:
        return path, len(path)

    for limit in range(len(path) + 1, max_length):
        route, truncated = _bounded_search(known, path, limit)
        if route is not None:
            return route, len(route)
        if not truncated:
            # every route died out before reaching the bound: a longer bound won't help
            break
    return [], max_length


def _bounded_search(known, path, limit):
    """Depth-first search for routes of at most `limit` rooms.

    Returns (route or None, truncated) where truncated tells whether some
    route was cut short by the bound.
    """
    truncated = False
    stack = [(path, TOP)]
    while stack:
        route, direction = stack.pop()
        if direction > LEFT:
            continue
        # resume this room at the next direction once the current one is done
        stack.append((route, direction + 1))

        walls = known[route[-1]].walls
        if walls.has_wall(direction):
            continue
        neighbor = move_coordinate(route[-1], direction)
        if neighbor in route:
            continue

        candidate = route + [neighbor]
        record = known.get(neighbor)
        if record is None or not record.visited:
            return candidate, truncated
        if len(candidate) < limit:
            stack.append((candidate, TOP))
        else:
            truncated = True
    return None, truncated


# --- Explorers ---

class Explorer:
    """Common machinery: policy, moves, breadcrumb trail and metrics.

    Subclasses decide what "visited" means and what to do at a dead end.

    Metrics:
      - moves: successful Move calls, the victory move included
      - retreats: single steps back along the breadcrumb trail
      - searches: nearest-unvisited searches started
      - search_walks: searches that produced a route Icarus followed
      - blocked: moves refused by Daedalus (should stay 0)
      - unique_explored: rooms Icarus has set foot in
    """
    name = None

    def __init__(self, transport, policy="same-direction", rng=None, max_steps=MAX_STEPS):
        if policy not in POLICIES:
            raise ValueError(f"unknown policy {policy!r}, expected one of {POLICIES}")
        self.transport = transport
        self.policy = policy
        self.rng = rng or random.Random()
        self.max_steps = max_steps

        self.position = Coordinate(0, 0)
        self.walls = None
        self.breadcrumbs = []
        self.previous_direction = self.rng.randrange(4)
        # forward discoveries (from, to), the tree of the exploration
        self.edges = []
        self.metrics = {
            'moves': 0,
            'retreats': 0,
            'searches': 0,
            'search_walks': 0,
            'blocked': 0,
            'unique_explored': 0,
        }

    @property
    def steps_left(self):
        return self.max_steps - self.metrics['moves']

    def awake(self):
        self.walls = self.transport.awake()
        self.position = Coordinate(0, 0)
        self.breadcrumbs = [self.position]
        self._mark_visited(self.position, self.walls)

    def _is_visited(self, coord):
        raise NotImplementedError

    def _mark_visited(self, coord, walls):
        raise NotImplementedError

    def _dead_end(self):
        raise NotImplementedError

    def _preferred_direction(self):
        if self.policy == "random":
            return self.rng.randrange(4)
        if self.policy == "clockwise":
            return TOP
        return self.previous_direction

    def _move(self, direction):
        """One round trip to Daedalus. Victory is passed on to the caller."""
        target = move_coordinate(self.position, direction)
        try:
            walls = self.transport.move(direction)
        except Victory:
            self.metrics['moves'] += 1
            self.position = target
            raise
        self.metrics['moves'] += 1
        self.position = target
        self.walls = walls
        return walls

    def _record_wall(self, direction):
        self.metrics['blocked'] += 1
        self.walls.set_wall(direction, True)

    def step(self):
        """One decision: a step into a new room, or the way out of a dead end."""
        for direction in rotation(self._preferred_direction()):
            if self.walls.has_wall(direction):
                continue
            target = move_coordinate(self.position, direction)
            if self._is_visited(target):
                continue

            origin = self.position
            try:
                walls = self._move(direction)
            except Blocked:
                logger.debug("Move %d from %s refused, trying the next direction", direction, tuple(origin))
                self._record_wall(direction)
                continue
            self._mark_visited(target, walls)
            self.previous_direction = direction
            self.breadcrumbs.append(target)
            self.edges.append((origin, target))
            return

        self._dead_end()

    def _retreat(self):
        """Walk back exactly one room along the breadcrumb trail."""
        if len(self.breadcrumbs) < 2:
            raise NoPath("No path to the treasure")
        self.breadcrumbs.pop()
        target = self.breadcrumbs[-1]
        direction = direction_between(self.position, target)
        self.metrics['retreats'] += 1
        try:
            walls = self._move(direction)
        except Blocked as e:
            raise NoPath(f"breadcrumb trail goes through a wall at {tuple(self.position)}") from e
        self._mark_visited(target, walls)


class ClassicBacktracker(Explorer):
    """Depth-first exploration; only remembers which rooms were visited."""
    name = "classic"

    def __init__(self, transport, policy="same-direction", rng=None, max_steps=MAX_STEPS):
        super().__init__(transport, policy, rng, max_steps)
        self.visited = set()

    def _is_visited(self, coord):
        return coord in self.visited

    def _mark_visited(self, coord, walls):
        self.visited.add(coord)
        self.metrics['unique_explored'] = len(self.visited)

    def _dead_end(self):
        self._retreat()


class NearestUnvisitedBacktracker(Explorer):
    """Depth-first exploration plus a shortcut to the closest unexplored room."""
    name = "nearest"

    def __init__(self, transport, policy="same-direction", rng=None, max_steps=MAX_STEPS):
        super().__init__(transport, policy, rng, max_steps)
        self.known = {}

    def _is_visited(self, coord):
        record = self.known.get(coord)
        return record is not None and record.visited

    def _mark_visited(self, coord, walls):
        self.known[coord] = CellRecord(visited=True, walls=walls)
        self.metrics['unique_explored'] = len(self.known)

    def _dead_end(self):
        self.metrics['searches'] += 1
        # routes of up to steps_left moves, i.e. steps_left + 1 rooms, are accepted
        max_length = self.steps_left + 2
        route, length = find_nearest_unvisited(self.known, [self.position], max_length)
        if length >= max_length or length < 2:
            logger.debug("No unvisited room within reach of %s, stepping back", tuple(self.position))
            self._retreat()
            return
        self._walk(route)

    def _walk(self, route):
        for target in route[1:]:
            origin = self.position
            direction = direction_between(origin, target)
            try:
                walls = self._move(direction)
            except Blocked:
                self._record_wall(direction)
                return
            self._mark_visited(target, walls)
            self.previous_direction = direction
            self.breadcrumbs.append(target)
        self.edges.append((route[-2], route[-1]))
        self.metrics['search_walks'] += 1


STRATEGIES = {
    ClassicBacktracker.name: ClassicBacktracker,
    NearestUnvisitedBacktracker.name: NearestUnvisitedBacktracker,
}


def make_explorer(transport, strategy="nearest", policy="same-direction", rng=None, max_steps=MAX_STEPS):
    try:
        cls = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"unknown strategy {strategy!r}, expected one of {sorted(STRATEGIES)}") from None
    return cls(transport, policy=policy, rng=rng, max_steps=max_steps)


def solve_maze(transport, strategy="nearest", policy="same-direction", max_steps=MAX_STEPS, rng=None):
    """Explore until Victory or until `max_steps` moves have been spent.

    Returns (result, explorer). NoPath and TransportError propagate.
    """
    explorer = make_explorer(transport, strategy, policy, rng, max_steps)
    t0 = time.perf_counter()
    victory = None

    explorer.awake()
    try:
        while explorer.steps_left > 0:
            explorer.step()
    except Victory as v:
        victory = v
    elapsed = time.perf_counter() - t0

    result = {
        "strategy": strategy,
        "policy": policy,
        "victory": victory is not None,
        "steps": explorer.metrics['moves'],
        "server_steps": victory.steps if victory is not None else None,
        "elapsed_sec": elapsed,
    }
    result.update(explorer.metrics)
    if victory is None:
        logger.info("Gave up after %d moves", explorer.metrics['moves'])
    else:
        logger.info("%s (%s / %s)", victory.message, strategy, policy)
    return result, explorer


def run_icarus(transport, times, strategy="nearest", policy="same-direction", max_steps=MAX_STEPS,
               rng=None, abort_on_error=False):
    """Solve `times` mazes in a row, then tell Daedalus we are done.

    A run lost to a transport failure is logged and recorded as unfinished,
    unless `abort_on_error` is set.
    """
    rng = rng or random.Random()
    print(f"Solving {times} times")
    results = []
    for run in range(times):
        try:
            result, _ = solve_maze(transport, strategy, policy, max_steps, rng)
        except TransportError as e:
            if abort_on_error:
                raise
            logger.error("Run %d lost: %s", run + 1, e)
            result = {"strategy": strategy, "policy": policy, "victory": False, "steps": 0,
                      "server_steps": None, "elapsed_sec": 0.0}
        result["run"] = run + 1
        results.append(result)

    try:
        transport.done()
    except TransportError as e:
        logger.error("Could not close the session: %s", e)
    return results
