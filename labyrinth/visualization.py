from graphviz import Digraph

# Glyphs for the console view, each room is drawn as a 3x3 block
CORNERS = ("▛", "▜", "▙", "▟")
WALL_TOP, WALL_BOTTOM, WALL_LEFT, WALL_RIGHT = "▀", "▄", "▌", "▐"
VISITED_MARK = "·"
TREASURE_MARK = "⚿"
START_MARK = "⚑"
ICARUS_MARK = "☉"


def maze_string(maze):
    """Text picture of the maze as Daedalus sees it, Icarus included."""
    lines = []
    for y in range(maze.height):
        top, middle, bottom = [], [], []
        for x in range(maze.width):
            room = maze.get_room(x, y)
            walls = room.walls

            center = " "
            if room.visited:
                center = VISITED_MARK
            if room.treasure:
                center = TREASURE_MARK
            elif room.start:
                center = START_MARK
            if maze.icarus is not None and tuple(maze.icarus) == (x, y):
                center = ICARUS_MARK

            top.append(CORNERS[0] + (WALL_TOP if walls.top else " ") + CORNERS[1])
            middle.append((WALL_LEFT if walls.left else " ") + center + (WALL_RIGHT if walls.right else " "))
            bottom.append(CORNERS[2] + (WALL_BOTTOM if walls.bottom else " ") + CORNERS[3])
        lines.extend(["".join(top), "".join(middle), "".join(bottom)])
    return "\n".join(lines) + "\n"


def exploration_graph(edges, name="icarus"):
    """Tree of the rooms Icarus discovered, one edge per forward step."""
    dot = Digraph(name=name)
    for parent, child in edges:
        dot.node(str(tuple(parent)))
        dot.node(str(tuple(child)))
        dot.edge(str(tuple(parent)), str(tuple(child)))
    return dot


def render_exploration(edges, path, view=False):
    """Write the exploration tree next to `path` (graphviz picks the extension)."""
    return exploration_graph(edges).render(path, view=view)
