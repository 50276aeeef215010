"""
Daedalus backend (Flask).
Endpoints:
  GET /awake              -> builds a new maze, returns { survey, victory: false }
  GET /move/<direction>   -> direction in up|right|down|left
                             200 { survey, victory }            on a legal move
                             200 { survey, victory: true, ... } when the treasure is reached
                             409 { error: true, blocked: true } wall or grid edge
                             409 { error: true, message }       no maze yet
                             400 { error: true, message }       unknown direction
  GET /done               -> returns the session results and ends the session
"""
import logging
import random

from flask import Flask, jsonify

from labyrinth import visualization
from labyrinth.generators import DEFAULT_ALGORITHM, generate
from labyrinth.mazelib import (
    Blocked,
    OutOfBounds,
    Victory,
    avg_scores,
    make_reply,
    parse_direction,
)

logger = logging.getLogger(__name__)


class Session:
    """One maze at a time and the scores of every maze solved so far.

    The session replaces any process-wide "current maze": the HTTP layer and
    the in-process transport both talk to an explicit Session object.
    """

    def __init__(self, width, height, algorithm=DEFAULT_ALGORITHM, rng=None, show_maze=False):
        self.width = width
        self.height = height
        self.algorithm = algorithm
        self.rng = rng or random.Random()
        self.show_maze = show_maze
        self.maze = None
        self.scores = []
        self._scored = False

    def awake(self):
        """Create a new maze and report the walls around Icarus."""
        self.maze = generate(self.width, self.height, self.algorithm, self.rng)
        self._scored = False
        if self.show_maze:
            print(visualization.maze_string(self.maze))
        return make_reply(self.maze.survey(*self.maze.icarus))

    def move(self, direction):
        """Returns (reply, status) for a move request."""
        if self.maze is None:
            return make_reply(error=True, message="no maze yet, call /awake first"), 409

        try:
            direction = parse_direction(direction)
        except ValueError as e:
            return make_reply(error=True, message=str(e)), 400

        try:
            survey = self.maze.move(direction)
        except Victory as v:
            return self._victory(v), 200
        except (Blocked, OutOfBounds) as e:
            return make_reply(blocked=True, message=str(e)), 409

        return make_reply(survey), 200

    def _victory(self, victory):
        if not self._scored:
            self.scores.append(victory.steps)
            self._scored = True
            print(victory.message)
        survey = self.maze.survey(*self.maze.treasure)
        return make_reply(survey, victory=True, message=victory.message, steps=victory.steps)

    def results(self):
        return f"Labyrinth solved {len(self.scores)} times with an avg of {avg_scores(self.scores)} steps"


def create_app(session, on_done=None):
    """Flask app bound to `session`. `on_done` runs after /done has been answered."""
    app = Flask(__name__)

    @app.route('/awake')
    def awake():
        return jsonify(session.awake())

    @app.route('/move/<direction>')
    def move_direction(direction):
        reply, status = session.move(direction)
        return jsonify(reply), status

    @app.route('/done')
    def done():
        results = session.results()
        print(results)
        response = jsonify({
            'message': results,
            'scores': list(session.scores),
            'average': avg_scores(session.scores),
        })
        if on_done is not None:
            response.call_on_close(on_done)
        return response

    return app
