"""
How Icarus talks to Daedalus.

Both transports expose the same three calls:
    awake()          -> Survey of the room Icarus wakes up in
    move(direction)  -> Survey of the new room, raises Victory or Blocked
    done()           -> tell Daedalus the session is over
"""
import logging

import requests

from labyrinth.mazelib import DIRECTION_NAMES, TransportError, parse_direction, survey_from_reply

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8001


class DaedalusClient:
    """HTTP transport: one blocking GET per call.

    Connection problems and unreadable replies on /awake and /done are
    retried `retries` times, then raised as TransportError. A move is sent
    once: Daedalus may have applied it before the reply was lost, and a
    second try would walk Icarus one room further than he thinks.
    A 409 is a normal answer (a wall), never retried.
    """

    def __init__(self, port=DEFAULT_PORT, host=DEFAULT_HOST, retries=0, timeout=5.0, http=None):
        self.base_url = f"http://{host}:{port}"
        self.retries = max(0, retries)
        self.timeout = timeout
        self.http = http or requests.Session()

    def _get(self, path, retry=True):
        url = self.base_url + path
        attempts = self.retries + 1 if retry else 1
        last_error = None
        for attempt in range(attempts):
            try:
                response = self.http.get(url, timeout=self.timeout)
                return response.json()
            except (requests.RequestException, ValueError) as e:
                last_error = e
                logger.warning("Request to %s failed (attempt %d/%d): %s",
                               url, attempt + 1, attempts, e)
        raise TransportError(f"could not talk to Daedalus at {url}: {last_error}")

    def awake(self):
        return survey_from_reply(self._get("/awake"))

    def move(self, direction):
        name = DIRECTION_NAMES[parse_direction(direction)]
        return survey_from_reply(self._get("/move/" + name, retry=False))

    def done(self):
        return self._get("/done")


class LocalTransport:
    """Same calls, answered by an in-process Session (no network)."""

    def __init__(self, session):
        self.session = session

    def awake(self):
        return survey_from_reply(self.session.awake())

    def move(self, direction):
        reply, _ = self.session.move(direction)
        return survey_from_reply(reply)

    def done(self):
        return {
            "message": self.session.results(),
            "scores": list(self.session.scores),
        }
