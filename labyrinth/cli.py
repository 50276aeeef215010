import argparse
import logging
import os
import random
import sys
import threading
import time

from werkzeug.serving import make_server

from labyrinth import scores, visualization
from labyrinth.client import DEFAULT_HOST, DEFAULT_PORT, DaedalusClient, LocalTransport
from labyrinth.generators import ALGORITHMS, DEFAULT_ALGORITHM
from labyrinth.icarus import MAX_STEPS, POLICIES, STRATEGIES, run_icarus, solve_maze
from labyrinth.mazelib import NoPath
from labyrinth.server import Session, create_app

logger = logging.getLogger(__name__)

# --- Configuration ---
MAZE_WIDTH = 15
MAZE_HEIGHT = 10
RUNS = 10
DEFAULT_STRATEGY = "nearest"
DEFAULT_POLICY = "same-direction"

DEFAULT_GENS = ["prim", "backtrack", "rightdown", "circle", "pattern"]
DEFAULT_STRATEGIES = list(STRATEGIES)

LOG_FORMAT = "%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s"


def run_daedalus(args):
    session = Session(args.width, args.height, args.maze, rng=random.Random(args.seed),
                      show_maze=args.show_maze)
    server = None

    def stop():
        # shutdown() blocks until serve_forever returns, so it can't run on the serving thread
        threading.Thread(target=server.shutdown, daemon=True).start()

    app = create_app(session, on_done=stop)
    server = make_server(args.host, args.port, app, threaded=False)
    logger.info("Daedalus listening on %s:%d (%dx%d '%s' mazes)",
                args.host, args.port, args.width, args.height, args.maze)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        # still report the session when stopped with Ctrl+C
        print(session.results())
        return 1
    return 0


def run_client(args):
    client = DaedalusClient(port=args.port, host=args.host, retries=args.retries, timeout=args.timeout)
    try:
        results = run_icarus(client, args.times, args.strategy, args.policy, args.max_steps,
                             rng=random.Random(args.seed), abort_on_error=args.abort_on_error)
    except NoPath as e:
        logger.error("%s", e)
        return 3
    print(scores.summary_line(results))
    return 0


def run_simulation(args):
    rng = random.Random(args.seed if args.seed is not None else int(time.time()))
    all_rows = []
    last_edges = []

    for gen in args.generators:
        for strategy in args.strategies:
            session = Session(args.width, args.height, gen, rng=rng)
            transport = LocalTransport(session)
            for i in range(args.runs):
                try:
                    result, explorer = solve_maze(transport, strategy, args.policy, args.max_steps, rng)
                except NoPath as e:
                    logger.error("%s on a '%s' maze: %s", strategy, gen, e)
                    return 3
                result["algorithm"] = gen
                result["width"] = args.width
                result["height"] = args.height
                result["run"] = i + 1
                all_rows.append(result)
                last_edges = explorer.edges

    os.makedirs(args.out_dir, exist_ok=True)
    scores.write_csv(os.path.join(args.out_dir, "raw_results.csv"), all_rows)

    summary = scores.aggregate_results(all_rows)
    scores.write_csv(os.path.join(args.out_dir, "summary.csv"), summary)

    # Plot a few key metrics
    if scores.HAS_MPL:
        for metric in ["steps_avg", "retreats_avg", "searches_avg", "unique_explored_avg", "elapsed_sec_avg"]:
            scores.plot_metric(summary, metric, os.path.join(args.out_dir, f"{metric}.png"))

    if args.graph:
        visualization.render_exploration(last_edges, os.path.join(args.out_dir, "exploration_tree"))

    print(scores.summary_line(all_rows))
    print(f"Wrote results to {args.out_dir}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="labyrinth", description="Daedalus builds labyrinths, Icarus solves them.")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random source")
    commands = parser.add_subparsers(dest="command", required=True)

    def add_maze_options(p):
        p.add_argument("--width", type=int, default=MAZE_WIDTH)
        p.add_argument("--height", type=int, default=MAZE_HEIGHT)

    def add_explorer_options(p):
        p.add_argument("--max-steps", type=int, default=MAX_STEPS, help="Move budget for a single run")
        p.add_argument("--policy", choices=POLICIES, default=DEFAULT_POLICY)

    def add_network_options(p):
        p.add_argument("--host", default=DEFAULT_HOST)
        p.add_argument("--port", type=int, default=DEFAULT_PORT)

    daedalus = commands.add_parser("daedalus", aliases=["server"], help="Start the labyrinth creator")
    add_maze_options(daedalus)
    add_network_options(daedalus)
    daedalus.add_argument("--maze", choices=sorted(ALGORITHMS), default=DEFAULT_ALGORITHM)
    daedalus.add_argument("--show-maze", action="store_true", help="Print every new maze")
    daedalus.set_defaults(func=run_daedalus)

    icarus = commands.add_parser("icarus", aliases=["client"], help="Start the labyrinth solver")
    add_network_options(icarus)
    add_explorer_options(icarus)
    icarus.add_argument("--strategy", choices=sorted(STRATEGIES), default=DEFAULT_STRATEGY)
    icarus.add_argument("--times", type=int, default=RUNS, help="Number of labyrinths to solve")
    icarus.add_argument("--retries", type=int, default=0, help="Retries per request on network errors")
    icarus.add_argument("--timeout", type=float, default=5.0)
    icarus.add_argument("--abort-on-error", action="store_true", help="Stop at the first network failure")
    icarus.set_defaults(func=run_client)

    simulate = commands.add_parser("simulate", help="Run every generator against every strategy in-process")
    add_maze_options(simulate)
    add_explorer_options(simulate)
    simulate.add_argument("--runs", type=int, default=RUNS, help="Runs per (generator, strategy) pair")
    simulate.add_argument("--generators", nargs="*", choices=sorted(ALGORITHMS), default=DEFAULT_GENS)
    simulate.add_argument("--strategies", nargs="*", choices=sorted(STRATEGIES), default=DEFAULT_STRATEGIES)
    simulate.add_argument("--out_dir", default="metrics_output")
    simulate.add_argument("--graph", action="store_true", help="Render the last exploration tree with graphviz")
    simulate.set_defaults(func=run_simulation)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO), format=LOG_FORMAT)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
