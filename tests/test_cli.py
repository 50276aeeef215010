import csv
import re
from pathlib import Path

import pytest

from labyrinth import cli
from labyrinth.client import LocalTransport
from labyrinth.server import Session


@pytest.mark.unit
def test_parser_defaults():
    args = cli.build_parser().parse_args(["icarus"])
    assert args.func is cli.run_client
    assert args.port == 8001
    assert args.times == cli.RUNS
    assert args.strategy == "nearest"
    assert args.max_steps == 1000

    args = cli.build_parser().parse_args(["server", "--maze", "circle", "--width", "20"])
    assert args.func is cli.run_daedalus
    assert args.maze == "circle"
    assert args.width == 20
    assert args.height == cli.MAZE_HEIGHT


@pytest.mark.unit
def test_parser_rejects_unknown_generator():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["daedalus", "--maze", "spiral"])


@pytest.mark.integration
def test_simulate_writes_results(tmp_path, capsys):
    out_dir = tmp_path / "metrics"
    code = cli.main([
        "--seed", "3", "--log-level", "WARNING",
        "simulate", "--width", "6", "--height", "5", "--runs", "2",
        "--generators", "prim", "void", "--strategies", "classic", "nearest",
        "--out_dir", str(out_dir),
    ])
    assert code == 0

    with open(out_dir / "raw_results.csv", newline="", encoding="utf-8") as f:
        raw = list(csv.DictReader(f))
    assert len(raw) == 2 * 2 * 2
    assert {r["algorithm"] for r in raw} == {"prim", "void"}
    assert all(r["victory"] == "True" for r in raw)

    with open(out_dir / "summary.csv", newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == 4

    assert "Labyrinth solved 8 times" in capsys.readouterr().out


@pytest.mark.integration
def test_client_command(monkeypatch, capsys):
    session = Session(5, 5, "rightdown")
    monkeypatch.setattr(cli, "DaedalusClient", lambda **kwargs: LocalTransport(session))

    assert cli.main(["--seed", "1", "icarus", "--times", "2", "--strategy", "classic"]) == 0
    out = capsys.readouterr().out
    assert "Solving 2 times" in out
    assert "Labyrinth solved 2 times" in out
    assert len(session.scores) == 2


@pytest.mark.unit
def test_imported_libraries_are_declared():
    tomllib = pytest.importorskip("tomllib")
    with open(Path(__file__).resolve().parents[1] / "pyproject.toml", "rb") as f:
        dependencies = tomllib.load(f)["project"]["dependencies"]
    names = {re.split(r"[<>=!~ \[;]", d, maxsplit=1)[0].lower() for d in dependencies}
    assert {"flask", "werkzeug", "requests", "matplotlib", "graphviz"} <= names
