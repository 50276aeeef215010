import csv

import pytest

from labyrinth import scores


def row(algorithm, strategy, steps, victory=True, **extra):
    base = {
        "algorithm": algorithm,
        "strategy": strategy,
        "victory": victory,
        "steps": steps,
        "retreats": 0,
        "searches": 0,
        "unique_explored": steps,
        "elapsed_sec": 0.01,
    }
    base.update(extra)
    return base


@pytest.mark.unit
def test_summary_line_counts_only_victories():
    rows = [row("prim", "classic", 10), row("prim", "classic", 21), row("prim", "classic", 1000, victory=False)]
    assert scores.solved_scores(rows) == [10, 21]
    assert scores.summary_line(rows) == "Labyrinth solved 2 times with an avg of 15 steps"
    assert scores.summary_line([]) == "Labyrinth solved 0 times with an avg of 0 steps"


@pytest.mark.unit
def test_aggregate_by_generator_and_strategy():
    rows = [
        row("prim", "classic", 10),
        row("prim", "classic", 30, retreats=4),
        row("prim", "nearest", 12),
        row("void", "nearest", 5, victory=False),
    ]
    summary = {(s["algorithm"], s["strategy"]): s for s in scores.aggregate_results(rows)}

    assert set(summary) == {("prim", "classic"), ("prim", "nearest"), ("void", "nearest")}
    classic = summary[("prim", "classic")]
    assert classic["count"] == 2
    assert classic["steps_avg"] == 20
    assert classic["steps_min"] == 10
    assert classic["steps_max"] == 30
    assert classic["steps_stdev"] == pytest.approx(10.0)
    assert classic["retreats_max"] == 4
    assert classic["victory_rate"] == 1.0

    assert summary[("prim", "nearest")]["steps_stdev"] == 0
    assert summary[("void", "nearest")]["victory_rate"] == 0.0


@pytest.mark.unit
def test_unfinished_runs_without_metrics():
    rows = [{"strategy": "nearest", "victory": False, "steps": 0, "elapsed_sec": 0.0}]
    (entry,) = scores.aggregate_results(rows, group_by=("strategy",))
    assert entry["retreats_avg"] == 0
    assert entry["count"] == 1


@pytest.mark.unit
def test_write_csv_uses_every_column(tmp_path):
    path = tmp_path / "out" / "raw.csv"
    scores.write_csv(str(path), [{"a": 1}, {"a": 2, "b": "x"}])
    with open(path, newline="", encoding="utf-8") as f:
        lines = list(csv.DictReader(f))
    assert lines == [{"a": "1", "b": ""}, {"a": "2", "b": "x"}]


@pytest.mark.unit
def test_write_csv_skips_empty_results(tmp_path):
    path = tmp_path / "empty.csv"
    scores.write_csv(str(path), [])
    assert not path.exists()


@pytest.mark.unit
@pytest.mark.skipif(not scores.HAS_MPL, reason="matplotlib not installed")
def test_plot_metric(tmp_path):
    summary = scores.aggregate_results([row("prim", "classic", 10), row("void", "nearest", 7)])
    out = tmp_path / "steps_avg.png"
    assert scores.plot_metric(summary, "steps_avg", str(out))
    assert out.stat().st_size > 0
