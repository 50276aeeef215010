import csv
import os
import statistics

# Optional plotting
try:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    HAS_MPL = True
except ImportError:
    HAS_MPL = False

from labyrinth.mazelib import avg_scores

METRICS = [
    "steps",
    "retreats",
    "searches",
    "unique_explored",
    "elapsed_sec",
]


def solved_scores(rows):
    """Step counts of the runs that reached the treasure."""
    return [r["steps"] for r in rows if r.get("victory")]


def summary_line(rows):
    scores = solved_scores(rows)
    return f"Labyrinth solved {len(scores)} times with an avg of {avg_scores(scores)} steps"


def aggregate_results(rows, group_by=("algorithm", "strategy")):
    # Aggregate by group-by keys
    grouped = {}
    for r in rows:
        key = tuple(r.get(k) for k in group_by)
        grouped.setdefault(key, []).append(r)

    def agg_stat(values):
        if not values:
            return {"avg": 0, "min": 0, "max": 0, "stdev": 0}
        return {
            "avg": statistics.mean(values),
            "min": min(values),
            "max": max(values),
            "stdev": statistics.pstdev(values) if len(values) > 1 else 0,
        }

    summary = []
    for key, items in grouped.items():
        entry = dict(zip(group_by, key))
        entry["count"] = len(items)
        for m in METRICS:
            stats = agg_stat([it[m] for it in items if it.get(m) is not None])
            for stat_name, value in stats.items():
                entry[f"{m}_{stat_name}"] = value
        entry["victory_rate"] = sum(1 for it in items if it.get("victory")) / len(items)
        summary.append(entry)
    return summary


def write_csv(path, rows):
    if not rows:
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fieldnames = []
    for r in rows:
        for k in r:
            if k not in fieldnames:
                fieldnames.append(k)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in rows:
            writer.writerow(r)


def plot_metric(summary, metric_key, out_path, group_by=("algorithm", "strategy")):
    if not HAS_MPL:
        return False
    labels = []
    values = []
    for row in summary:
        gen, strategy = (row.get(k, "") for k in group_by)
        labels.append(f"{strategy}\n({gen})")
        values.append(row.get(metric_key, 0))
    plt.figure(figsize=(max(8, len(labels) * 0.6), 5))
    plt.bar(range(len(values)), values)
    plt.xticks(range(len(values)), labels, rotation=45, ha="right")
    plt.ylabel(metric_key)
    plt.tight_layout()
    directory = os.path.dirname(out_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.savefig(out_path)
    plt.close()
    return True
