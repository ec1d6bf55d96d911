"""
Report Table Generator.

Turns clustering results and kNN predictions into the tables printed to the
console and saved as CSV by `main.py`:

1. Clustering summary: one row per (metric, k, run) with entropy, purity,
   WSS, BSS, iteration count and convergence flag.
2. kNN per-class tables: precision, recall and F1 of every class, with one
   row per neighbor count and one column per distance metric.
3. Elbow plots of WSS and entropy against k, one line per metric.
"""

import os
from typing import Any, Dict, List, Sequence

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from sklearn.metrics import accuracy_score, precision_recall_fscore_support

from utils.clustering_metrics import compute_clustering_metrics
from utils.records import ClassRegistry, ClusteringResult, Record


def clustering_summary_row(
        result: ClusteringResult,
        registry: ClassRegistry,
        dataset_name: str,
        run_id: int,
) -> Dict[str, Any]:
    """Flat dictionary describing one K-Means run, ready for a DataFrame."""
    row = {
        "dataset": dataset_name,
        "metric": result.metric,
        "n_clusters": result.k,
        "run_id": run_id,
        "empty_clusters": sum(1 for c in result.clusters if c.is_empty()),
    }
    row.update(compute_clustering_metrics(result, registry))
    return row


def knn_class_report(
        queries: Sequence[Record],
        predictions: Sequence[str],
        registry: ClassRegistry,
        metric: str,
        n_neighbors: int,
) -> List[Dict[str, Any]]:
    """
    Per-class precision, recall and F1 for one kNN configuration.

    Classes never predicted get precision 0 instead of a warning.

    Returns
    -------
    List[Dict[str, Any]]
        One row per class in registry order, plus the overall accuracy.
    """
    y_true = [q.label for q in queries]
    labels = registry.labels
    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, list(predictions), labels=labels, zero_division=0
    )
    accuracy = accuracy_score(y_true, list(predictions))

    rows = []
    for i, label in enumerate(labels):
        rows.append({
            "metric": metric,
            "n_neighbors": n_neighbors,
            "class": label,
            "precision": precision[i],
            "recall": recall[i],
            "f1": f1[i],
            "support": int(support[i]),
            "accuracy": accuracy,
        })
    return rows


def knn_score_tables(knn_rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, pd.DataFrame]]:
    """
    Pivots kNN rows into {class: {score: table}}.

    Each table has neighbor counts as rows and metrics as columns.
    """
    df = pd.DataFrame(knn_rows)
    tables: Dict[str, Dict[str, pd.DataFrame]] = {}
    if df.empty:
        return tables
    for label, subset in df.groupby("class", sort=False):
        tables[label] = {
            score: subset.pivot_table(index="n_neighbors", columns="metric", values=score)
            for score in ("precision", "recall", "f1")
        }
    return tables


def print_knn_tables(tables: Dict[str, Dict[str, pd.DataFrame]]):
    for label, scores in tables.items():
        print(f"\n=== {label} ===")
        for score, table in scores.items():
            print(score)
            print(table.to_string(float_format=lambda v: f"{v:.4f}"))


def print_clustering_summary(df: pd.DataFrame):
    if df.empty:
        print("No clustering results.")
        return
    columns = ["dataset", "metric", "n_clusters", "entropy", "purity", "wss", "bss", "n_iter", "converged"]
    summary = df[columns].groupby(["dataset", "metric", "n_clusters"], sort=False).mean(numeric_only=True)
    print(summary.to_string(float_format=lambda v: f"{v:.4f}"))


def save_dataframe(data, folder: str, filename: str):
    """Writes a DataFrame (or list of row dicts) to CSV; empty data is skipped."""
    if isinstance(data, pd.DataFrame):
        if data.empty:
            return
        df_to_save = data
    elif not data:
        return
    else:
        df_to_save = pd.DataFrame(data)

    os.makedirs(folder, exist_ok=True)
    df_to_save.to_csv(os.path.join(folder, filename), index=False)


def plot_elbow(df: pd.DataFrame, output_dir: str):
    """
    Saves WSS-vs-k and entropy-vs-k line plots per dataset.

    Seeds are aggregated by seaborn (mean with a confidence band).
    WSS values are only comparable within one metric.
    """
    if df.empty:
        return
    os.makedirs(output_dir, exist_ok=True)

    for ds, subset in df.groupby("dataset"):
        fig, axes = plt.subplots(1, 2, figsize=(12, 5))
        sns.lineplot(data=subset, x="n_clusters", y="wss", hue="metric", marker="o", ax=axes[0])
        axes[0].set_title(f"Elbow Method: K-Means on {ds}")
        sns.lineplot(data=subset, x="n_clusters", y="entropy", hue="metric", marker="o", ax=axes[1])
        axes[1].set_title(f"Weighted entropy on {ds}")
        for ax in axes:
            ax.grid(True)
        fig.tight_layout()
        fig.savefig(os.path.join(output_dir, f"{ds}_elbow.png"))
        plt.close(fig)
