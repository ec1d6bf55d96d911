import os
import datetime
import pandas as pd
from tqdm import tqdm
from sklearn.model_selection import train_test_split

# Utilities
from utils.parser import load_records
from utils.normalization import NORMALIZERS
from utils.distance import METRICS
from utils.records import ClassRegistry
from utils.clustering_metrics import cluster_quality_table

# Algorithms
from algorithms.kmeans import KMeans
from algorithms.knn import KNNClassifier

# Reporting
from analysis.report_generator import (
    clustering_summary_row,
    knn_class_report,
    knn_score_tables,
    plot_elbow,
    print_clustering_summary,
    print_knn_tables,
    save_dataframe,
)

# ---------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------
RUN_CONFIG = {
    "datasets": {
        "iris": True,
        "all-genes": False,
        "sig-genes": False
    },
    "tasks": {
        "KMeans": True,
        "KNN": True
    },
    # One of None, "min_max", "scaled_min_max", "z_score"
    "normalization": None,
    "plots": True,
}

# A dataset is either a single file (split for kNN) or a (train, test) pair
DATASETS_MAP = {
    "iris": "datasets/iris.arff",
    "all-genes": ("datasets/AllGenes_train.arff", "datasets/AllGenes_test.arff"),
    "sig-genes": ("datasets/SigGenes_train.arff", "datasets/SigGenes_test.arff"),
}

# K-Means: k = multiplier * number of classes
K_MULTIPLIERS = [1, 2, 3]
N_RUNS = 10
MAX_ITERS = 300

# kNN
N_NEIGHBORS_LIST = [3, 5, 7, 9, 11]
TEST_SIZE = 0.3
SPLIT_SEED = 0

METRIC_NAMES = list(METRICS)


# ---------------------------------------------------------
# HELPER & MAIN
# ---------------------------------------------------------
def load_dataset(ds_name):
    """
    Returns (train, test, registry). A single file is split into a
    stratified train/test pair.
    """
    source = DATASETS_MAP[ds_name]
    registry = ClassRegistry()
    if isinstance(source, tuple):
        train, registry = load_records(source[0], registry=registry)
        test, registry = load_records(source[1], registry=registry)
    else:
        records, registry = load_records(source, registry=registry)
        train, test = train_test_split(
            records, test_size=TEST_SIZE, random_state=SPLIT_SEED,
            stratify=[r.label for r in records]
        )

    normalizer = RUN_CONFIG["normalization"]
    if normalizer is not None:
        NORMALIZERS[normalizer](train, test)
    return train, test, registry


def generate_task_list(ds_name, n_classes, n_records):
    tasks = []
    if RUN_CONFIG["tasks"]["KMeans"]:
        for metric in METRIC_NAMES:
            for mult in K_MULTIPLIERS:
                k = mult * n_classes
                if k > n_records:
                    continue
                for seed in range(N_RUNS):
                    tasks.append({"type": "kmeans", "dataset": ds_name, "metric": metric,
                                  "n_clusters": k, "run_id": seed})
    if RUN_CONFIG["tasks"]["KNN"]:
        for metric in METRIC_NAMES:
            for n_neighbors in N_NEIGHBORS_LIST:
                tasks.append({"type": "knn", "dataset": ds_name, "metric": metric,
                              "n_neighbors": n_neighbors})
    return tasks


def run_kmeans_task(task, records, registry, output_dir):
    """
    Runs one K-Means task and returns (summary row, per-cluster table,
    converged flag).

    The per-cluster table is only built and saved for the first seed of
    every (metric, k) pair; other seeds return None for it.
    """
    model = KMeans(n_clusters=task["n_clusters"], max_iters=MAX_ITERS,
                   metric=task["metric"], random_state=task["run_id"])
    result = model.fit(records).result_
    row = clustering_summary_row(result, registry, task["dataset"], task["run_id"])

    table = None
    if task["run_id"] == 0:
        table = cluster_quality_table(result, registry)
        save_dataframe(table, output_dir,
                       f"{task['dataset']}_{task['metric']}_k{task['n_clusters']}_clusters.csv")
    return row, table, result.converged


def main():
    session_id = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    base_dir = f"results/run_{session_id}"
    os.makedirs(base_dir, exist_ok=True)

    print(f"Runner Started: {session_id}")

    for ds_name, ds_enabled in RUN_CONFIG["datasets"].items():
        if not ds_enabled:
            continue

        try:
            train, test, registry = load_dataset(ds_name)
        except (OSError, ValueError) as e:
            print(f"Error loading {ds_name}: {e}")
            continue

        # Clustering uses every record; kNN keeps the split
        records = train + test
        n_features = len(records[0])
        print(f"\n{ds_name}: {len(records)} instances, {n_features} attributes, {len(registry)} classes")

        cluster_rows = []
        knn_rows = []
        cluster_tables = {}
        tasks = generate_task_list(ds_name, len(registry), len(records))
        pbar = tqdm(tasks, unit="exp")

        for task in pbar:
            pbar.set_description(f"{ds_name} | {task['type']} | {task['metric']}")
            try:
                if task["type"] == "kmeans":
                    row, table, converged = run_kmeans_task(task, records, registry,
                                                            os.path.join(base_dir, "clusters"))
                    if not converged:
                        pbar.write(f"Did not converge: {task}")
                    cluster_rows.append(row)
                    if table is not None:
                        cluster_tables[(task["metric"], task["n_clusters"])] = table
                elif task["type"] == "knn":
                    knn = KNNClassifier(n_neighbors=task["n_neighbors"], metric=task["metric"])
                    predictions = knn.fit(train).predict(test)
                    knn_rows.extend(knn_class_report(test, predictions, registry,
                                                     task["metric"], task["n_neighbors"]))
            except (ValueError, ArithmeticError) as e:
                pbar.write(f"Failed: {task} - {e}")

        cluster_df = pd.DataFrame(cluster_rows)
        print("\nK-Means quality (mean over runs)")
        print_clustering_summary(cluster_df)
        for (metric, k), table in cluster_tables.items():
            print(f"\nPer-cluster quality: {metric}, k={k} (seed 0)")
            print(table.to_string(index=False, float_format=lambda v: f"{v:.4f}"))
        print_knn_tables(knn_score_tables(knn_rows))

        save_dataframe(cluster_df, base_dir, f"{ds_name}_kmeans.csv")
        save_dataframe(knn_rows, base_dir, f"{ds_name}_knn.csv")
        if RUN_CONFIG["plots"]:
            plot_elbow(cluster_df, os.path.join(base_dir, "plots"))

    print(f"\nRun Complete. Data saved in {base_dir}")


if __name__ == "__main__":
    main()
