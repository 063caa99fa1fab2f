import os
import time
import traceback

import numpy as np

from algorithms.kmeans_clustering.engine import SparseKMeans
from algorithms.kmeans_clustering.multi_thread import assign_points_parallel, configure_threads
from algorithms.kmeans_clustering.seeding import SeedingStrategy, seed_centroids
from algorithms.kmeans_clustering.single_thread import assign_points_st
from algorithms.kmeans_clustering.sparse_vector import SparseVector
from constants.params import (BIG_SPARSE_SHAPE, MAX_ITER, MID_SPARSE_SHAPE, RANDOM_SEED, RUNS,
                              SMALL_SPARSE_SHAPE)
from utils.utils import get_core_info, get_cpu_info, write_result_header

# --- Configuration ---
RESULTS_BASE_PATH = 'results/'
KMEANS_CLUSTERING_PATH = 'kmeans_clustering/'
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CSV_HEADER = "Run,Timestamp,Time(s),N_Points,NNZ,K_Clusters,IterationsRun,PointsPerSec\n"


# --- Helper Functions ---
def generate_sparse_engine(n_points, n_features, nnz_per_point, random_state_seed):
    """Builds a SparseKMeans engine filled with random sparse vectors labeled p0, p1, ..."""
    rng = np.random.RandomState(random_state_seed)
    kmeans = SparseKMeans(verbose=False)
    for i in range(n_points):
        keys = rng.choice(n_features, nnz_per_point, replace=False)
        values = rng.rand(nnz_per_point) + 0.1
        kmeans.add_vector(f"p{i}", SparseVector.from_pairs(zip(keys.tolist(), values.tolist())))
    return kmeans


def time_single_thread_assignment(kmeans, centroids):
    start_time = time.time()
    assign_points_st(kmeans.dataset.vectors, centroids)
    return time.time() - start_time, 1


def time_parallel_assignment(kmeans, centroids):
    assignments = np.empty(len(kmeans), dtype=np.int32)
    start_time = time.time()
    assign_points_parallel(kmeans.dataset.packed(), centroids, assignments)
    return time.time() - start_time, 1


def time_full_run(kmeans, n_clusters, strategy, run_seed):
    start_time = time.time()
    result = kmeans.execute(n_clusters, strategy=strategy, rng=np.random.RandomState(run_seed))
    return time.time() - start_time, result.n_iterations_run


def profile_and_save_stats(
        n_points: int, n_features: int, nnz_per_point: int, n_clusters: int,
        total_runs: int, run_single_thread_impl: bool = True
):
    """
    Profiles the sparse k-Means assignment step and full runs for the given shape and saves statistics.
    Can skip the single-threaded reference if run_single_thread_impl is False.
    """
    size_str = f"N{n_points}_F{n_features}_NNZ{nnz_per_point}_K{n_clusters}"
    print(f"\nInfo: Profiling sparse K-Means for configuration: {size_str}")
    print(f"Parameters: Max Iterations={MAX_ITER}, Runs={total_runs}, Threads={configure_threads()}")
    if not run_single_thread_impl:
        print("  NOTE: Single-threaded assignment will be SKIPPED for this configuration.")

    output_dir = os.path.join(RESULTS_BASE_PATH, KMEANS_CLUSTERING_PATH, size_str)
    os.makedirs(output_dir, exist_ok=True)

    impl_config = {
        "assign_single_thread": {
            "file_suffix": 'assign_single_thread_stats.txt',
            "run_this_time": run_single_thread_impl,
            "name_print": "Assignment Single-Thread",
            "func": lambda kmeans, centroids, seed: time_single_thread_assignment(kmeans, centroids),
        },
        "assign_parallel_numba": {
            "file_suffix": 'assign_parallel_numba_stats.txt',
            "run_this_time": True,
            "name_print": "Assignment Parallel Numba",
            "func": lambda kmeans, centroids, seed: time_parallel_assignment(kmeans, centroids),
        },
        "run_uniform": {
            "file_suffix": 'run_uniform_stats.txt',
            "run_this_time": True,
            "name_print": "Full Run (uniform seeding)",
            "func": lambda kmeans, centroids, seed: time_full_run(kmeans, n_clusters, SeedingStrategy.UNIFORM, seed),
        },
        "run_weighted": {
            "file_suffix": 'run_weighted_stats.txt',
            "run_this_time": True,
            "name_print": "Full Run (k-means++ seeding)",
            "func": lambda kmeans, centroids, seed: time_full_run(kmeans, n_clusters, SeedingStrategy.WEIGHTED, seed),
        },
    }

    file_handles = {}
    try:
        for key, config_item in impl_config.items():
            if config_item["run_this_time"]:
                file_handles[key] = open(os.path.join(output_dir, config_item["file_suffix"]), 'w')
                write_result_header(file_handles[key])
                file_handles[key].write(CSV_HEADER)

        print("  Warming up Numba JIT compiler...")
        warmup = generate_sparse_engine(100, n_features, nnz_per_point, RANDOM_SEED)
        warmup.execute(min(n_clusters, len(warmup)), rng=np.random.RandomState(RANDOM_SEED))
        print("  Numba warm-up complete.")

        for run_number in range(1, total_runs + 1):
            print(f"  Starting Run {run_number}/{total_runs} for {size_str}...")
            current_run_seed = RANDOM_SEED + run_number
            kmeans = generate_sparse_engine(n_points, n_features, nnz_per_point, current_run_seed)
            centroids = seed_centroids(kmeans.dataset, n_clusters, SeedingStrategy.UNIFORM,
                                       np.random.RandomState(current_run_seed))

            for impl_key, handle in file_handles.items():
                config_item = impl_config[impl_key]
                impl_name_print = config_item["name_print"]
                print(f"    Profiling {impl_name_print}...")
                timestamp = time.strftime(DATE_FORMAT)
                try:
                    exec_time, iters_run = config_item["func"](kmeans, centroids, current_run_seed)
                    points_per_sec = n_points * iters_run / exec_time if exec_time > 0 else 0.0
                    handle.write(f"{run_number},{timestamp},{exec_time:.4f},{n_points},{nnz_per_point},"
                                 f"{n_clusters},{iters_run},{points_per_sec:.2f}\n")
                    print(f"      {impl_name_print} Run {run_number}: {exec_time:.4f}s, "
                          f"Iterations: {iters_run}, Throughput: {points_per_sec:.2f} Points/s")
                except Exception as e:
                    print(f"      Error during {impl_name_print} profiling for run {run_number}: {e}")
                    traceback.print_exc()
                    handle.write(f"{run_number},{timestamp},inf,{n_points},{nnz_per_point},{n_clusters},0,0.0\n")
        print(f"  Finished all runs for {size_str}.")
    except IOError as e_io:
        print(f"Error writing results for {size_str}: {e_io}")
    finally:
        for fh in file_handles.values():
            if not fh.closed:
                fh.close()


def run_all_kmeans_benchmarks(include_single_thread_for_standard_tests: bool = True, runs: int = RUNS):
    """Defines and runs a suite of sparse k-Means benchmarks."""
    print(f"CPU Info: {get_cpu_info()}")
    print(f"CPU Cores: {get_core_info()}")

    for params_tuple in (SMALL_SPARSE_SHAPE, MID_SPARSE_SHAPE, BIG_SPARSE_SHAPE):
        profile_and_save_stats(*params_tuple, total_runs=runs,
                               run_single_thread_impl=include_single_thread_for_standard_tests)


if __name__ == "__main__":
    run_all_kmeans_benchmarks()
    print("\nK-Means profiling complete. Results saved to respective files.")
