import time

import numba
import numpy as np
import psutil
from numba import njit, prange

from algorithms.kmeans_clustering.sparse_vector import pack_vectors


@njit(cache=True)
def sorted_sparse_distance_sq(a_keys, a_vals, b_keys, b_vals):
    """Squared distance between two sparse rows whose keys are sorted (merge walk)."""
    n_a = a_keys.shape[0]
    n_b = b_keys.shape[0]
    i = 0
    j = 0
    dist_sq = 0.0
    while i < n_a and j < n_b:
        if a_keys[i] == b_keys[j]:
            diff = a_vals[i] - b_vals[j]
            i += 1
            j += 1
        elif a_keys[i] < b_keys[j]:
            diff = a_vals[i]
            i += 1
        else:
            diff = b_vals[j]
            j += 1
        dist_sq += diff * diff
    while i < n_a:
        dist_sq += a_vals[i] * a_vals[i]
        i += 1
    while j < n_b:
        dist_sq += b_vals[j] * b_vals[j]
        j += 1
    return dist_sq


@njit(parallel=True, cache=True)
def assign_points_numba_parallel(indptr, indices, data,
                                 c_indptr, c_indices, c_data,
                                 assignments, N, K):
    """Assigns each point to the nearest centroid (parallelized over points, ties go to the lower index)."""
    for i in prange(N):
        min_dist_sq = np.inf
        best_cluster_idx = 0
        p_keys = indices[indptr[i]:indptr[i + 1]]
        p_vals = data[indptr[i]:indptr[i + 1]]

        for k in range(K):
            dist_sq = sorted_sparse_distance_sq(p_keys, p_vals,
                                                c_indices[c_indptr[k]:c_indptr[k + 1]],
                                                c_data[c_indptr[k]:c_indptr[k + 1]])
            if dist_sq < min_dist_sq:
                min_dist_sq = dist_sq
                best_cluster_idx = k
        assignments[i] = best_cluster_idx


@njit(parallel=True, cache=True)
def distances_to_vector_numba_parallel(indptr, indices, data, v_keys, v_vals, distances_out, N):
    """Squared distance from every point to a single sparse vector, written into distances_out."""
    for i in prange(N):
        distances_out[i] = sorted_sparse_distance_sq(indices[indptr[i]:indptr[i + 1]],
                                                     data[indptr[i]:indptr[i + 1]],
                                                     v_keys, v_vals)


def default_worker_count():
    return psutil.cpu_count(logical=True) or 1


def configure_threads(n_workers=None):
    """
    Sets the Numba thread pool size for the parallel kernels.
    Clamped to [1, NUMBA_NUM_THREADS]. Returns the count actually applied.
    """
    if n_workers is None:
        n_workers = default_worker_count()
    n_threads = max(1, min(int(n_workers), numba.config.NUMBA_NUM_THREADS))
    numba.set_num_threads(n_threads)
    return n_threads


def assign_points_parallel(packed_points, centroids, assignments):
    """
    Fills assignments (int32, length N) with the nearest centroid index of every point.
    packed_points: CSR triple from Dataset.packed()
    centroids: list of SparseVector, read-only until the kernel returns
    """
    indptr, indices, data = packed_points
    c_indptr, c_indices, c_data = pack_vectors(centroids)
    n_samples = indptr.shape[0] - 1
    assign_points_numba_parallel(indptr, indices, data,
                                 c_indptr, c_indices, c_data,
                                 assignments, n_samples, len(centroids))
    return assignments


def distances_to_vector_parallel(packed_points, vector, distances_out=None):
    """Returns the (N,) array of squared distances from every point to vector."""
    indptr, indices, data = packed_points
    n_samples = indptr.shape[0] - 1
    if distances_out is None:
        distances_out = np.empty(n_samples, dtype=np.float64)
    sorted_keys = sorted(vector)
    v_keys = np.array(sorted_keys, dtype=np.int64)
    v_vals = np.array([vector[key] for key in sorted_keys], dtype=np.float64)
    distances_to_vector_numba_parallel(indptr, indices, data, v_keys, v_vals, distances_out, n_samples)
    return distances_out


if __name__ == '__main__':
    from algorithms.kmeans_clustering.single_thread import assign_points_st
    from algorithms.kmeans_clustering.sparse_vector import SparseVector

    N_points = 20000
    N_features = 5000
    NNZ_per_point = 20
    K_clusters = 10
    RANDOM_STATE_TEST = 42
    rng = np.random.RandomState(RANDOM_STATE_TEST)

    print(f"Generating {N_points} sparse points ({NNZ_per_point} non-zeros each) for parallel assignment test...")
    test_vectors = [
        SparseVector.from_pairs(zip(rng.choice(N_features, NNZ_per_point, replace=False).tolist(),
                                    rng.rand(NNZ_per_point) + 0.1))
        for _ in range(N_points)
    ]
    test_centroids = [test_vectors[i].copy() for i in rng.choice(N_points, K_clusters, replace=False)]
    packed = pack_vectors(test_vectors)
    assignments_mt = np.empty(N_points, dtype=np.int32)

    n_threads = configure_threads()
    print(f"Performing Numba JIT compilation run (warm-up) with {n_threads} threads...")
    assign_points_parallel(packed, test_centroids, assignments_mt)

    start_t = time.time()
    assign_points_parallel(packed, test_centroids, assignments_mt)
    end_t = time.time()
    print(f"Parallel Numba assignment: {end_t - start_t:.4f} seconds.")

    start_t = time.time()
    assignments_st = assign_points_st(test_vectors, test_centroids)
    end_t = time.time()
    print(f"Single-threaded assignment: {end_t - start_t:.4f} seconds.")

    if np.array_equal(assignments_mt, assignments_st):
        print("Verification PASSED.")
    else:
        print("Verification FAILED.")
