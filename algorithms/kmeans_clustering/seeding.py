from enum import Enum

import numpy as np
from numba import njit

from algorithms.kmeans_clustering.errors import InvalidClusterCountError
from algorithms.kmeans_clustering.multi_thread import distances_to_vector_parallel


class SeedingStrategy(Enum):
    UNIFORM = "uniform"
    WEIGHTED = "weighted"


@njit(cache=True)
def pick_weighted_index(closest_dist_sq, randval):
    """
    Walks the points in order, subtracting each weight from randval until it fits.
    Zero-weight points are never picked. Returns -1 if the walk falls off the end.
    """
    last_positive = -1
    for i in range(closest_dist_sq.shape[0]):
        weight = closest_dist_sq[i]
        if weight <= 0.0:
            continue
        if randval <= weight:
            return i
        randval -= weight
        last_positive = i
    return last_positive


def choose_random_centers(dataset, n_clusters, rng):
    """
    Uniform seeding: rejection-samples n_clusters distinct positions and copies their vectors.
    Returns: (centroids, chosen positions in draw order)
    """
    n_samples = len(dataset)
    chosen = set()
    centroids = []
    indices = []
    while len(indices) < n_clusters:
        idx = int(rng.randint(0, n_samples))
        if idx in chosen:
            continue
        chosen.add(idx)
        indices.append(idx)
        centroids.append(dataset.vectors[idx].copy())
    return centroids, indices


def choose_smart_centers(dataset, n_clusters, rng):
    """
    K-means++ seeding. Each new center is drawn with probability proportional to the squared
    distance from a point to its nearest already chosen center.

    When every unchosen point sits at distance zero from the chosen centers (potential == 0),
    the next center is drawn uniformly among the unchosen positions.
    Returns: (centroids, chosen positions in draw order)
    """
    n_samples = len(dataset)
    packed = dataset.packed()

    idx = int(rng.randint(0, n_samples))
    chosen = {idx}
    indices = [idx]
    centroids = [dataset.vectors[idx].copy()]

    closest_dist_sq = distances_to_vector_parallel(packed, centroids[0])
    potential = float(closest_dist_sq.sum())
    new_dist_sq = np.empty(n_samples, dtype=np.float64)

    while len(centroids) < n_clusters:
        if potential > 0.0:
            randval = rng.random_sample() * potential
            idx = int(pick_weighted_index(closest_dist_sq, randval))
        else:
            idx = -1
        if idx < 0:
            remaining = [i for i in range(n_samples) if i not in chosen]
            idx = remaining[int(rng.randint(0, len(remaining)))]

        chosen.add(idx)
        indices.append(idx)
        center = dataset.vectors[idx].copy()
        distances_to_vector_parallel(packed, center, new_dist_sq)
        np.minimum(closest_dist_sq, new_dist_sq, out=closest_dist_sq)
        potential = float(closest_dist_sq.sum())
        centroids.append(center)

    return centroids, indices


def check_random_state(rng):
    """Returns rng, or a fresh unseeded RandomState for None. Only numpy RandomState is supported."""
    if rng is None:
        return np.random.RandomState()
    if not isinstance(rng, np.random.RandomState):
        raise TypeError(f"rng must be a numpy.random.RandomState, got {type(rng).__name__}.")
    return rng


def seed_centroids(dataset, n_clusters, strategy=SeedingStrategy.UNIFORM, rng=None):
    """Returns n_clusters independent initial centroids chosen with the given strategy."""
    if not 1 <= n_clusters <= len(dataset):
        raise InvalidClusterCountError(f"Cannot seed {n_clusters} centroids from {len(dataset)} points.")
    rng = check_random_state(rng)
    strategy = SeedingStrategy(strategy)
    if strategy is SeedingStrategy.WEIGHTED:
        centroids, _ = choose_smart_centers(dataset, n_clusters, rng)
    else:
        centroids, _ = choose_random_centers(dataset, n_clusters, rng)
    return centroids
