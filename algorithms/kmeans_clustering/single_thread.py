import numpy as np


def assign_points_st(vectors, centroids):
    """
    Assigns each point to the nearest centroid, scanning centroids left to right.
    Ties keep the lower centroid index.
    Returns: (N,) array of cluster assignments (indices 0 to K-1)
    """
    assignments = np.empty(len(vectors), dtype=np.int32)
    for i, point in enumerate(vectors):
        min_dist_sq = np.inf
        best_cluster_idx = 0
        for k, centroid in enumerate(centroids):
            dist_sq = point.squared_distance(centroid)
            if dist_sq < min_dist_sq:
                min_dist_sq = dist_sq
                best_cluster_idx = k
        assignments[i] = best_cluster_idx
    return assignments


def update_centroids_st(vectors, assignments, centroids):
    """
    Recalculates centroids in place as the mean of their assigned points.
    A centroid with no points is left empty; keys whose mean is exactly zero are dropped.
    Returns: (K,) array of cluster counts
    """
    n_clusters = len(centroids)
    cluster_counts = np.zeros(n_clusters, dtype=np.intp)

    for centroid in centroids:
        centroid.clear()

    for i, point in enumerate(vectors):
        cluster_idx = assignments[i]
        if 0 <= cluster_idx < n_clusters:
            accumulator = centroids[cluster_idx]
            for key, value in point.items():
                accumulator[key] = accumulator.get(key, 0.0) + value
            cluster_counts[cluster_idx] += 1

    for k in range(n_clusters):
        if cluster_counts[k] == 0:
            continue
        count = int(cluster_counts[k])
        centroid = centroids[k]
        for key in list(centroid):
            mean = centroid[key] / count
            if mean == 0.0:
                del centroid[key]
            else:
                centroid[key] = mean

    return cluster_counts
