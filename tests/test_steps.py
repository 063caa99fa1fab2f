"""Tests for the assignment and centroid update steps."""

import numpy as np
import pytest

from algorithms.kmeans_clustering.multi_thread import assign_points_parallel, configure_threads
from algorithms.kmeans_clustering.single_thread import assign_points_st, update_centroids_st
from algorithms.kmeans_clustering.sparse_vector import SparseVector, pack_vectors


class TestAssignment:
    """Test nearest-centroid assignment."""

    def test_ties_go_to_lowest_index(self):
        points = [SparseVector({1: 1.0})]
        centroids = [SparseVector({2: 1.0}), SparseVector({3: 1.0})]
        assignments = np.full(1, -1, dtype=np.int32)
        assign_points_parallel(pack_vectors(points), centroids, assignments)
        assert assignments.tolist() == [0]
        assert assign_points_st(points, centroids).tolist() == [0]

    def test_empty_centroid_distance_is_norm(self):
        points = [SparseVector({1: 0.1}), SparseVector({1: 5.0})]
        centroids = [SparseVector({1: 5.0}), SparseVector()]
        assignments = np.empty(2, dtype=np.int32)
        assign_points_parallel(pack_vectors(points), centroids, assignments)
        assert assignments.tolist() == [1, 0]

    @pytest.mark.parametrize("n_workers", [1, 2, None])
    def test_parallel_matches_single_thread(self, random_dataset, n_workers):
        configure_threads(n_workers)
        centroids = [random_dataset.vectors[i].copy() for i in (0, 17, 42, 99, 150)]
        assignments = np.empty(len(random_dataset), dtype=np.int32)
        assign_points_parallel(random_dataset.packed(), centroids, assignments)
        expected = assign_points_st(random_dataset.vectors, centroids)
        np.testing.assert_array_equal(assignments, expected)
        assert assignments.min() >= 0
        assert assignments.max() < len(centroids)

    def test_configure_threads_is_clamped(self):
        assert configure_threads(0) == 1
        assert configure_threads(10 ** 6) >= 1


class TestCentroidUpdate:
    """Test centroid recomputation."""

    def test_means_and_dead_centroid(self):
        vectors = [SparseVector({0: 1.0, 1: 2.0}), SparseVector({0: 3.0}), SparseVector({2: 4.0})]
        centroids = [SparseVector({9: 9.0}), SparseVector(), SparseVector({5: 1.0})]
        counts = update_centroids_st(vectors, np.array([0, 0, 1], dtype=np.int32), centroids)
        assert counts.tolist() == [2, 1, 0]
        assert centroids[0] == {0: 2.0, 1: 1.0}
        assert centroids[1] == {2: 4.0}
        assert centroids[2] == {}

    def test_zero_mean_is_dropped(self):
        vectors = [SparseVector({0: 1.0, 1: 1.0}), SparseVector({0: -1.0})]
        centroids = [SparseVector()]
        update_centroids_st(vectors, np.array([0, 0], dtype=np.int32), centroids)
        assert centroids[0] == {1: 0.5}

    def test_centroids_are_updated_in_place(self):
        vectors = [SparseVector({0: 2.0})]
        centroid = SparseVector({0: 1.0})
        update_centroids_st(vectors, np.array([0], dtype=np.int32), [centroid])
        assert centroid == {0: 2.0}

    def test_weights_equal_arithmetic_mean(self, random_dataset):
        n_clusters = 4
        rng = np.random.RandomState(0)
        assignments = rng.randint(0, n_clusters, size=len(random_dataset)).astype(np.int32)
        centroids = [SparseVector() for _ in range(n_clusters)]
        counts = update_centroids_st(random_dataset.vectors, assignments, centroids)

        dense = np.zeros((len(random_dataset), 40))
        for i, vec in enumerate(random_dataset.vectors):
            for key, value in vec.items():
                dense[i, key] = value
        for k in range(n_clusters):
            members = dense[assignments == k]
            assert counts[k] == members.shape[0]
            expected = members.mean(axis=0)
            for key, value in centroids[k].items():
                assert value == pytest.approx(expected[key])
            for key in np.nonzero(np.abs(expected) > 1e-12)[0]:
                assert int(key) in centroids[k]
