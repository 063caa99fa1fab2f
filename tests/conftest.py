"""Shared fixtures for the sparse k-Means tests."""

import numpy as np
import pytest

from algorithms.kmeans_clustering.engine import SparseKMeans
from algorithms.kmeans_clustering.sparse_vector import Dataset, SparseVector


def make_engine(vectors, **kwargs):
    kwargs.setdefault("verbose", False)
    kmeans = SparseKMeans(**kwargs)
    for label, vector in vectors.items():
        kmeans.add_vector(label, SparseVector(vector))
    return kmeans


@pytest.fixture
def antipodal_vectors():
    """Two pairs of identical points on orthogonal axes."""
    return {
        "A": {1: 1.0},
        "B": {1: 1.0},
        "C": {2: 1.0},
        "D": {2: 1.0},
    }


@pytest.fixture
def distinct_vectors():
    return {
        "p0": {0: 1.0, 3: 2.0},
        "p1": {1: -1.5},
        "p2": {0: 4.0, 2: 0.5},
        "p3": {5: 3.0, 6: 1.0},
        "p4": {2: 2.0, 5: -1.0},
    }


@pytest.fixture
def random_dataset():
    """Random sparse dataset with 200 points over 40 keys."""
    rng = np.random.RandomState(7)
    dataset = Dataset()
    for i in range(200):
        nnz = rng.randint(1, 8)
        keys = rng.choice(40, nnz, replace=False).tolist()
        values = (rng.rand(nnz) * 4 - 2).tolist()
        vector = SparseVector.from_pairs(zip(keys, values))
        if vector:
            dataset.add(f"r{i}", vector)
    return dataset
