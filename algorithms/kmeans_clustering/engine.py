import sys
from enum import Enum
from typing import Dict, List, NamedTuple

import numpy as np

from algorithms.kmeans_clustering.errors import InvalidClusterCountError
from algorithms.kmeans_clustering.multi_thread import assign_points_parallel, configure_threads
from algorithms.kmeans_clustering.seeding import SeedingStrategy, check_random_state, seed_centroids
from algorithms.kmeans_clustering.single_thread import update_centroids_st
from algorithms.kmeans_clustering.sparse_vector import Dataset, SparseVector
from constants.params import DEFAULT_SEEDING, MAX_ITER, UNASSIGNED


class RunState(Enum):
    SEEDING = "seeding"
    ASSIGNING = "assigning"
    UPDATING = "updating"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


class ClusteringResult(NamedTuple):
    labels: List[str]
    assignments: np.ndarray
    centroids: List[SparseVector]
    cluster_sizes: np.ndarray
    n_iterations_run: int
    state: RunState

    @property
    def converged(self) -> bool:
        return self.state is RunState.CONVERGED

    def label_assignments(self) -> Dict[str, int]:
        return {label: int(cluster_idx) for label, cluster_idx in zip(self.labels, self.assignments)}

    def format_lines(self):
        for label, cluster_idx in zip(self.labels, self.assignments):
            yield f"{label}\t{cluster_idx}"


class SparseKMeans:
    """
    Lloyd k-Means over labeled sparse vectors.

    Centroids are seeded once per execute() call, then assignment (parallel over points)
    and centroid update alternate for at most max_iters rounds. The run stops early as soon
    as a round reproduces the previous round's assignment exactly.
    """

    def __init__(self,
                 max_iters: int = MAX_ITER,
                 strategy=DEFAULT_SEEDING,
                 n_workers: int = None,
                 verbose: bool = True):
        if max_iters < 1:
            raise ValueError("max_iters must be at least 1.")
        self.max_iters = max_iters
        self.strategy = SeedingStrategy(strategy)
        self.n_workers = n_workers
        self.verbose = verbose
        self.dataset = Dataset()
        self.state = None

    def __len__(self):
        return len(self.dataset)

    def add_vector(self, label: str, vector: SparseVector):
        self.dataset.add(label, vector)

    def _log(self, message):
        if self.verbose:
            print(message, file=sys.stderr)

    def execute(self, n_clusters: int, strategy=None, rng=None) -> ClusteringResult:
        """
        Clusters the dataset into n_clusters groups.

        :param n_clusters: number of clusters, 1 <= n_clusters <= dataset size
        :param strategy: seeding strategy for this run, defaults to the engine's strategy
        :param rng: numpy RandomState used for seeding (a numpy Generator raises TypeError);
            the same state reproduces the same run
        :return: ClusteringResult with the final assignment and centroids
        """
        n_samples = len(self.dataset)
        if not 1 <= n_clusters <= n_samples:
            raise InvalidClusterCountError(
                f"Number of clusters must be between 1 and the dataset size ({n_samples}), got {n_clusters}.")
        if strategy is None:
            strategy = self.strategy
        rng = check_random_state(rng)

        n_threads = configure_threads(self.n_workers)
        self._log(f"Info: clustering {n_samples} vectors into {n_clusters} clusters "
                  f"({SeedingStrategy(strategy).value} seeding, {n_threads} threads)")

        self.state = RunState.SEEDING
        centroids = seed_centroids(self.dataset, n_clusters, strategy, rng)
        packed = self.dataset.packed()

        assignments = np.full(n_samples, UNASSIGNED, dtype=np.int32)
        prev_assignments = np.full(n_samples, UNASSIGNED, dtype=np.int32)
        cluster_sizes = np.zeros(n_clusters, dtype=np.intp)

        n_iterations_run = 0
        for i in range(self.max_iters):
            self._log(f"Info: kmeans loop No.{i} ...")
            n_iterations_run = i + 1

            self.state = RunState.ASSIGNING
            assign_points_parallel(packed, centroids, assignments)

            self.state = RunState.UPDATING
            cluster_sizes = update_centroids_st(self.dataset.vectors, assignments, centroids)

            if np.array_equal(assignments, prev_assignments):
                self.state = RunState.CONVERGED
                break
            prev_assignments[:] = assignments
        else:
            self.state = RunState.EXHAUSTED

        dead = int(np.count_nonzero(cluster_sizes == 0))
        if dead:
            self._log(f"Warning: {dead} of {n_clusters} clusters ended with no points.")
        self._log(f"Info: finished in state '{self.state.value}' after {n_iterations_run} rounds.")

        return ClusteringResult(
            labels=list(self.dataset.labels),
            assignments=assignments,
            centroids=centroids,
            cluster_sizes=cluster_sizes,
            n_iterations_run=n_iterations_run,
            state=self.state,
        )
