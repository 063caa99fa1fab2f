import numpy as np

from algorithms.kmeans_clustering.errors import DuplicateLabelError, EmptyLabelError, EmptyVectorError


class SparseVector(dict):
    """
    Sparse vector over an implicit dense integer key space.
    Maps feature key -> weight; absent keys are zero and zero weights are never stored.
    """

    @classmethod
    def from_pairs(cls, pairs):
        """Builds a vector from (key, value) pairs, dropping zeros. A repeated key keeps its last value."""
        vec = cls()
        for key, value in pairs:
            value = float(value)
            if value != 0.0:
                vec[key] = value
            else:
                vec.pop(key, None)
        return vec

    def copy(self):
        return SparseVector(self)

    def squared_norm(self):
        return sum(value * value for value in self.values())

    def squared_distance(self, other):
        return squared_distance(self, other)


def squared_distance(vec1, vec2):
    """
    Squared Euclidean distance between two sparse vectors, missing keys count as zero.
    Runs in O(|vec1| + |vec2|).
    """
    dist = 0.0
    for key, val1 in vec1.items():
        diff = val1 - vec2.get(key, 0.0)
        dist += diff * diff
    for key, val2 in vec2.items():
        if key in vec1:
            continue
        dist += val2 * val2
    return dist


def pack_vectors(vectors):
    """
    Packs sparse vectors into CSR arrays with the keys of every row sorted.
    Returns: (indptr, indices, data) with shapes (N + 1,), (nnz,), (nnz,)
    """
    n_rows = len(vectors)
    nnz = sum(len(vec) for vec in vectors)
    indptr = np.zeros(n_rows + 1, dtype=np.int64)
    indices = np.empty(nnz, dtype=np.int64)
    data = np.empty(nnz, dtype=np.float64)

    pos = 0
    for row, vec in enumerate(vectors):
        for key in sorted(vec):
            indices[pos] = key
            data[pos] = vec[key]
            pos += 1
        indptr[row + 1] = pos
    return indptr, indices, data


class Dataset:
    """Ordered (label, vector) entries plus a label -> position index."""

    def __init__(self):
        self.labels = []
        self.vectors = []
        self.label_index = {}
        self._packed = None

    def __len__(self):
        return len(self.vectors)

    def add(self, label: str, vector: SparseVector):
        if not label:
            raise EmptyLabelError("Label must be a non-empty string.")
        if not isinstance(vector, SparseVector) or any(value == 0.0 for value in vector.values()):
            vector = SparseVector.from_pairs(vector.items())
        if not vector:
            raise EmptyVectorError(f"Vector for label '{label}' has no non-zero entries.")
        if label in self.label_index:
            raise DuplicateLabelError(f"Label '{label}' was already added at position {self.label_index[label]}.")

        self.label_index[label] = len(self.vectors)
        self.labels.append(label)
        self.vectors.append(vector)
        self._packed = None

    def packed(self):
        """CSR arrays for the whole dataset, rebuilt only after new entries are added."""
        if self._packed is None:
            self._packed = pack_vectors(self.vectors)
        return self._packed
