import sys

from algorithms.kmeans_clustering.errors import DuplicateLabelError
from algorithms.kmeans_clustering.sparse_vector import SparseVector
from constants.params import DELIMITER


class KeyMap:
    """Maps feature key strings to dense integer ids in order of first occurrence."""

    def __init__(self):
        self._ids = {}
        self.names = []

    def __len__(self):
        return len(self.names)

    def get_id(self, name: str) -> int:
        key_id = self._ids.get(name)
        if key_id is None:
            key_id = len(self.names)
            self._ids[name] = key_id
            self.names.append(name)
        return key_id


def parse_line(line: str, keymap: KeyMap):
    """
    Splits one 'label \\t key \\t value ...' record.
    Returns (label, SparseVector). Raises ValueError on an even field count or a non-numeric value.
    """
    fields = line.rstrip("\r\n").split(DELIMITER)
    if len(fields) % 2 != 1:
        raise ValueError(f"expected an odd number of fields, got {len(fields)}")

    pairs = []
    for i in range(1, len(fields), 2):
        try:
            value = float(fields[i + 1])
        except ValueError:
            raise ValueError(f"value '{fields[i + 1]}' for key '{fields[i]}' is not a number")
        pairs.append((keymap.get_id(fields[i]), value))
    return fields[0], SparseVector.from_pairs(pairs)


def read_vectors(filename, engine, keymap=None):
    """
    Loads every valid record of filename into engine via add_vector.
    Each line is decoded as UTF-8 on its own. Undecodable or malformed lines and duplicate labels
    are reported on stderr and skipped; records with an empty label or no non-zero values are
    dropped silently. OSError propagates if the file cannot be opened.
    Returns: (keymap, number of vectors added)
    """
    if keymap is None:
        keymap = KeyMap()
    added = 0
    with open(filename, "rb") as f:
        for line_number, raw_line in enumerate(f, start=1):
            try:
                label, vector = parse_line(raw_line.decode("utf-8"), keymap)
            except ValueError as e:
                bad_line = raw_line.decode("utf-8", errors="replace").rstrip()
                print(f"Warning: format error on line {line_number} ({e}): {bad_line}", file=sys.stderr)
                continue
            if not label or not vector:
                continue
            try:
                engine.add_vector(label, vector)
            except DuplicateLabelError as e:
                print(f"Warning: skipping line {line_number}: {e}", file=sys.stderr)
                continue
            added += 1
    return keymap, added


def dump_vectors(dataset, keymap, file=None):
    """Writes every stored vector as 'label \\t key \\t value ...' using the original key names."""
    if file is None:
        file = sys.stdout
    for label, vector in zip(dataset.labels, dataset.vectors):
        fields = [label]
        for key, value in vector.items():
            fields.append(keymap.names[key])
            fields.append(f"{value:.3f}")
        print(DELIMITER.join(fields), file=file)
