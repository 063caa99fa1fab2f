import argparse
import sys
import time

import numpy as np

from algorithms.kmeans_clustering.engine import SparseKMeans
from algorithms.kmeans_clustering.errors import ClusteringInputError
from algorithms.kmeans_clustering.seeding import SeedingStrategy
from constants.params import DEFAULT_SEEDING, MAX_ITER
from utils.data_loader import dump_vectors, read_vectors
from utils.utils import get_cpu_info, get_formatted_elapsed_time, get_ram_info


class UsageErrorParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = UsageErrorParser(prog="sparse-kmeans",
                              description="Cluster tab-separated sparse vectors with k-Means.")
    parser.add_argument("n_clusters", type=int, help="Number of clusters (k).")
    parser.add_argument("datafile", help="Input file: label<TAB>key<TAB>value<TAB>key<TAB>value...")
    parser.add_argument(
        "--seeding",
        choices=[s.value for s in SeedingStrategy],
        default=DEFAULT_SEEDING,
        help="Centroid seeding: uniform sampling or k-means++ weighted sampling."
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible seeding.")
    parser.add_argument("--workers", type=int, default=None,
                        help="Threads for the assignment step (default: all logical cores).")
    parser.add_argument("--max-iters", type=int, default=MAX_ITER, help="Maximum assignment/update rounds.")
    parser.add_argument(
        "--show-vectors",
        action="store_true",
        help="Print the loaded vectors before clustering."
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    start_time = time.time()

    print(f"Info: CPU: {get_cpu_info()}", file=sys.stderr)
    print(f"Info: RAM: {get_ram_info()}", file=sys.stderr)

    try:
        kmeans = SparseKMeans(max_iters=args.max_iters, strategy=args.seeding, n_workers=args.workers)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        keymap, added = read_vectors(args.datafile, kmeans)
    except OSError as e:
        print(f"Error: cannot open {args.datafile}: {e}", file=sys.stderr)
        return 1
    print(f"Info: loaded {added} vectors with {len(keymap)} distinct keys.", file=sys.stderr)

    if args.show_vectors:
        dump_vectors(kmeans.dataset, keymap)

    rng = np.random.RandomState(args.seed)
    try:
        result = kmeans.execute(args.n_clusters, rng=rng)
    except ClusteringInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in result.format_lines():
        print(line)

    print(f"Info: elapsed time: {get_formatted_elapsed_time(start_time)}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
