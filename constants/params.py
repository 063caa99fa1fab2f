# --- K-Means iteration ---
MAX_ITER = 10
UNASSIGNED = -1
DEFAULT_SEEDING = "uniform"

# --- Input format ---
DELIMITER = "\t"

# --- Profiling ---
RUNS = 11
RANDOM_SEED = 42

# (n_points, n_features, nnz_per_point, n_clusters)
SMALL_SPARSE_SHAPE = (10000, 50000, 20, 10)
MID_SPARSE_SHAPE = (100000, 100000, 30, 20)
BIG_SPARSE_SHAPE = (1000000, 1000000, 40, 50)
