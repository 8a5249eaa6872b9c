# Axis index holding time in 4D (XYZT) label volumes
T_AXIS = 3

# Minimum IoU (exclusive) for a ground-truth / prediction pair to be matched.
# With IoU > 0.5 an object can be matched to at most one non-overlapping
# object on the other side, so no optimal assignment is needed.
MATCH_THRESHOLD = 0.5

# Default DET (AOGM) weights, overridable through MetricsConfig.from_env()
DEFAULT_W_FN = 10.0
DEFAULT_W_FP = 1.0
DEFAULT_W_NS = 5.0

MAX_METRICS_THREADS = 4
