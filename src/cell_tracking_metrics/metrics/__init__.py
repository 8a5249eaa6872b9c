"""SEG and DET scoring of cell segmentation and tracking results.

This module provides:
- Confusion (overlap) matrices between ground-truth and predicted labels
- Thresholded IoU cost matrices
- SEG (mean matched IoU) and DET (normalized AOGM) scores
- Lazy, thread-safe accumulation of scores over time points
"""

# Types
from .types import (
    AccumulatorState,
    DETFrameResult,
    ScorerKind,
    SEGFrameResult,
    Weights,
)

# Exceptions
from .exceptions import (
    MetricsError,
    ValidationError,
    ShapeMismatchError,
    IntersectingLabelsError,
)

# Configuration
from .config import MetricsConfig, resolve_weights

# Label volumes
from .labeling import (
    Labeling,
    as_label_volume,
    has_intersecting_labels,
    iter_time_points,
)

# Confusion and cost matrices
from .confusion import ConfusionMatrix, build_confusion_matrix
from .overlap import compute_cost_matrix

# SEG
from .seg import (
    combine_seg,
    compute_seg_metrics,
    score_seg_frame,
    seg_frame_result,
    seg_score,
)

# DET
from .det import (
    check_minimality_condition,
    combine_det,
    compute_det_metrics,
    det_frame_result,
    det_score,
    score_det_frame,
)

# Accumulation
from .accumulator import REDUCERS, LazyMetrics, Reducer

__all__ = [
    # Types
    "AccumulatorState",
    "DETFrameResult",
    "ScorerKind",
    "SEGFrameResult",
    "Weights",
    # Exceptions
    "MetricsError",
    "ValidationError",
    "ShapeMismatchError",
    "IntersectingLabelsError",
    # Configuration
    "MetricsConfig",
    "resolve_weights",
    # Label volumes
    "Labeling",
    "as_label_volume",
    "has_intersecting_labels",
    "iter_time_points",
    # Confusion and cost matrices
    "ConfusionMatrix",
    "build_confusion_matrix",
    "compute_cost_matrix",
    # SEG
    "combine_seg",
    "compute_seg_metrics",
    "score_seg_frame",
    "seg_frame_result",
    "seg_score",
    # DET
    "check_minimality_condition",
    "combine_det",
    "compute_det_metrics",
    "det_frame_result",
    "det_score",
    "score_det_frame",
    # Accumulation
    "REDUCERS",
    "LazyMetrics",
    "Reducer",
]
