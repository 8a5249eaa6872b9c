import lazy_loader as lazy

# Lazy-load submodules
__getattr__, __dir__, __all__ = lazy.attach(
    __name__,
    submod_attrs={
        "metrics": [
            "ConfusionMatrix",
            "build_confusion_matrix",
            "compute_cost_matrix",
            "compute_seg_metrics",
            "compute_det_metrics",
            "check_minimality_condition",
            "LazyMetrics",
            "Labeling",
            "MetricsConfig",
            "Weights",
            "MetricsError",
            "ValidationError",
            "ShapeMismatchError",
            "IntersectingLabelsError",
        ],
    },
)

from .config import MATCH_THRESHOLD, T_AXIS
