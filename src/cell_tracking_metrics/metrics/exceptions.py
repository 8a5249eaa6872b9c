"""Custom exceptions for the metrics engine."""


class MetricsError(Exception):
    """Base exception for metrics errors."""

    pass


class ValidationError(MetricsError):
    """Raised when an input label volume is not usable for scoring."""

    pass


class ShapeMismatchError(ValidationError, ValueError):
    """Raised when ground-truth and prediction volumes differ in extents."""

    def __init__(self, gt_shape: tuple, pred_shape: tuple):
        self.gt_shape = tuple(gt_shape)
        self.pred_shape = tuple(pred_shape)
        super().__init__(
            f"Ground truth and prediction must have the same shape, "
            f"got {self.gt_shape} and {self.pred_shape}"
        )


class IntersectingLabelsError(MetricsError):
    """Raised when a labeling assigns more than one label to a location.

    Overlapping labels cannot be turned into a single label volume, so the
    confusion matrix is undefined for them.
    """

    def __init__(self, label_set: frozenset | None = None):
        self.label_set = label_set
        msg = "Labelings with intersecting labels are not supported."
        if label_set is not None:
            msg += f" Offending label set: {sorted(label_set, key=str)}"
        super().__init__(msg)
