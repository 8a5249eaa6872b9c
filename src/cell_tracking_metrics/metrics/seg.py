"""SEG: mean IoU of matched ground-truth objects."""

import logging
from typing import Iterable

import numpy as np

from .confusion import build_confusion_matrix
from .labeling import iter_time_points
from .overlap import compute_cost_matrix
from .types import SEGFrameResult


def seg_frame_result(cost_matrix: np.ndarray) -> SEGFrameResult:
    """Reduce the cost matrix of one frame to its SEG contribution.

    Each GT row contributes its matched IoU, or 0 when unmatched.
    """
    n_gt = int(cost_matrix.shape[0])
    if cost_matrix.size == 0:
        return SEGFrameResult(sum_iou=0.0, n_gt=n_gt)
    return SEGFrameResult(sum_iou=float(cost_matrix.max(axis=1).sum()), n_gt=n_gt)


def seg_score(sum_iou: float, n_gt: int) -> float:
    """Mean matched IoU, NaN when there is no ground-truth object."""
    if n_gt == 0:
        return float("nan")
    return float(sum_iou / n_gt)


def combine_seg(results: Iterable[SEGFrameResult]) -> float:
    total = sum(results, SEGFrameResult())
    return seg_score(total.sum_iou, total.n_gt)


def score_seg_frame(ground_truth, prediction) -> SEGFrameResult:
    """Compute the SEG contribution of a single frame (2D or 3D volume)."""
    confusion = build_confusion_matrix(ground_truth, prediction)
    return seg_frame_result(compute_cost_matrix(confusion))


def compute_seg_metrics(ground_truth, prediction) -> float:
    """
    Compute the SEG score between a ground-truth and a predicted label volume.

    The score is the IoU of each ground-truth object with its matching
    prediction (IoU > 0.5), averaged over all ground-truth objects. XYZ
    volumes are matched as 3D objects. XYZT volumes are matched independently
    on every time index and averaged over all ground-truth objects in XYZT.

    Args:
        ground_truth: Ground truth label volume or ``Labeling`` (0 = background)
        prediction: Predicted label volume or ``Labeling`` (0 = background)

    Returns:
        SEG score in [0, 1], or NaN if the ground truth has no object.

    Example usage:
        score = compute_seg_metrics(gt, pred)
    """
    results = [score_seg_frame(g, p) for g, p in iter_time_points(ground_truth, prediction)]
    score = combine_seg(results)
    logging.info(f"SEG over {len(results)} frame(s): {score:.4f}")
    return score
