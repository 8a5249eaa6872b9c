"""Thresholded IoU cost matrix shared by SEG and DET."""

import numpy as np

from ..config import MATCH_THRESHOLD
from .confusion import ConfusionMatrix


def compute_cost_matrix(confusion: ConfusionMatrix) -> np.ndarray:
    """Convert a confusion matrix into a matrix of matching IoUs.

    Entry (i, j) is the IoU between GT label i and predicted label j when it
    exceeds ``MATCH_THRESHOLD``, and 0 otherwise. Rows and columns may hold
    zero, one or several nonzero entries.

    Args:
        confusion: Confusion matrix of a single frame

    Returns:
        (nGT, nPred) float64 array
    """
    inter = confusion.overlap
    union = confusion.gt_sizes[:, None] + confusion.pred_sizes[None, :] - inter

    cost = np.zeros(inter.shape, dtype=np.float64)
    touching = inter > 0
    cost[touching] = inter[touching] / union[touching]

    cost[cost <= MATCH_THRESHOLD] = 0.0
    return cost
