"""DET: detection accuracy derived from the AOGM matching cost."""

import logging
from typing import Iterable

import numpy as np

from .config import resolve_weights
from .confusion import build_confusion_matrix
from .labeling import iter_time_points
from .overlap import compute_cost_matrix
from .types import DETFrameResult, Weights


def det_frame_result(
    cost_matrix: np.ndarray, weights: Weights | None = None
) -> DETFrameResult:
    """Reduce the cost matrix of one frame to its AOGM penalty.

    - a GT row without match is a false negative (``w_fn``)
    - a predicted column without match is a false positive (``w_fp``)
    - a predicted column matched by n > 1 GT rows misses n - 1 splits
      (``(n - 1) * w_ns``)

    Args:
        cost_matrix: (nGT, nPred) thresholded IoU matrix
        weights: AOGM weights (uses defaults if None)

    Returns:
        DETFrameResult with the number of GT objects, the largest number of
        GT objects covered by one prediction and the AOGM penalty
    """
    weights = resolve_weights(weights)

    n_rows, n_cols = cost_matrix.shape
    matched = cost_matrix > 0

    n_fn = int(np.count_nonzero(~matched.any(axis=1)))
    matches_per_pred = np.count_nonzero(matched, axis=0)
    n_fp = int(np.count_nonzero(matches_per_pred == 0))
    missed_splits = int((matches_per_pred[matches_per_pred > 1] - 1).sum())

    aogm = n_fn * weights.w_fn + n_fp * weights.w_fp + missed_splits * weights.w_ns

    if n_rows == 0 or n_cols == 0:
        max_ns = 0
    else:
        max_ns = max(1, int(matches_per_pred.max()))

    logging.debug(
        f"AOGM frame: {n_fn} FN, {n_fp} FP, {missed_splits} missed splits "
        f"-> {aogm:.2f}"
    )
    return DETFrameResult(n_gt=int(n_rows), max_ns=max_ns, aogm=float(aogm))


def det_score(aogm: float, n_gt: int, weights: Weights | None = None) -> float:
    """Normalize an AOGM penalty into a DET score.

    The penalty is capped at the cost of missing every GT object
    (``AOGM0 = w_fn * n_gt``), so the score lies in [0, 1].

    Returns:
        ``1 - min(aogm, AOGM0) / AOGM0``, or NaN when AOGM0 is 0.
    """
    weights = resolve_weights(weights)
    aogm_0 = weights.w_fn * n_gt
    if aogm_0 <= 0:
        return float("nan")
    return float(1.0 - min(aogm, aogm_0) / aogm_0)


def combine_det(
    results: Iterable[DETFrameResult], weights: Weights | None = None
) -> float:
    total = sum(results, DETFrameResult())
    return det_score(total.aogm, total.n_gt, weights)


def check_minimality_condition(weights: Weights, result: DETFrameResult) -> bool:
    """Check whether the weights fulfil the AOGM minimality condition.

    When it holds, splitting a prediction to fix a missed split is never more
    expensive than leaving it. This is a diagnostic only and is not enforced.
    See equation 13 of Matula et al., PLoS ONE 10(12), 2015
    (https://doi.org/10.1371/journal.pone.0144959).
    """
    return (result.max_ns - 1) * weights.w_ns <= weights.w_fp + result.max_ns * weights.w_fn


def score_det_frame(
    ground_truth, prediction, weights: Weights | None = None
) -> DETFrameResult:
    """Compute the DET contribution of a single frame (2D or 3D volume)."""
    confusion = build_confusion_matrix(ground_truth, prediction)
    return det_frame_result(compute_cost_matrix(confusion), weights)


def compute_det_metrics(ground_truth, prediction, weights: Weights | None = None) -> float:
    """
    Compute the DET score between a ground-truth and a predicted label volume.

    XYZ volumes are matched as 3D objects. XYZT volumes are matched
    independently on every time index, and the AOGM penalties and GT counts
    of all time indices are summed before normalization.

    Args:
        ground_truth: Ground truth label volume or ``Labeling`` (0 = background)
        prediction: Predicted label volume or ``Labeling`` (0 = background)
        weights: AOGM weights (uses defaults if None)

    Returns:
        DET score in [0, 1], or NaN if the ground truth has no object.

    Example usage:
        score = compute_det_metrics(gt, pred, Weights(w_fn=10, w_fp=1, w_ns=5))
    """
    weights = resolve_weights(weights)

    results = [
        score_det_frame(g, p, weights)
        for g, p in iter_time_points(ground_truth, prediction)
    ]
    total = sum(results, DETFrameResult())
    if not check_minimality_condition(weights, total):
        logging.warning(
            f"Minimality condition does not hold for {weights} "
            f"(max split multiplicity {total.max_ns})"
        )
    score = det_score(total.aogm, total.n_gt, weights)
    logging.info(f"DET over {len(results)} frame(s): {score:.4f}")
    return score
