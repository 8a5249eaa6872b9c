"""Overlap (confusion) matrix between ground-truth and predicted objects."""

import logging
from dataclasses import dataclass

import numpy as np
from fastremap import remap, unique

from .exceptions import ShapeMismatchError
from .labeling import as_label_volume


@dataclass(frozen=True, eq=False)
class ConfusionMatrix:
    """Pixel overlap between every ground-truth and predicted label.

    Labels are renumbered to dense indices ``0..nGT-1`` / ``0..nPred-1`` in
    ascending order of their original value; background (0) is excluded from
    both axes. All arrays are read-only.
    """

    gt_labels: np.ndarray  # original GT label value of each row
    pred_labels: np.ndarray  # original predicted label value of each column
    overlap: np.ndarray  # (nGT, nPred) shared pixel counts
    gt_sizes: np.ndarray  # (nGT,) pixel count of each GT label
    pred_sizes: np.ndarray  # (nPred,) pixel count of each predicted label
    gt_index: dict[int, int]  # GT label value -> row
    pred_index: dict[int, int]  # predicted label value -> column

    def __post_init__(self):
        for arr in (
            self.gt_labels,
            self.pred_labels,
            self.overlap,
            self.gt_sizes,
            self.pred_sizes,
        ):
            arr.setflags(write=False)

    @property
    def n_gt(self) -> int:
        return int(self.gt_labels.size)

    @property
    def n_pred(self) -> int:
        return int(self.pred_labels.size)

    def intersection(self, i: int, j: int) -> int:
        return int(self.overlap[i, j])

    def gt_size(self, i: int) -> int:
        return int(self.gt_sizes[i])

    def pred_size(self, j: int) -> int:
        return int(self.pred_sizes[j])


def _dense_labels(volume: np.ndarray) -> tuple[np.ndarray, np.ndarray, dict[int, int]]:
    """Renumber the objects of a label volume to ``1..n`` (0 stays background).

    Args:
        volume: Label volume (0 = background)

    Returns:
        Tuple of (sorted original labels, flat renumbered volume, index map
        from original label to 0-based dense index)
    """
    flat = np.ravel(volume)
    if flat.size == 0:
        return np.array([], dtype=flat.dtype), flat.astype(np.int64), {}

    labels = unique(flat)
    labels = labels[labels != 0]
    index = {int(v): i for i, v in enumerate(labels)}

    mapping = {v: i + 1 for v, i in index.items()}
    mapping[0] = 0
    dense = remap(flat, mapping, preserve_missing_labels=False, in_place=False)

    return labels, dense.astype(np.int64, copy=False), index


def build_confusion_matrix(ground_truth, prediction) -> ConfusionMatrix:
    """Compute the confusion matrix between two label volumes.

    Args:
        ground_truth: Ground truth label volume or ``Labeling`` (0 = background)
        prediction: Predicted label volume or ``Labeling`` (0 = background)

    Returns:
        ConfusionMatrix with overlap counts and per-label sizes

    Raises:
        ShapeMismatchError: If the volumes do not have the same shape
        IntersectingLabelsError: If a labeling has intersecting labels
        ValidationError: If a volume is not a valid label volume
    """
    gt = as_label_volume(ground_truth)
    pred = as_label_volume(prediction)
    if gt.shape != pred.shape:
        raise ShapeMismatchError(gt.shape, pred.shape)

    gt_labels, g, gt_index = _dense_labels(gt)
    pred_labels, p, pred_index = _dense_labels(pred)
    nG = int(gt_labels.size)
    nP = int(pred_labels.size)

    # Foreground masks
    g_fg = g > 0
    p_fg = p > 0
    fg = g_fg & p_fg

    # Per-object sizes, each counted on its own side
    gt_sizes = np.bincount(g[g_fg] - 1, minlength=nG).astype(np.int64)
    pred_sizes = np.bincount(p[p_fg] - 1, minlength=nP).astype(np.int64)

    # Foreground overlaps, encoded as a single key per (gt, pred) pair
    overlap = np.zeros((nG, nP), dtype=np.int64)
    gi = g[fg] - 1
    pj = p[fg] - 1
    if gi.size > 0:
        key = gi * nP + pj
        uniq_keys, counts = np.unique(key, return_counts=True)
        overlap[uniq_keys // nP, uniq_keys % nP] = counts

    logging.debug(
        f"Confusion matrix: {nG} GT labels, {nP} predicted labels, "
        f"{int(np.count_nonzero(overlap))} overlapping pairs"
    )

    return ConfusionMatrix(
        gt_labels=gt_labels,
        pred_labels=pred_labels,
        overlap=overlap,
        gt_sizes=gt_sizes,
        pred_sizes=pred_sizes,
        gt_index=gt_index,
        pred_index=pred_index,
    )
