import numpy as np
import pytest

from cell_tracking_metrics.metrics import (
    Labeling,
    IntersectingLabelsError,
    ShapeMismatchError,
    ValidationError,
    build_confusion_matrix,
    compute_cost_matrix,
)


def _small_grid():
    gt = np.array(
        [
            [0, 1, 1],
            [0, 0, 2],
            [0, 2, 2],
        ],
        dtype=np.int32,
    )
    pred = np.array(
        [
            [0, 1, 0],
            [0, 2, 2],
            [0, 2, 2],
        ],
        dtype=np.int32,
    )
    return gt, pred


# ------------------------
# Confusion matrix tests
# ------------------------


def test_basic_small_grid():
    """
    gt1: 2 px, gt2: 3 px ; pred1: 1 px, pred2: 4 px
    gt1∩pred1 = 1, gt2∩pred2 = 3, no other overlap.
    """
    gt, pred = _small_grid()
    cm = build_confusion_matrix(gt, pred)

    assert cm.n_gt == 2
    assert cm.n_pred == 2
    np.testing.assert_array_equal(cm.overlap, [[1, 0], [0, 3]])
    np.testing.assert_array_equal(cm.gt_sizes, [2, 3])
    np.testing.assert_array_equal(cm.pred_sizes, [1, 4])
    assert cm.intersection(1, 1) == 3
    assert cm.gt_size(0) == 2
    assert cm.pred_size(1) == 4


def test_sparse_label_values_are_renumbered():
    """Large, non-contiguous label values map to dense indices in sorted order."""
    gt = np.zeros((4, 4), dtype=np.uint32)
    pred = np.zeros((4, 4), dtype=np.uint32)
    gt[0:2, 0:2] = 4_000_000
    gt[2:4, 2:4] = 7
    pred[0:2, 0:2] = 123
    pred[2:4, 2:4] = 99_999

    cm = build_confusion_matrix(gt, pred)
    np.testing.assert_array_equal(cm.gt_labels, [7, 4_000_000])
    np.testing.assert_array_equal(cm.pred_labels, [123, 99_999])
    assert cm.gt_index == {7: 0, 4_000_000: 1}
    assert cm.pred_index == {123: 0, 99_999: 1}
    np.testing.assert_array_equal(cm.overlap, [[0, 4], [4, 0]])


def test_sizes_counted_when_other_side_is_background():
    gt = np.array([[1, 1, 0, 0]], dtype=np.int32).reshape(2, 2)
    pred = np.array([[0, 0, 2, 2]], dtype=np.int32).reshape(2, 2)

    cm = build_confusion_matrix(gt, pred)
    np.testing.assert_array_equal(cm.gt_sizes, [2])
    np.testing.assert_array_equal(cm.pred_sizes, [2])
    np.testing.assert_array_equal(cm.overlap, [[0]])


def test_empty_pred():
    gt, _ = _small_grid()
    cm = build_confusion_matrix(gt, np.zeros_like(gt))
    assert cm.overlap.shape == (2, 0)
    assert cm.n_pred == 0


def test_empty_gt():
    _, pred = _small_grid()
    cm = build_confusion_matrix(np.zeros_like(pred), pred)
    assert cm.overlap.shape == (0, 2)
    assert cm.n_gt == 0


def test_arrays_are_read_only():
    gt, pred = _small_grid()
    cm = build_confusion_matrix(gt, pred)
    with pytest.raises(ValueError):
        cm.overlap[0, 0] = 5


def test_inputs_are_not_modified():
    gt, pred = _small_grid()
    gt_copy, pred_copy = gt.copy(), pred.copy()
    build_confusion_matrix(gt, pred)
    np.testing.assert_array_equal(gt, gt_copy)
    np.testing.assert_array_equal(pred, pred_copy)


def test_shape_mismatch_raises():
    gt = np.zeros((3, 3), dtype=np.int32)
    pred = np.zeros((3, 4), dtype=np.int32)
    with pytest.raises(ShapeMismatchError, match="must have the same shape"):
        build_confusion_matrix(gt, pred)


def test_non_integer_volume_raises():
    gt = np.zeros((3, 3), dtype=np.float32)
    with pytest.raises(ValidationError, match="integer typed"):
        build_confusion_matrix(gt, gt)


def test_negative_label_raises():
    gt = np.zeros((3, 3), dtype=np.int32)
    gt[1, 1] = -2
    with pytest.raises(ValidationError, match="negative labels"):
        build_confusion_matrix(gt, np.zeros_like(gt))


def test_wrong_dimensionality_raises():
    gt = np.zeros((5,), dtype=np.int32)
    with pytest.raises(ValidationError, match="2, 3 or 4 dimensions"):
        build_confusion_matrix(gt, gt)


def test_intersecting_labeling_raises():
    index = np.array([[0, 1], [2, 2]], dtype=np.int32)
    bad = Labeling.from_image_and_label_sets(index, [set(), {"a"}, {"a", "b"}])
    good = Labeling.from_image_and_label_sets(index, [set(), {"a"}, {"b"}])

    with pytest.raises(IntersectingLabelsError):
        build_confusion_matrix(bad, good)
    with pytest.raises(IntersectingLabelsError):
        build_confusion_matrix(good, bad)

    cm = build_confusion_matrix(good, good)
    np.testing.assert_array_equal(cm.overlap, [[1, 0], [0, 2]])


def test_matches_naive_reference():
    """
    Cross-check against a naive python/dict reference on a tiny random mask.
    """
    rng = np.random.default_rng(0)
    H, W = 6, 7
    nG, nP = 3, 4
    gt = rng.integers(0, nG + 1, size=(H, W), dtype=np.int32)
    pred = rng.integers(0, nP + 1, size=(H, W), dtype=np.int32)

    cm = build_confusion_matrix(gt, pred)

    gt_ids = sorted(int(v) for v in np.unique(gt) if v != 0)
    pr_ids = sorted(int(v) for v in np.unique(pred) if v != 0)
    inter = np.zeros((len(gt_ids), len(pr_ids)), dtype=np.int64)
    for y in range(H):
        for x in range(W):
            g = int(gt[y, x])
            p = int(pred[y, x])
            if g > 0 and p > 0:
                inter[gt_ids.index(g), pr_ids.index(p)] += 1

    np.testing.assert_array_equal(cm.overlap, inter)
    np.testing.assert_array_equal(
        cm.gt_sizes, [int((gt == k).sum()) for k in gt_ids]
    )
    np.testing.assert_array_equal(
        cm.pred_sizes, [int((pred == k).sum()) for k in pr_ids]
    )


# ------------------------
# Cost matrix tests
# ------------------------


def test_cost_matrix_threshold_is_strict():
    """gt1/pred1 has IoU exactly 0.5 and is not a match; gt2/pred2 is 0.75."""
    gt, pred = _small_grid()
    cost = compute_cost_matrix(build_confusion_matrix(gt, pred))

    assert cost.dtype == np.float64
    np.testing.assert_allclose(cost, [[0.0, 0.0], [0.0, 0.75]])


def test_cost_matrix_keeps_matches_above_threshold():
    gt = np.zeros((10, 10), dtype=np.int32)
    pred = np.zeros((10, 10), dtype=np.int32)
    gt[0:4, 0:4] = 1  # 16 px
    pred[0:4, 0:3] = 3  # 12 px, IoU 0.75
    gt[6:10, 6:10] = 2  # 16 px
    pred[6:8, 6:8] = 4  # 4 px, IoU 0.25

    cost = compute_cost_matrix(build_confusion_matrix(gt, pred))
    np.testing.assert_allclose(cost, [[0.75, 0.0], [0.0, 0.0]])


def test_cost_matrix_empty_axes():
    gt, pred = _small_grid()
    assert compute_cost_matrix(build_confusion_matrix(gt, np.zeros_like(gt))).shape == (2, 0)
    assert compute_cost_matrix(build_confusion_matrix(np.zeros_like(pred), pred)).shape == (0, 2)
