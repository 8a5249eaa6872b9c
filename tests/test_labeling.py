"""Unit tests for label volume validation, labelings and time point splitting."""

import numpy as np
import pytest

from cell_tracking_metrics.metrics import (
    IntersectingLabelsError,
    Labeling,
    ShapeMismatchError,
    ValidationError,
    as_label_volume,
    has_intersecting_labels,
    iter_time_points,
)


class TestLabeling:
    def test_has_intersecting_labels(self):
        index = np.zeros((2, 2), dtype=np.int32)
        assert has_intersecting_labels(
            Labeling.from_image_and_label_sets(index, [set(), {1, 2}])
        )
        assert not has_intersecting_labels(
            Labeling.from_image_and_label_sets(index, [set(), {1}, {2}])
        )

    def test_unused_intersecting_set_still_rejected(self):
        """Any label set with two labels is rejected, even if no pixel uses it."""
        index = np.array([[0, 1], [1, 0]], dtype=np.int32)
        labeling = Labeling.from_image_and_label_sets(index, [set(), {"a"}, {"a", "b"}])
        with pytest.raises(IntersectingLabelsError):
            labeling.to_index_image()

    def test_empty_label_sets_become_background(self):
        index = np.array([[0, 1], [2, 3]], dtype=np.int32)
        labeling = Labeling.from_image_and_label_sets(index, [set(), {"a"}, set(), {"c"}])

        out = labeling.to_index_image()
        np.testing.assert_array_equal(out, [[0, 1], [0, 3]])
        # original index image untouched
        np.testing.assert_array_equal(index, [[0, 1], [2, 3]])

    def test_non_empty_background_set_rejected(self):
        """Pixels at index 0 are background, so its label set must be empty."""
        index = np.array([[0, 1], [1, 0]], dtype=np.int32)
        labeling = Labeling.from_image_and_label_sets(index, [{"a"}, {"b"}])
        with pytest.raises(ValidationError, match="Index 0 is background"):
            labeling.to_index_image()
        with pytest.raises(ValidationError):
            as_label_volume(labeling)

    def test_shape(self):
        labeling = Labeling.from_image_and_label_sets(
            np.zeros((3, 4, 5), dtype=np.uint16), [set()]
        )
        assert labeling.shape == (3, 4, 5)


class TestAsLabelVolume:
    def test_accepts_unsigned(self):
        arr = np.ones((4, 4), dtype=np.uint8)
        assert as_label_volume(arr) is arr

    def test_accepts_nested_lists(self):
        out = as_label_volume([[0, 1], [2, 0]])
        assert out.shape == (2, 2)

    def test_rejects_bool(self):
        with pytest.raises(ValidationError):
            as_label_volume(np.zeros((2, 2), dtype=bool))

    def test_rejects_five_dimensions(self):
        with pytest.raises(ValidationError):
            as_label_volume(np.zeros((1, 1, 1, 1, 1), dtype=np.int32))


class TestIterTimePoints:
    def test_2d_is_single_frame(self):
        gt = np.zeros((4, 4), dtype=np.int32)
        frames = list(iter_time_points(gt, gt))
        assert len(frames) == 1
        assert frames[0][0].shape == (4, 4)

    def test_4d_split_along_time_axis(self):
        gt = np.zeros((4, 5, 2, 3), dtype=np.int32)
        gt[..., 1] = 7
        frames = list(iter_time_points(gt, gt.copy()))
        assert len(frames) == 3
        assert all(g.shape == (4, 5, 2) for g, _ in frames)
        assert frames[1][0].max() == 7
        assert frames[0][0].max() == 0

    def test_4d_with_single_time_index(self):
        gt = np.zeros((4, 5, 2, 1), dtype=np.int32)
        frames = list(iter_time_points(gt, gt))
        assert len(frames) == 1
        assert frames[0][0].shape == (4, 5, 2, 1)

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            list(
                iter_time_points(
                    np.zeros((4, 4), dtype=np.int32), np.zeros((4, 4, 2), dtype=np.int32)
                )
            )
