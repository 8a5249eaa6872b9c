"""Label volume validation and multi-label labelings."""

from dataclasses import dataclass, field
from typing import Hashable, Sequence

import numpy as np
from fastremap import remap

from ..config import T_AXIS
from .exceptions import IntersectingLabelsError, ShapeMismatchError, ValidationError


@dataclass(frozen=True, eq=False)
class Labeling:
    """An index image whose values point into a list of label sets.

    ``label_sets[k]`` holds the labels present at every pixel where
    ``index_img == k``. Index 0 is background and must map to the empty
    set. Only labelings where every set has at most one label can be scored.
    """

    index_img: np.ndarray
    label_sets: Sequence[frozenset] = field(default_factory=lambda: [frozenset()])

    @classmethod
    def from_image_and_label_sets(
        cls, index_img: np.ndarray, label_sets: Sequence[set[Hashable]]
    ) -> "Labeling":
        return cls(
            index_img=np.asarray(index_img),
            label_sets=[frozenset(s) for s in label_sets],
        )

    @property
    def shape(self) -> tuple[int, ...]:
        return self.index_img.shape

    def to_index_image(self) -> np.ndarray:
        """Return the index image with empty-set indices mapped to background.

        Raises:
            IntersectingLabelsError: If a label set holds more than one label
            ValidationError: If the label set of index 0 is not empty
        """
        if has_intersecting_labels(self):
            raise IntersectingLabelsError(_first_intersecting_set(self))
        if self.label_sets and len(self.label_sets[0]) > 0:
            raise ValidationError(
                "Index 0 is background and must map to the empty label set, "
                f"got {set(self.label_sets[0])}"
            )
        empty = [k for k, s in enumerate(self.label_sets) if len(s) == 0 and k != 0]
        if not empty:
            return self.index_img
        mapping = {k: 0 for k in empty}
        return remap(
            self.index_img, mapping, preserve_missing_labels=True, in_place=False
        )


def _first_intersecting_set(labeling: Labeling) -> frozenset | None:
    for label_set in labeling.label_sets:
        if len(label_set) > 1:
            return label_set
    return None


def has_intersecting_labels(labeling: Labeling) -> bool:
    """Check whether any label set of the labeling holds more than one label."""
    return _first_intersecting_set(labeling) is not None


def as_label_volume(volume) -> np.ndarray:
    """Validate a label volume (or labeling) and return it as an ndarray.

    Args:
        volume: Integer ndarray with 2 to 4 dimensions, or a ``Labeling``.

    Returns:
        The label volume. The input array is never copied or modified.

    Raises:
        IntersectingLabelsError: If a labeling has intersecting labels
        ValidationError: If the volume is not a non-negative integer array
            with 2, 3 or 4 dimensions
    """
    if isinstance(volume, Labeling):
        volume = volume.to_index_image()
    arr = np.asarray(volume)

    if not np.issubdtype(arr.dtype, np.integer):
        raise ValidationError(f"Label volumes must be integer typed, got {arr.dtype}")
    if arr.ndim not in (2, 3, 4):
        raise ValidationError(
            f"Label volumes must have 2, 3 or 4 dimensions, got {arr.ndim}"
        )
    if np.issubdtype(arr.dtype, np.signedinteger) and arr.size:
        lowest = int(arr.min())
        if lowest < 0:
            raise ValidationError(
                f"Label volumes must not contain negative labels, found {lowest}"
            )
    return arr


def iter_time_points(ground_truth, prediction):
    """Yield matching (ground truth, prediction) frames of two label volumes.

    4D volumes with more than one time index along ``T_AXIS`` are split into
    one frame per time index. Anything else is yielded as a single frame.

    Raises:
        ShapeMismatchError: If the volumes do not have the same shape
    """
    gt = as_label_volume(ground_truth)
    pred = as_label_volume(prediction)
    if gt.shape != pred.shape:
        raise ShapeMismatchError(gt.shape, pred.shape)

    if gt.ndim > T_AXIS and gt.shape[T_AXIS] > 1:
        for t in range(gt.shape[T_AXIS]):
            yield np.take(gt, t, axis=T_AXIS), np.take(pred, t, axis=T_AXIS)
    else:
        yield gt, pred
