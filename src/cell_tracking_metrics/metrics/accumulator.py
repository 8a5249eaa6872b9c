"""Lazy, thread-safe accumulation of SEG/DET scores over time points."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable

from tqdm import tqdm

from .config import MetricsConfig, resolve_weights
from .confusion import build_confusion_matrix
from .det import check_minimality_condition, det_frame_result, det_score
from .labeling import iter_time_points
from .overlap import compute_cost_matrix
from .seg import seg_frame_result, seg_score
from .types import (
    AccumulatorState,
    DETFrameResult,
    ScorerKind,
    SEGFrameResult,
    Weights,
)


@dataclass(frozen=True)
class Reducer:
    """Per-frame reduction and final scoring of one metric."""

    frame: Callable  # (cost_matrix, weights) -> frame result
    score: Callable  # (total frame result, weights) -> float
    empty: Callable  # () -> neutral frame result


REDUCERS: dict[str, Reducer] = {
    "seg": Reducer(
        frame=lambda cost, weights: seg_frame_result(cost),
        score=lambda total, weights: seg_score(total.sum_iou, total.n_gt),
        empty=SEGFrameResult,
    ),
    "det": Reducer(
        frame=det_frame_result,
        score=lambda total, weights: det_score(total.aogm, total.n_gt, weights),
        empty=DETFrameResult,
    ),
}


class LazyMetrics:
    """Accumulate a SEG or DET score one time point at a time.

    Frames can be added from several threads at once. The confusion and cost
    matrices of a frame are built without locking; only folding the frame
    result into the running totals is serialized. The score therefore only
    depends on which frames were added, not on their order.

    Example:
        >>> metrics = LazyMetrics("seg")
        >>> for gt_frame, pred_frame in frames:
        ...     metrics.add_time_point(gt_frame, pred_frame)
        >>> score = metrics.compute_score()
    """

    def __init__(self, kind: ScorerKind = "seg", weights: Weights | None = None):
        if kind not in REDUCERS:
            raise ValueError(
                f"Unknown scorer kind {kind!r}, expected one of {list(REDUCERS)}"
            )
        weights = resolve_weights(weights)

        self._kind = kind
        self._weights = weights
        self._reducer = REDUCERS[kind]

        self._lock = threading.Lock()
        self._totals = self._reducer.empty()
        self._n_frames = 0
        self._state = AccumulatorState.ACCUMULATING

    @classmethod
    def seg(cls) -> "LazyMetrics":
        return cls("seg")

    @classmethod
    def det(cls, weights: Weights | None = None) -> "LazyMetrics":
        return cls("det", weights)

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def weights(self) -> Weights:
        return self._weights

    @property
    def n_frames(self) -> int:
        with self._lock:
            return self._n_frames

    @property
    def n_gt(self) -> int:
        with self._lock:
            return self._totals.n_gt

    @property
    def state(self) -> AccumulatorState:
        with self._lock:
            return self._state

    @property
    def max_ns(self) -> int:
        """Largest number of GT objects matched by a single prediction (DET only)."""
        self._require_det("max_ns")
        with self._lock:
            return self._totals.max_ns

    @property
    def minimality_holds(self) -> bool:
        """Whether the weights fulfil the minimality condition so far (DET only)."""
        self._require_det("minimality_holds")
        with self._lock:
            totals = self._totals
        return check_minimality_condition(self._weights, totals)

    def _require_det(self, name: str) -> None:
        if self._kind != "det":
            raise AttributeError(f"{name} is only defined for DET accumulation")

    def _frame_result(self, ground_truth, prediction):
        confusion = build_confusion_matrix(ground_truth, prediction)
        return self._reducer.frame(compute_cost_matrix(confusion), self._weights)

    def add_time_point(self, ground_truth, prediction):
        """Score one time point and fold it into the running totals.

        Each call adds a new observation, adding the same frames twice counts
        them twice. 4D volumes with several time indices are added as one
        observation per time index.

        Args:
            ground_truth: Ground truth frame or ``Labeling`` (0 = background)
            prediction: Predicted frame or ``Labeling`` (0 = background)

        Returns:
            The frame result (summed over time indices for 4D input)

        Raises:
            ShapeMismatchError: If the frames do not have the same shape
            IntersectingLabelsError: If a labeling has intersecting labels
        """
        results = [
            self._frame_result(g, p)
            for g, p in iter_time_points(ground_truth, prediction)
        ]
        added = sum(results, self._reducer.empty())

        with self._lock:
            self._totals = self._totals + added
            self._n_frames += len(results)

        logging.debug(f"Added {len(results)} time point(s) to {self._kind.upper()}")
        return added

    def add_time_points(
        self,
        frame_pairs: Iterable[tuple],
        max_workers: int | None = None,
        progress: bool = False,
    ) -> int:
        """Add many (ground truth, prediction) pairs using a thread pool.

        Pairs are added independently. If a worker fails, every other pair of
        the batch is still added to the totals; the number of pairs that went
        in is logged before the first worker exception is re-raised.

        Args:
            frame_pairs: Iterable of (ground truth, prediction) frame pairs
            max_workers: Number of threads (uses config if None)
            progress: Show a progress bar

        Returns:
            Number of pairs added

        Raises:
            The first exception raised by a worker, once all workers are done.
        """
        if max_workers is None:
            config = MetricsConfig.from_env()
            config.validate()
            max_workers = config.max_workers
        frame_pairs = list(frame_pairs)

        n_added = 0
        error = None
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(self.add_time_point, gt, pred)
                for gt, pred in frame_pairs
            ]
            for future in tqdm(
                as_completed(futures),
                desc=f"Accumulating {self._kind.upper()}",
                total=len(futures),
                dynamic_ncols=True,
                disable=not progress,
            ):
                exc = future.exception()
                if exc is None:
                    n_added += 1
                elif error is None:
                    error = exc

        if error is not None:
            logging.error(
                f"Added {n_added} of {len(frame_pairs)} pair(s) to "
                f"{self._kind.upper()} before failing: {error}"
            )
            raise error
        return n_added

    def compute_score(self) -> float:
        """Compute the score of all time points added so far.

        Reading does not reset the totals; later calls to ``add_time_point``
        keep extending them.

        Returns:
            The score, or NaN if no ground-truth object was added.
        """
        with self._lock:
            totals = self._totals
            n_frames = self._n_frames
            if self._kind == "det":
                self._state = AccumulatorState.FINALIZED

        if self._kind == "det" and not check_minimality_condition(
            self._weights, totals
        ):
            logging.warning(
                f"Minimality condition does not hold for {self._weights} "
                f"(max split multiplicity {totals.max_ns})"
            )

        score = self._reducer.score(totals, self._weights)
        logging.info(
            f"{self._kind.upper()} over {n_frames} time point(s) "
            f"and {totals.n_gt} GT objects: {score:.4f}"
        )
        return score
