"""Type definitions for frame results and scoring weights."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from ..config import DEFAULT_W_FN, DEFAULT_W_FP, DEFAULT_W_NS

ScorerKind = Literal["seg", "det"]


class AccumulatorState(str, Enum):
    """Lifecycle of an accumulation. Only DET reads finalize it."""

    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class Weights:
    """AOGM penalty weights used by DET.

    Raises:
        ValueError: If ``w_fn`` is not positive or ``w_fp``/``w_ns`` is negative.
    """

    w_fn: float = DEFAULT_W_FN  # false negative
    w_fp: float = DEFAULT_W_FP  # false positive
    w_ns: float = DEFAULT_W_NS  # non-split (one prediction covering several GT)

    def __post_init__(self):
        if not self.w_fn > 0:
            raise ValueError(f"w_fn must be > 0, got {self.w_fn}")
        if not self.w_fp >= 0:
            raise ValueError(f"w_fp must be >= 0, got {self.w_fp}")
        if not self.w_ns >= 0:
            raise ValueError(f"w_ns must be >= 0, got {self.w_ns}")


@dataclass(frozen=True)
class SEGFrameResult:
    """SEG contribution of one frame."""

    sum_iou: float = 0.0
    n_gt: int = 0

    def __add__(self, other: "SEGFrameResult") -> "SEGFrameResult":
        return SEGFrameResult(self.sum_iou + other.sum_iou, self.n_gt + other.n_gt)


@dataclass(frozen=True)
class DETFrameResult:
    """DET contribution of one frame."""

    n_gt: int = 0
    max_ns: int = 0
    aogm: float = 0.0

    def __add__(self, other: "DETFrameResult") -> "DETFrameResult":
        return DETFrameResult(
            self.n_gt + other.n_gt,
            max(self.max_ns, other.max_ns),
            self.aogm + other.aogm,
        )
