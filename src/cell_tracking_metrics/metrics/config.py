"""Configuration for the metrics engine."""

import logging
import os
from dataclasses import dataclass

from ..config import (
    DEFAULT_W_FN,
    DEFAULT_W_FP,
    DEFAULT_W_NS,
    MAX_METRICS_THREADS,
)
from .types import Weights

# Logging Configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@dataclass
class MetricsConfig:
    """Configuration for SEG/DET scoring.

    All parameters can be set via environment variables or passed directly.
    Environment variables take precedence over defaults but not over
    explicitly passed values.
    """

    # DET weights
    w_fn: float = DEFAULT_W_FN
    w_fp: float = DEFAULT_W_FP
    w_ns: float = DEFAULT_W_NS

    # Threading configuration
    max_workers: int = MAX_METRICS_THREADS

    @classmethod
    def from_env(cls) -> "MetricsConfig":
        """Load configuration from environment variables with defaults.

        Returns:
            MetricsConfig with values from environment or defaults.
        """
        return cls(
            w_fn=float(os.getenv("DET_WEIGHT_FN", DEFAULT_W_FN)),
            w_fp=float(os.getenv("DET_WEIGHT_FP", DEFAULT_W_FP)),
            w_ns=float(os.getenv("DET_WEIGHT_NS", DEFAULT_W_NS)),
            max_workers=int(os.getenv("MAX_METRICS_THREADS", MAX_METRICS_THREADS)),
        )

    @property
    def weights(self) -> Weights:
        return Weights(w_fn=self.w_fn, w_fp=self.w_fp, w_ns=self.w_ns)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if self.w_fn <= 0:
            raise ValueError(f"w_fn must be > 0, got {self.w_fn}")
        if self.w_fp < 0:
            raise ValueError(f"w_fp must be >= 0, got {self.w_fp}")
        if self.w_ns < 0:
            raise ValueError(f"w_ns must be >= 0, got {self.w_ns}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


def resolve_weights(weights: Weights | None = None) -> Weights:
    """Return the given weights, or the validated weights from the environment."""
    if weights is None:
        config = MetricsConfig.from_env()
        config.validate()
        weights = config.weights
    return weights
