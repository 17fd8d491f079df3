"""Threshold decision turning a dissimilarity score into an identity label."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from faceverify.types import UNKNOWN_LABEL, Label

LOGGER = logging.getLogger("faceverify.recognition.matcher")

# Empirical boundaries, valid only for 128x128 single-channel faces.
DEFAULT_THRESHOLDS: Dict[str, float] = {
    "energy": 20000.0,
    "histogram": 0.35,
}


def default_threshold(metric: str) -> float:
    try:
        return DEFAULT_THRESHOLDS[metric]
    except KeyError:
        raise ValueError(f"No default threshold for metric {metric!r}") from None


class ThresholdPolicy:
    """Labels a region as the reference identity when its score is below ``threshold``."""

    def __init__(self, name: str, threshold: Optional[float] = None, metric: str = "energy") -> None:
        if not name:
            raise ValueError("Reference identity name must not be empty")
        self.name = name
        self.metric = metric
        self.threshold = float(threshold) if threshold is not None else default_threshold(metric)
        if self.threshold <= 0:
            raise ValueError(f"Threshold must be positive, got {self.threshold}")

    def is_match(self, score: float) -> bool:
        return score < self.threshold

    def classify(self, score: float) -> Label:
        if self.is_match(score):
            return Label(name=self.name, score=float(score), matched=True)
        return Label(name=UNKNOWN_LABEL, score=float(score), matched=False)

    def __repr__(self) -> str:
        return f"ThresholdPolicy(name={self.name!r}, metric={self.metric!r}, threshold={self.threshold})"
