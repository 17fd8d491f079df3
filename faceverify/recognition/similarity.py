"""Dissimilarity scorers for normalized faces."""

from __future__ import annotations

import logging
from typing import Dict, Protocol

import cv2
import numpy as np

from faceverify.types import NormalizedFace

LOGGER = logging.getLogger("faceverify.recognition.similarity")

HIST_BINS = 256


class FaceScorer(Protocol):
    """Strategy returning a non-negative dissimilarity (0 means identical)."""

    name: str

    def score(self, a: NormalizedFace, b: NormalizedFace) -> float:
        ...


def _check_shapes(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise ValueError(f"Face shapes do not match: {a.shape} vs {b.shape}")


def pixel_energy(a: NormalizedFace, b: NormalizedFace) -> float:
    """L2 norm of the absolute per-pixel difference; scales with resolution."""
    _check_shapes(a, b)
    diff = cv2.absdiff(a, b)
    return float(cv2.norm(diff, cv2.NORM_L2))


def compute_histogram(face: NormalizedFace) -> np.ndarray:
    """256-bin intensity histogram, min-max normalized to [0, 1]."""
    if face.ndim != 2:
        raise ValueError(f"Expected a single-channel face, got shape {face.shape}")
    hist = cv2.calcHist([face], [0], None, [HIST_BINS], [0, HIST_BINS])
    return cv2.normalize(hist, None, 0.0, 1.0, cv2.NORM_MINMAX)


class PixelEnergyScorer:
    name = "energy"

    def score(self, a: NormalizedFace, b: NormalizedFace) -> float:
        return pixel_energy(a, b)


class HistogramScorer:
    """Compares normalized intensity histograms with ``cv2.compareHist``."""

    name = "histogram"

    METHODS: Dict[str, int] = {
        "bhattacharyya": cv2.HISTCMP_BHATTACHARYYA,
        "chi-square": cv2.HISTCMP_CHISQR,
        "correlation": cv2.HISTCMP_CORREL,
    }

    def __init__(self, method: str = "bhattacharyya") -> None:
        if method not in self.METHODS:
            raise ValueError(
                f"Unknown histogram method {method!r}; expected one of {sorted(self.METHODS)}"
            )
        self.method = method

    def score(self, a: NormalizedFace, b: NormalizedFace) -> float:
        _check_shapes(a, b)
        value = float(cv2.compareHist(compute_histogram(a), compute_histogram(b), self.METHODS[self.method]))
        if self.method == "correlation":
            # Correlation is a similarity in [-1, 1].
            value = 1.0 - value
        return max(0.0, value)


def build_scorer(name: str, **options) -> FaceScorer:
    """Return the scorer registered under ``name``."""
    if name == PixelEnergyScorer.name:
        if options:
            LOGGER.warning("Ignoring options %s for the energy scorer", sorted(options))
        return PixelEnergyScorer()
    if name == HistogramScorer.name:
        return HistogramScorer(**options)
    raise ValueError(f"Unknown similarity metric {name!r}; expected 'energy' or 'histogram'")
