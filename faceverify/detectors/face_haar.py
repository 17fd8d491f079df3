"""OpenCV Haar cascade face detector wrapper."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

import cv2
import numpy as np

from faceverify.recognition.normalize import to_grayscale
from faceverify.types import Region

LOGGER = logging.getLogger("faceverify.detectors.face")

DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


class FaceDetector(Protocol):
    """Anything that proposes face rectangles for an image."""

    def detect(self, image: np.ndarray) -> Sequence[Region]:
        ...


def default_cascade_path() -> Path:
    return Path(cv2.data.haarcascades) / DEFAULT_CASCADE


class HaarFaceDetector:
    """Thin wrapper around ``cv2.CascadeClassifier.detectMultiScale``."""

    def __init__(
        self,
        cascade_path: Optional[Path] = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 3,
        min_size: Tuple[int, int] = (30, 30),
    ) -> None:
        path = Path(cascade_path) if cascade_path is not None else default_cascade_path()
        if not path.exists():
            raise RuntimeError(f"Haar cascade not found: {path}")
        try:
            self.classifier = cv2.CascadeClassifier(str(path))
        except cv2.error as exc:
            raise RuntimeError(f"Failed to load Haar cascade: {path}") from exc
        if self.classifier.empty():
            raise RuntimeError(f"Failed to load Haar cascade: {path}")
        self.cascade_path = path
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = tuple(int(v) for v in min_size)
        LOGGER.info(
            "Loaded Haar cascade %s scale_factor=%.2f min_neighbors=%d min_size=%s",
            path.name,
            scale_factor,
            min_neighbors,
            self.min_size,
        )

    def detect(self, image: np.ndarray) -> List[Region]:
        gray = to_grayscale(image)
        rects = self.classifier.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )
        return [Region.from_xywh(rect) for rect in rects]
