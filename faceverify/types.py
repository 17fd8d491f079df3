"""Common dataclasses and type aliases used across the faceverify package."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

# Single-channel uint8 image of shape (NORMALIZED_SIZE, NORMALIZED_SIZE)
NormalizedFace = np.ndarray

NORMALIZED_SIZE = 128
UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class FrameBounds:
    """Width/height of the frame a region lives in."""

    width: int
    height: int

    @classmethod
    def from_image(cls, image: np.ndarray) -> "FrameBounds":
        height, width = image.shape[:2]
        return cls(width=int(width), height=int(height))


@dataclass(frozen=True)
class Region:
    """Axis-aligned candidate face rectangle in frame pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_xywh(cls, rect) -> "Region":
        x, y, w, h = rect
        return cls(int(x), int(y), int(w), int(h))

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def aspect_ratio(self) -> float:
        if self.height == 0:
            return float("inf")
        return self.width / self.height

    def scaled(self, factor: float) -> "Region":
        """Map the region into a frame resized by ``factor``."""
        return Region(
            int(round(self.x * factor)),
            int(round(self.y * factor)),
            int(round(self.width * factor)),
            int(round(self.height * factor)),
        )

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True)
class Label:
    """Identity decision for one region."""

    name: str
    score: float
    matched: bool

    @property
    def text(self) -> str:
        return f"{self.name}, distance: {self.score:.2f}"


@dataclass
class FaceResult:
    region: Region
    score: float
    label: Label


@dataclass
class FrameResult:
    """Outcome of processing one frame."""

    frame_idx: int
    frame: np.ndarray
    faces: List[FaceResult] = field(default_factory=list)
    rejected: int = 0

    @property
    def matched(self) -> bool:
        return any(face.label.matched for face in self.faces)

    @property
    def best_score(self) -> Optional[float]:
        if not self.faces:
            return None
        return min(face.score for face in self.faces)
