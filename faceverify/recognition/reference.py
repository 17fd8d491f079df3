"""Reference face enrollment from a single still image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from faceverify.detectors.face_haar import FaceDetector
from faceverify.io_utils import load_image
from faceverify.recognition.normalize import normalize_face, to_grayscale
from faceverify.recognition.region import MAX_ASPECT_RATIO, MIN_FACE_SIZE, validate_region
from faceverify.types import NORMALIZED_SIZE, FrameBounds, NormalizedFace, Region

LOGGER = logging.getLogger("faceverify.recognition.reference")


class ReferenceFaceError(RuntimeError):
    """Raised when no usable face can be enrolled from the reference image."""


@dataclass(frozen=True)
class ReferenceFace:
    name: str
    face: NormalizedFace
    region: Region
    source: Optional[Path] = None


def display_name_for(path: Path) -> str:
    """Label shown for matches; the reference file name, or ``Unknown`` if it has none."""
    return path.name or "Unknown"


def select_reference_region(
    image: np.ndarray,
    candidates: List[Region],
    min_size: int = MIN_FACE_SIZE,
    max_aspect_ratio: float = MAX_ASPECT_RATIO,
) -> Optional[Region]:
    """Pick the largest plausible candidate; detector order carries no meaning."""
    bounds = FrameBounds.from_image(image)
    valid = [
        region
        for region in (
            validate_region(candidate, bounds, min_size=min_size, max_aspect_ratio=max_aspect_ratio)
            for candidate in candidates
        )
        if region is not None
    ]
    if not valid:
        return None
    return max(valid, key=lambda region: (region.area, -region.y, -region.x))


def build_reference(
    image: np.ndarray,
    detector: FaceDetector,
    name: str,
    min_size: int = MIN_FACE_SIZE,
    max_aspect_ratio: float = MAX_ASPECT_RATIO,
    size: int = NORMALIZED_SIZE,
    source: Optional[Path] = None,
) -> ReferenceFace:
    gray = to_grayscale(image)
    candidates = list(detector.detect(gray))
    region = select_reference_region(gray, candidates, min_size=min_size, max_aspect_ratio=max_aspect_ratio)
    if region is None:
        where = source if source is not None else "reference image"
        raise ReferenceFaceError(
            f"No valid reference face found in {where} ({len(candidates)} candidate(s) detected)"
        )
    if len(candidates) > 1:
        LOGGER.warning("Reference image has %d face candidates; using largest %s", len(candidates), region)
    face = normalize_face(gray, region, size=size)
    LOGGER.info("Enrolled reference %r from region %s", name, region.as_tuple())
    return ReferenceFace(name=name, face=face, region=region, source=source)


def enroll_reference(
    path: Path,
    detector: FaceDetector,
    name: Optional[str] = None,
    min_size: int = MIN_FACE_SIZE,
    max_aspect_ratio: float = MAX_ASPECT_RATIO,
    size: int = NORMALIZED_SIZE,
) -> ReferenceFace:
    """Load ``path`` and build the reference face from its largest valid detection."""
    path = Path(path)
    image = load_image(path, grayscale=True)
    return build_reference(
        image,
        detector,
        name=name or display_name_for(path),
        min_size=min_size,
        max_aspect_ratio=max_aspect_ratio,
        size=size,
        source=path,
    )
