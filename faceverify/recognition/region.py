"""Geometric validation of detector candidates."""

from __future__ import annotations

import logging
from typing import Optional

from faceverify.types import FrameBounds, Region

LOGGER = logging.getLogger("faceverify.recognition.region")

MIN_FACE_SIZE = 40
MAX_ASPECT_RATIO = 1.5


def clamp_region(region: Region, bounds: FrameBounds) -> Optional[Region]:
    """Clamp ``region`` into the frame, or return None if nothing usable remains."""
    if region.width <= 0 or region.height <= 0:
        return None
    if bounds.width <= 0 or bounds.height <= 0:
        return None

    # Intersection with the frame; boxes lying wholly outside collapse.
    x1 = max(region.x, 0)
    y1 = max(region.y, 0)
    x2 = min(region.x2, bounds.width)
    y2 = min(region.y2, bounds.height)
    if x2 <= x1 or y2 <= y1:
        return None
    return Region(x1, y1, x2 - x1, y2 - y1)


def is_plausible_face(
    region: Region,
    min_size: int = MIN_FACE_SIZE,
    max_aspect_ratio: float = MAX_ASPECT_RATIO,
) -> bool:
    """Reject regions that are too small or too elongated to be a face."""
    if region.width < min_size or region.height < min_size:
        return False
    ratio = region.aspect_ratio
    return (1.0 / max_aspect_ratio) < ratio < max_aspect_ratio


def validate_region(
    region: Region,
    bounds: FrameBounds,
    min_size: int = MIN_FACE_SIZE,
    max_aspect_ratio: float = MAX_ASPECT_RATIO,
) -> Optional[Region]:
    clamped = clamp_region(region, bounds)
    if clamped is None:
        LOGGER.debug("Rejected %s: empty after clamping to %s", region, bounds)
        return None
    if not is_plausible_face(clamped, min_size=min_size, max_aspect_ratio=max_aspect_ratio):
        LOGGER.debug(
            "Rejected %s: size/aspect outside min=%d ratio=%.2f",
            clamped,
            min_size,
            max_aspect_ratio,
        )
        return None
    return clamped
