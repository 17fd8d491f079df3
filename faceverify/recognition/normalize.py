"""Crop + grayscale + resize of validated face regions."""

from __future__ import annotations

import cv2
import numpy as np

from faceverify.types import NORMALIZED_SIZE, NormalizedFace, Region


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Return a single-channel view of ``image`` using BGR luma weights."""
    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def crop_region(image: np.ndarray, region: Region) -> np.ndarray:
    height, width = image.shape[:2]
    if (
        region.width <= 0
        or region.height <= 0
        or region.x < 0
        or region.y < 0
        or region.x2 > width
        or region.y2 > height
    ):
        raise ValueError(f"Crop {region} lies outside the {width}x{height} frame buffer")
    return image[region.y : region.y2, region.x : region.x2]


def normalize_face(
    frame: np.ndarray,
    region: Region,
    size: int = NORMALIZED_SIZE,
) -> NormalizedFace:
    """Crop ``region`` out of ``frame`` and resample it to a ``size`` x ``size`` gray face.

    The region must already be validated; a crop outside the frame is a caller bug
    and raises ``ValueError``.
    """
    crop = crop_region(frame, region)
    gray = to_grayscale(crop)
    resized = cv2.resize(gray, (size, size), interpolation=cv2.INTER_LINEAR)
    return np.ascontiguousarray(resized, dtype=np.uint8)
