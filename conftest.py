from __future__ import annotations

import numpy as np
import pytest

from faceverify.types import Region


class StaticDetector:
    """Returns the same regions for every image and records what it was given."""

    def __init__(self, regions):
        self.regions = [Region.from_xywh(r) if not isinstance(r, Region) else r for r in regions]
        self.calls = []

    def detect(self, image):
        self.calls.append(image.shape)
        return list(self.regions)


def make_face_patch(size: int = 96, seed: int = 7) -> np.ndarray:
    """Deterministic textured gray patch standing in for a face crop."""
    rng = np.random.default_rng(seed)
    yy, xx = np.mgrid[0:size, 0:size]
    base = 128 + 60 * np.sin(xx / 6.0) * np.cos(yy / 9.0)
    noise = rng.normal(0, 10, size=(size, size))
    return np.clip(base + noise, 0, 255).astype(np.uint8)


@pytest.fixture
def face_patch() -> np.ndarray:
    return make_face_patch()


@pytest.fixture
def static_detector():
    return StaticDetector


@pytest.fixture
def make_patch():
    return make_face_patch
