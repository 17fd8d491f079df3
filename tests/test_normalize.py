import numpy as np
import pytest

from faceverify.recognition.normalize import crop_region, normalize_face, to_grayscale
from faceverify.types import Region


@pytest.mark.parametrize("rect", [(0, 0, 40, 40), (13, 7, 200, 150), (100, 50, 41, 60)])
def test_normalized_face_is_always_128_square_single_channel(rect):
    frame = np.random.default_rng(0).integers(0, 255, size=(240, 320, 3), dtype=np.uint8)
    face = normalize_face(frame, Region.from_xywh(rect))
    assert face.shape == (128, 128)
    assert face.dtype == np.uint8


def test_normalize_is_deterministic(face_patch):
    frame = np.dstack([face_patch] * 3)
    region = Region(5, 5, 60, 70)
    first = normalize_face(frame, region)
    second = normalize_face(frame, region)
    assert np.array_equal(first, second)


def test_normalize_accepts_gray_frames(face_patch):
    face = normalize_face(face_patch, Region(0, 0, 96, 96))
    assert face.shape == (128, 128)


def test_gray_and_color_frames_normalize_identically(face_patch):
    color = np.dstack([face_patch] * 3)
    region = Region(10, 10, 50, 50)
    assert np.array_equal(normalize_face(color, region), normalize_face(face_patch, region))


def test_to_grayscale_uses_luma_weights():
    pixel = np.zeros((1, 1, 3), dtype=np.uint8)
    pixel[0, 0] = (0, 0, 255)  # pure red in BGR
    assert int(to_grayscale(pixel)[0, 0]) == 76


def test_crop_outside_buffer_raises():
    frame = np.zeros((100, 100), dtype=np.uint8)
    with pytest.raises(ValueError):
        crop_region(frame, Region(80, 80, 40, 40))
    with pytest.raises(ValueError):
        normalize_face(frame, Region(-1, 0, 50, 50))
