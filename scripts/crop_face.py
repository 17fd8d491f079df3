#!/usr/bin/env python3
"""CLI for cutting a reference face out of a photo."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import cv2

from faceverify.detectors.face_haar import HaarFaceDetector
from faceverify.io_utils import load_image, save_image, setup_logging
from faceverify.recognition.normalize import crop_region, to_grayscale
from faceverify.recognition.reference import select_reference_region
from faceverify.types import NORMALIZED_SIZE


LOGGER = logging.getLogger("scripts.crop_face")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect, crop and resize the face in an image")
    parser.add_argument("input", type=Path, help="Source photo")
    parser.add_argument("output", type=Path, help="Where to write the cropped face")
    parser.add_argument("--size", type=int, default=NORMALIZED_SIZE, help="Output edge length in pixels")
    parser.add_argument("--cascade", type=Path, default=None, help="Override Haar cascade XML")
    parser.add_argument("--gray", action="store_true", help="Write a single-channel crop")
    return parser.parse_args(argv)


def crop_face(input_path: Path, output_path: Path, detector, size: int = NORMALIZED_SIZE, gray: bool = False) -> bool:
    """Write the largest plausible face of ``input_path`` to ``output_path``; False if none."""
    image = load_image(input_path)
    candidates = list(detector.detect(to_grayscale(image)))
    if not candidates:
        LOGGER.warning("No face detected in image: %s", input_path)
        return False
    region = select_reference_region(image, candidates)
    if region is None:
        LOGGER.warning("No plausible face (size/aspect/bounds) in image: %s", input_path)
        return False
    cropped = crop_region(image, region)
    if gray:
        cropped = to_grayscale(cropped)
    resized = cv2.resize(cropped, (size, size), interpolation=cv2.INTER_LINEAR)
    save_image(output_path, resized)
    LOGGER.info("Saved resized face to %s", output_path)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()
    try:
        detector = HaarFaceDetector(cascade_path=args.cascade)
        ok = crop_face(args.input, args.output, detector, size=args.size, gray=args.gray)
    except (RuntimeError, FileNotFoundError) as exc:
        LOGGER.error("Fatal: %s", exc)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
