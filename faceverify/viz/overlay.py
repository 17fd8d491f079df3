"""Bounding box and label rendering for annotated frames."""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np

from faceverify.types import FaceResult

BOX_COLOR = (0, 255, 0)
TEXT_COLOR = (0, 0, 255)


def draw_face(frame: np.ndarray, result: FaceResult) -> np.ndarray:
    """Draw the box and label for ``result`` onto ``frame`` in place."""
    region = result.region
    cv2.rectangle(frame, (region.x, region.y), (region.x2, region.y2), BOX_COLOR, 2, cv2.LINE_8)
    text_y = max(15, region.y - 10)
    cv2.putText(
        frame,
        result.label.text,
        (region.x, text_y),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.5,
        TEXT_COLOR,
        1,
        cv2.LINE_AA,
    )
    return frame


def annotate_frame(frame: np.ndarray, results: Iterable[FaceResult]) -> np.ndarray:
    """Return a copy of ``frame`` with every result drawn; the input is left untouched."""
    annotated = frame.copy()
    for result in results:
        draw_face(annotated, result)
    return annotated
