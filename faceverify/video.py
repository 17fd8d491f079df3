"""Webcam frame source and preview window sink as scoped resources."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import cv2
import numpy as np

LOGGER = logging.getLogger("faceverify.video")


class FrameSource(Protocol):
    def read(self) -> Optional[np.ndarray]:
        """Next frame, or None for a transient empty read."""
        ...


class FrameSink(Protocol):
    def show(self, frame: np.ndarray) -> None:
        ...

    def poll_key(self, delay_ms: int) -> Optional[int]:
        ...


def is_empty_frame(frame: Optional[np.ndarray]) -> bool:
    return frame is None or frame.size == 0 or frame.ndim < 2 or frame.shape[1] == 0


class WebcamSource:
    """Owns a ``cv2.VideoCapture`` for the duration of a ``with`` block."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self) -> "WebcamSource":
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"Unable to open camera index {self.index}")
        self._cap = cap
        LOGGER.info(
            "Opened camera index=%d size=%dx%d",
            self.index,
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        return self

    def read(self) -> Optional[np.ndarray]:
        if self._cap is None:
            raise RuntimeError("Camera is not open")
        ok, frame = self._cap.read()
        if not ok or is_empty_frame(frame):
            return None
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            LOGGER.debug("Released camera index=%d", self.index)

    def __enter__(self) -> "WebcamSource":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()


class PreviewWindow:
    """Single ``cv2.imshow`` window with key polling."""

    def __init__(self, name: str = "webcam") -> None:
        self.name = name
        self._open = False

    def open(self) -> "PreviewWindow":
        cv2.namedWindow(self.name, cv2.WINDOW_AUTOSIZE)
        self._open = True
        return self

    def show(self, frame: np.ndarray) -> None:
        cv2.imshow(self.name, frame)

    def poll_key(self, delay_ms: int = 10) -> Optional[int]:
        key = cv2.waitKey(max(1, int(delay_ms)))
        if key < 0:
            return None
        return key & 0xFF

    def close(self) -> None:
        if self._open:
            cv2.destroyWindow(self.name)
            self._open = False

    def __enter__(self) -> "PreviewWindow":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()


class NullSink:
    """Headless sink: frames are dropped and no key is ever pressed."""

    def __init__(self) -> None:
        self.frames_shown = 0

    def show(self, frame: np.ndarray) -> None:
        self.frames_shown += 1

    def poll_key(self, delay_ms: int = 10) -> Optional[int]:
        return None

    def __enter__(self) -> "NullSink":
        return self

    def __exit__(self, *_exc) -> None:
        return None
