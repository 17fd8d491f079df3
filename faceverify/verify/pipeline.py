"""Per-frame detect -> validate -> normalize -> score -> label loop."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

from faceverify.config import VerifyConfig
from faceverify.detectors.face_haar import FaceDetector
from faceverify.recognition.matcher import ThresholdPolicy
from faceverify.recognition.normalize import normalize_face, to_grayscale
from faceverify.recognition.reference import ReferenceFace
from faceverify.recognition.region import validate_region
from faceverify.recognition.similarity import FaceScorer
from faceverify.types import FaceResult, FrameBounds, FrameResult, Region
from faceverify.video import FrameSink, FrameSource, is_empty_frame
from faceverify.viz.overlay import annotate_frame

LOGGER = logging.getLogger("faceverify.verify.pipeline")


@dataclass
class RunStats:
    frames_read: int = 0
    frames_processed: int = 0
    frames_skipped: int = 0
    faces_scored: int = 0
    faces_matched: int = 0
    regions_rejected: int = 0
    quit_requested: bool = False
    elapsed_s: float = 0.0

    @property
    def fps(self) -> float:
        if self.elapsed_s <= 0:
            return 0.0
        return self.frames_processed / self.elapsed_s


class VerificationPipeline:
    """Scores every plausible face in a frame against one reference face."""

    def __init__(
        self,
        detector: FaceDetector,
        reference: ReferenceFace,
        scorer: FaceScorer,
        policy: ThresholdPolicy,
        config: Optional[VerifyConfig] = None,
    ) -> None:
        if reference.face is None or reference.face.size == 0:
            raise ValueError("Reference face must be non-empty")
        self.detector = detector
        self.reference = reference
        self.scorer = scorer
        self.policy = policy
        self.config = config or VerifyConfig()
        expected = (self.config.face_size, self.config.face_size)
        if reference.face.shape != expected:
            raise ValueError(f"Reference face shape {reference.face.shape} != {expected}")

    def detect_regions(self, gray: np.ndarray) -> List[Region]:
        """Run the detector, optionally on a downscaled copy, in full-frame coordinates."""
        target_width = self.config.detection_width
        height, width = gray.shape[:2]
        if target_width is None or width <= target_width:
            return list(self.detector.detect(gray))
        factor = target_width / float(width)
        small = cv2.resize(
            gray,
            (target_width, max(1, int(round(height * factor)))),
            interpolation=cv2.INTER_LINEAR,
        )
        return [region.scaled(1.0 / factor) for region in self.detector.detect(small)]

    def score_region(self, frame: np.ndarray, region: Region) -> FaceResult:
        face = normalize_face(frame, region, size=self.config.face_size)
        score = self.scorer.score(face, self.reference.face)
        return FaceResult(region=region, score=score, label=self.policy.classify(score))

    def process_frame(self, frame: Optional[np.ndarray], frame_idx: int = 0) -> Optional[FrameResult]:
        """Annotate one frame; returns None for an empty capture."""
        if is_empty_frame(frame):
            LOGGER.debug("Frame %d empty; skipping", frame_idx)
            return None

        gray = to_grayscale(frame)
        bounds = FrameBounds.from_image(frame)
        faces: List[FaceResult] = []
        rejected = 0
        for candidate in self.detect_regions(gray):
            region = validate_region(
                candidate,
                bounds,
                min_size=self.config.min_face_size,
                max_aspect_ratio=self.config.max_aspect_ratio,
            )
            if region is None:
                rejected += 1
                continue
            result = self.score_region(gray, region)
            LOGGER.debug(
                "Frame %d region=%s score=%.2f label=%s",
                frame_idx,
                region.as_tuple(),
                result.score,
                result.label.name,
            )
            faces.append(result)

        annotated = annotate_frame(frame, faces) if faces else frame
        return FrameResult(frame_idx=frame_idx, frame=annotated, faces=faces, rejected=rejected)

    def run(
        self,
        source: FrameSource,
        sink: FrameSink,
        max_frames: Optional[int] = None,
    ) -> RunStats:
        """Process frames until the quit key, ``max_frames`` or a dead source."""
        stats = RunStats()
        quit_code = ord(self.config.quit_key)
        empty_streak = 0
        started = time.monotonic()
        LOGGER.info(
            "Running verification reference=%r scorer=%s %s",
            self.reference.name,
            self.scorer.name,
            self.policy,
        )
        try:
            while max_frames is None or stats.frames_processed < max_frames:
                frame = source.read()
                stats.frames_read += 1
                result = self.process_frame(frame, frame_idx=stats.frames_read - 1)
                if result is None:
                    stats.frames_skipped += 1
                    empty_streak += 1
                    if self.config.max_empty_frames and empty_streak >= self.config.max_empty_frames:
                        raise RuntimeError(
                            f"Frame source returned {empty_streak} empty frames in a row; "
                            "camera may have disconnected"
                        )
                else:
                    empty_streak = 0
                    stats.frames_processed += 1
                    stats.faces_scored += len(result.faces)
                    stats.faces_matched += sum(1 for face in result.faces if face.label.matched)
                    stats.regions_rejected += result.rejected
                    sink.show(result.frame)

                if sink.poll_key(self.config.wait_key_ms) == quit_code:
                    stats.quit_requested = True
                    break
        finally:
            stats.elapsed_s = time.monotonic() - started
            LOGGER.info(
                "Verification stopped: processed=%d skipped=%d faces=%d matched=%d rejected=%d fps=%.1f",
                stats.frames_processed,
                stats.frames_skipped,
                stats.faces_scored,
                stats.faces_matched,
                stats.regions_rejected,
                stats.fps,
            )
        return stats
