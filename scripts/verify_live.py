#!/usr/bin/env python3
"""CLI for live webcam verification against a single reference image."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from faceverify.config import VerifyConfig
from faceverify.detectors.face_haar import HaarFaceDetector
from faceverify.io_utils import setup_logging
from faceverify.recognition.matcher import ThresholdPolicy
from faceverify.recognition.reference import enroll_reference
from faceverify.recognition.similarity import build_scorer
from faceverify.verify.pipeline import VerificationPipeline
from faceverify.video import NullSink, PreviewWindow, WebcamSource


LOGGER = logging.getLogger("scripts.verify_live")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify webcam faces against a reference image")
    parser.add_argument("reference", type=Path, help="Reference image containing one clear frontal face")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Pipeline configuration YAML (defaults to configs/verify.yaml when present)",
    )
    parser.add_argument("--camera", type=int, default=None, help="Override camera index")
    parser.add_argument("--name", type=str, default=None, help="Display name for matches (default: file name)")
    parser.add_argument("--threshold", type=float, default=None, help="Override the decision threshold")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def build_pipeline(config: VerifyConfig, reference_path: Path, name: Optional[str] = None) -> VerificationPipeline:
    detector = HaarFaceDetector(
        cascade_path=config.cascade_path,
        scale_factor=config.scale_factor,
        min_neighbors=config.min_neighbors,
        min_size=config.detector_min_size,
    )
    reference = enroll_reference(
        reference_path,
        detector,
        name=name,
        min_size=config.min_face_size,
        max_aspect_ratio=config.max_aspect_ratio,
        size=config.face_size,
    )
    scorer = build_scorer(config.metric, **config.scorer_options)
    policy = ThresholdPolicy(reference.name, threshold=config.effective_threshold, metric=config.metric)
    return VerificationPipeline(detector, reference, scorer, policy, config=config)


def run(args: argparse.Namespace) -> None:
    config = VerifyConfig.load(args.config)
    if args.camera is not None:
        config.camera_index = args.camera
    if args.threshold is not None:
        config.threshold = args.threshold
    LOGGER.info(
        "Runtime config: camera=%d metric=%s threshold=%.3f min_face=%d max_aspect=%.2f",
        config.camera_index,
        config.metric,
        config.effective_threshold,
        config.min_face_size,
        config.max_aspect_ratio,
    )

    pipeline = build_pipeline(config, args.reference, name=args.name)
    sink = PreviewWindow(config.window_name) if config.show_window else NullSink()
    with WebcamSource(config.camera_index) as source, sink:
        pipeline.run(source, sink)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level))
    try:
        run(args)
    except (RuntimeError, FileNotFoundError) as exc:
        LOGGER.error("Fatal: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
