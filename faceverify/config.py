"""Typed configuration for the live verification pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from faceverify.io_utils import load_yaml, resolve_path
from faceverify.recognition.matcher import default_threshold
from faceverify.types import NORMALIZED_SIZE

LOGGER = logging.getLogger("faceverify.config")

DEFAULT_CONFIG_PATH = Path("configs/verify.yaml")


@dataclass
class VerifyConfig:
    # Detector
    cascade_path: Optional[Path] = None
    scale_factor: float = 1.1
    min_neighbors: int = 3
    detector_min_size: Tuple[int, int] = (30, 30)
    # Downscale frames to this width before detection (None = full resolution)
    detection_width: Optional[int] = None
    # Region validation
    min_face_size: int = 40
    max_aspect_ratio: float = 1.5
    # Normalization / scoring
    face_size: int = NORMALIZED_SIZE
    metric: str = "energy"
    histogram_method: str = "bhattacharyya"
    threshold: Optional[float] = None
    # Loop / display
    camera_index: int = 0
    window_name: str = "webcam"
    quit_key: str = "q"
    wait_key_ms: int = 10
    max_empty_frames: int = 300
    show_window: bool = True
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def effective_threshold(self) -> float:
        if self.threshold is not None:
            return float(self.threshold)
        return default_threshold(self.metric)

    @property
    def scorer_options(self) -> Dict[str, Any]:
        if self.metric == "histogram":
            return {"method": self.histogram_method}
        return {}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "VerifyConfig":
        known = {f.name for f in fields(cls)} - {"extras"}
        kwargs: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                extras[key] = value
        if extras:
            LOGGER.warning("Ignoring unknown config keys: %s", sorted(extras))
        if kwargs.get("cascade_path") is not None:
            kwargs["cascade_path"] = resolve_path(str(kwargs["cascade_path"]), base_dir)
        if kwargs.get("detector_min_size") is not None:
            kwargs["detector_min_size"] = tuple(int(v) for v in kwargs["detector_min_size"])
        config = cls(**kwargs, extras=extras)
        config.validate()
        return config

    @classmethod
    def load(cls, path: Optional[Path]) -> "VerifyConfig":
        """Load ``path``; the default config file may be absent, an explicit one may not."""
        if path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                LOGGER.debug("No config at %s; using defaults", DEFAULT_CONFIG_PATH)
                return cls()
            path = DEFAULT_CONFIG_PATH
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return cls.from_dict(load_yaml(path), base_dir=path.parent)

    def validate(self) -> None:
        if self.metric not in ("energy", "histogram"):
            raise ValueError(f"Unknown metric {self.metric!r}")
        if self.min_face_size < 1:
            raise ValueError(f"min_face_size must be >= 1, got {self.min_face_size}")
        if self.max_aspect_ratio <= 1.0:
            raise ValueError(f"max_aspect_ratio must be > 1, got {self.max_aspect_ratio}")
        if self.face_size < 1:
            raise ValueError(f"face_size must be >= 1, got {self.face_size}")
        if self.detection_width is not None and self.detection_width < 1:
            raise ValueError(f"detection_width must be >= 1, got {self.detection_width}")
        if len(self.quit_key) != 1:
            raise ValueError(f"quit_key must be a single character, got {self.quit_key!r}")
        if self.max_empty_frames < 0:
            raise ValueError(f"max_empty_frames must be >= 0, got {self.max_empty_frames}")
        if self.metric == "energy" and self.threshold is None and self.face_size != NORMALIZED_SIZE:
            LOGGER.warning(
                "face_size=%d with the default energy threshold; the threshold was derived at %d px",
                self.face_size,
                NORMALIZED_SIZE,
            )
