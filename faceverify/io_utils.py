"""I/O helpers shared across CLI entrypoints and pipeline modules."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
import numpy as np
import yaml

LOGGER = logging.getLogger("faceverify.io")


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if it does not exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}, got {type(data).__name__}")
    LOGGER.debug("Loaded YAML config %s -> keys=%s", path, list(data.keys()))
    return data


def load_image(path: Path, grayscale: bool = False) -> np.ndarray:
    """Decode an image file, raising if it cannot be read."""
    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    image = cv2.imread(str(path), flag)
    if image is None or image.size == 0:
        raise FileNotFoundError(f"Unable to read image: {path}")
    return image


def save_image(path: Path, image: np.ndarray) -> None:
    ensure_dir(path.parent)
    if not cv2.imwrite(str(path), image):
        raise RuntimeError(f"Unable to write image: {path}")
    LOGGER.debug("Wrote image %s shape=%s", path, image.shape)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure application logging if not already configured."""
    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def resolve_path(path: Optional[str], base_dir: Optional[Path] = None) -> Optional[Path]:
    if path is None:
        return None
    p = Path(path)
    if not p.is_absolute() and base_dir is not None:
        p = base_dir / p
    return p
