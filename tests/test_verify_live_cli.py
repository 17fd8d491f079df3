from pathlib import Path

import cv2
import numpy as np
import pytest

from faceverify.types import Region
from scripts import verify_live


class _FakeDetector:
    regions = [(60, 40, 96, 96)]

    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def detect(self, image):
        return [Region.from_xywh(r) for r in self.regions]


class _FakeSource:
    opened = []

    def __init__(self, index):
        self.index = index
        self.closed = False

    def __enter__(self):
        _FakeSource.opened.append(self)
        return self

    def __exit__(self, *_exc):
        self.closed = True

    def read(self):
        return np.full((240, 320, 3), 255, dtype=np.uint8)


class _QuitWindow:
    instances = []

    def __init__(self, name):
        self.name = name
        self.shown = 0
        self.closed = False
        _QuitWindow.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        self.closed = True

    def show(self, frame):
        self.shown += 1

    def poll_key(self, delay_ms):
        return ord("q")


@pytest.fixture
def patched(monkeypatch):
    _FakeSource.opened = []
    _QuitWindow.instances = []
    _FakeDetector.regions = [(60, 40, 96, 96)]
    monkeypatch.setattr(verify_live, "HaarFaceDetector", _FakeDetector)
    monkeypatch.setattr(verify_live, "WebcamSource", _FakeSource)
    monkeypatch.setattr(verify_live, "PreviewWindow", _QuitWindow)
    monkeypatch.setattr(verify_live, "setup_logging", lambda level: None)


def _reference(tmp_path: Path, patch: np.ndarray) -> Path:
    image = np.full((240, 320), 200, dtype=np.uint8)
    image[40:136, 60:156] = patch
    path = tmp_path / "alice.png"
    cv2.imwrite(str(path), image)
    return path


def test_parse_args_requires_reference():
    with pytest.raises(SystemExit):
        verify_live.parse_args([])
    args = verify_live.parse_args(["ref.png"])
    assert args.reference == Path("ref.png")
    assert args.config is None


def test_main_runs_until_quit(tmp_path, face_patch, patched):
    path = _reference(tmp_path, face_patch)
    config = tmp_path / "verify.yaml"
    config.write_text("camera_index: 1\n", encoding="utf-8")

    code = verify_live.main([str(path), "--config", str(config)])

    assert code == 0
    assert _FakeSource.opened[0].index == 1
    assert _FakeSource.opened[0].closed
    window = _QuitWindow.instances[0]
    assert window.shown == 1
    assert window.closed


def test_reference_without_face_aborts_before_capture(tmp_path, face_patch, patched):
    path = _reference(tmp_path, face_patch)
    _FakeDetector.regions = []

    config = tmp_path / "verify.yaml"
    config.write_text("show_window: false\n", encoding="utf-8")

    code = verify_live.main([str(path), "--config", str(config)])

    assert code == 1
    assert _FakeSource.opened == []


def test_reference_without_face_aborts_with_default_config(tmp_path, face_patch, patched, monkeypatch):
    path = _reference(tmp_path, face_patch)
    _FakeDetector.regions = []
    monkeypatch.chdir(tmp_path)

    assert verify_live.main([str(path)]) == 1
    assert _FakeSource.opened == []


def test_unreadable_reference_aborts(tmp_path, patched, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert verify_live.main([str(tmp_path / "missing.png")]) == 1
    assert _FakeSource.opened == []


def test_build_pipeline_uses_config(tmp_path, face_patch, patched):
    path = _reference(tmp_path, face_patch)
    config = verify_live.VerifyConfig(metric="histogram", threshold=0.2, min_neighbors=5)

    pipeline = verify_live.build_pipeline(config, path, name="Alice")

    assert pipeline.reference.name == "Alice"
    assert pipeline.scorer.name == "histogram"
    assert pipeline.policy.threshold == 0.2
    assert pipeline.detector.kwargs["min_neighbors"] == 5
