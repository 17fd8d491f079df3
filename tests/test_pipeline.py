import numpy as np
import pytest

from faceverify.config import VerifyConfig
from faceverify.recognition.matcher import ThresholdPolicy
from faceverify.recognition.reference import build_reference
from faceverify.recognition.similarity import PixelEnergyScorer
from faceverify.types import Region
from faceverify.verify.pipeline import VerificationPipeline


class _ListSource:
    def __init__(self, frames):
        self._frames = list(frames)

    def read(self):
        if not self._frames:
            return None
        return self._frames.pop(0)


class _RecordingSink:
    def __init__(self, quit_after=None, key=ord("q")):
        self.shown = []
        self.polls = 0
        self.quit_after = quit_after
        self.key = key

    def show(self, frame):
        self.shown.append(frame)

    def poll_key(self, delay_ms):
        self.polls += 1
        if self.quit_after is not None and self.polls >= self.quit_after:
            return self.key
        return None


@pytest.fixture
def reference_patch(make_patch):
    return (make_patch(size=96) // 4).astype(np.uint8)


@pytest.fixture
def reference(reference_patch, static_detector):
    return build_reference(reference_patch, static_detector([(0, 0, 96, 96)]), name="alice.png")


def _frame_with(patches):
    frame = np.full((240, 320, 3), 255, dtype=np.uint8)
    for (x, y), patch in patches:
        h, w = patch.shape
        frame[y : y + h, x : x + w] = patch[:, :, None]
    return frame


def _pipeline(detector, reference, **config):
    cfg = VerifyConfig(**config)
    return VerificationPipeline(
        detector,
        reference,
        PixelEnergyScorer(),
        ThresholdPolicy(reference.name, threshold=cfg.effective_threshold),
        config=cfg,
    )


def test_frame_without_regions_is_left_unannotated(reference, static_detector):
    frame = _frame_with([])
    original = frame.copy()
    result = _pipeline(static_detector([]), reference).process_frame(frame, frame_idx=3)
    assert result is not None
    assert result.frame_idx == 3
    assert result.faces == []
    assert np.array_equal(result.frame, original)


def test_matching_region_is_labeled_with_reference(reference, reference_patch, static_detector):
    frame = _frame_with([((150, 60), reference_patch)])
    result = _pipeline(static_detector([(150, 60, 96, 96)]), reference).process_frame(frame)

    assert len(result.faces) == 1
    face = result.faces[0]
    assert face.score < 20000.0
    assert face.score == 0.0
    assert face.label.matched
    assert "alice.png" in face.label.text
    assert not np.array_equal(result.frame, frame)


def test_non_matching_region_is_unknown(reference, static_detector):
    frame = _frame_with([])
    result = _pipeline(static_detector([(150, 60, 96, 96)]), reference).process_frame(frame)

    face = result.faces[0]
    assert face.score >= 20000.0
    assert not face.label.matched
    assert face.label.text.startswith("Unknown")


def test_each_region_is_scored_independently(reference, reference_patch, static_detector):
    frame = _frame_with([((10, 10), reference_patch)])
    detector = static_detector([(10, 10, 96, 96), (200, 100, 96, 96)])
    result = _pipeline(detector, reference).process_frame(frame)

    assert [face.label.matched for face in result.faces] == [True, False]
    assert result.matched
    assert result.best_score == 0.0


def test_implausible_regions_are_counted_not_scored(reference, static_detector):
    frame = _frame_with([])
    detector = static_detector([(10, 10, 40, 100), (0, 0, 0, 0), (300, 200, 100, 100)])
    result = _pipeline(detector, reference).process_frame(frame)
    assert result.faces == []
    assert result.rejected == 3


def test_empty_frame_is_skipped(reference, static_detector):
    pipeline = _pipeline(static_detector([(0, 0, 50, 50)]), reference)
    assert pipeline.process_frame(None) is None
    assert pipeline.process_frame(np.zeros((0, 0, 3), dtype=np.uint8)) is None


def test_annotation_does_not_leak_into_scoring(reference, reference_patch, static_detector):
    # Overlapping boxes: the second crop must come from the clean frame.
    frame = _frame_with([((100, 60), reference_patch)])
    detector = static_detector([(90, 50, 96, 96), (100, 60, 96, 96)])
    result = _pipeline(detector, reference).process_frame(frame)
    assert result.faces[1].score == 0.0


def test_detection_width_maps_regions_back_to_frame(reference, reference_patch, static_detector):
    frame = _frame_with([((100, 60), reference_patch)])
    detector = static_detector([(50, 30, 48, 48)])
    result = _pipeline(detector, reference, detection_width=160).process_frame(frame)

    assert detector.calls == [(120, 160)]
    assert result.faces[0].region == Region(100, 60, 96, 96)
    assert result.faces[0].score == 0.0


def test_run_stops_on_quit_key(reference, reference_patch, static_detector):
    frames = [_frame_with([((10, 10), reference_patch)]) for _ in range(5)]
    sink = _RecordingSink(quit_after=3)
    stats = _pipeline(static_detector([(10, 10, 96, 96)]), reference).run(_ListSource(frames), sink)

    assert stats.quit_requested
    assert stats.frames_processed == 3
    assert stats.faces_matched == 3
    assert len(sink.shown) == 3


def test_run_skips_empty_frames_in_order(reference, static_detector):
    frames = [_frame_with([]), None, _frame_with([])]
    sink = _RecordingSink()
    stats = _pipeline(static_detector([]), reference).run(_ListSource(frames), sink, max_frames=2)

    assert stats.frames_read == 3
    assert stats.frames_skipped == 1
    assert stats.frames_processed == 2
    assert not stats.quit_requested


def test_run_aborts_after_too_many_empty_frames(reference, static_detector):
    pipeline = _pipeline(static_detector([]), reference, max_empty_frames=4)
    with pytest.raises(RuntimeError):
        pipeline.run(_ListSource([]), _RecordingSink())


def test_reference_shape_must_match_face_size(reference, static_detector):
    with pytest.raises(ValueError):
        _pipeline(static_detector([]), reference, face_size=64)
