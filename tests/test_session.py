import numpy as np
import pytest

from signbridge.backend.ml.session import RecognitionSession

import hands


class FakeLandmarker:
    def __init__(self, result):
        self.result = result
        self.calls = []
        self.closed = False

    def detect(self, frame_bgr, ts_ms=None):
        self.calls.append(ts_ms)
        return self.result

    def close(self):
        self.closed = True


def test_no_hand_is_no_match(fist_samples):
    s = RecognitionSession(fist_samples)
    out = s.process_hands([])
    assert out["state"] == "no-match"
    assert out["raw"] is None
    # no hand is not a perfect distance
    assert out["debug_distance"] is None


def test_only_first_hand_is_classified(fist_samples, flat_samples):
    s = RecognitionSession(fist_samples + flat_samples)
    for _ in range(3):
        out = s.process_hands([hands.fist(), hands.flat()])
    assert out["stable_prediction"] == "a"


def test_frame_needs_a_landmarker(fist_samples):
    with pytest.raises(RuntimeError):
        RecognitionSession(fist_samples).process_frame_bgr(np.zeros((4, 4, 3), np.uint8), 0)


def test_frame_goes_through_landmarker(fist_samples):
    lm = FakeLandmarker([hands.as_dicts(hands.fist())])
    s = RecognitionSession(fist_samples, landmarker=lm)
    out = s.process_frame_bgr(np.zeros((4, 4, 3), np.uint8), 33)
    assert lm.calls == [33]
    assert out["raw"] == "a"
    s.close()
    assert lm.closed


def test_sentence_mode(fist_samples):
    s = RecognitionSession(fist_samples, sentence=True)
    for t in (0, 50, 100, 150, 1350):
        out = s.process_hands([hands.fist()], t)
    assert out["committed"] == "a"
    assert s.state()["words"] == ["a"]
    assert s.undo()["words"] == []
    s.builder.words.append("b")
    assert s.clear()["sentence"] == ""


def test_replace_corpus(fist_samples, flat_samples):
    s = RecognitionSession(fist_samples)
    assert s.process_hands([hands.flat()])["raw"] is None
    s.replace_corpus(fist_samples + flat_samples)
    assert s.state()["samples"] == 6
    assert s.process_hands([hands.flat()])["raw"] == "b"
