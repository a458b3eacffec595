import math
import time
from typing import Iterable, Optional

import numpy as np

from .config import RecognizerConfig
from .matcher import KnnMatcher, SampleCorpus
from .smoothing import SentenceBuilder, SignStabilizer


class RecognitionSession:
    """
    Stateful recognition for one live client:
    - corpus snapshot of labeled samples
    - KNN matcher with shape rules
    - stabilizer (baseline) or sentence builder (dwell-to-commit)

    Only the first detected hand is classified.
    """

    def __init__(
        self,
        samples: Iterable = (),
        config: Optional[RecognizerConfig] = None,
        sentence: bool = False,
        landmarker=None,
    ):
        self.config = config or RecognizerConfig()
        self.matcher = KnnMatcher(self.config)
        self.corpus = SampleCorpus(samples)
        self.sentence = sentence
        self.landmarker = landmarker
        if sentence:
            self.builder = SentenceBuilder(self.config)
            self.stabilizer = self.builder.stabilizer
        else:
            self.builder = None
            self.stabilizer = SignStabilizer(self.config)

    def replace_corpus(self, samples: Iterable) -> None:
        # build first, then swap, so a frame never sees a half-built corpus
        corpus = SampleCorpus(samples)
        self.corpus = corpus

    def process_hands(self, hands: list, ts_ms: Optional[float] = None) -> dict:
        """
        hands: landmarks of every hand found in the frame (may be empty).
        Returns the per-frame payload for the client.
        """
        if ts_ms is None:
            ts_ms = time.monotonic() * 1000.0

        match, debug_distance = None, math.inf
        if hands:
            match, debug_distance = self.matcher.match_with_distance(hands[0], self.corpus)

        if self.builder is not None:
            return self.builder.update(match, ts_ms, debug_distance)
        return self.stabilizer.update(match, debug_distance)

    def process_frame_bgr(self, frame_bgr: np.ndarray, ts_ms: Optional[int] = None) -> dict:
        if self.landmarker is None:
            raise RuntimeError("RecognitionSession has no hand landmarker")
        if ts_ms is None:
            ts_ms = int(time.monotonic() * 1000)
        hands = self.landmarker.detect(frame_bgr, ts_ms)
        return self.process_hands(hands, ts_ms)

    def undo(self) -> dict:
        if self.builder is not None:
            self.builder.undo()
        return self.state()

    def clear(self) -> dict:
        if self.builder is not None:
            self.builder.clear()
        return self.state()

    def state(self) -> dict:
        out = {
            "stable_prediction": self.stabilizer.stable_prediction,
            "confidence": self.stabilizer.confidence,
            "samples": len(self.corpus),
        }
        if self.builder is not None:
            out.update(self.builder.sentence_state())
        return out

    def close(self) -> None:
        if self.landmarker is not None:
            self.landmarker.close()
