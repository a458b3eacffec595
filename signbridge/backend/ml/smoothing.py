"""
Temporal smoothing of per-frame matches.

Frame-level KNN results flicker between similar letters. LabelSmoother
keeps the last N winning labels and only reports one once it holds a
majority of M votes. A frame without a match clears the history, so after
a dropped hand the label has to be re-earned from scratch.

SentenceBuilder adds dwell-to-commit on top: a stable label held for
commit_ms with enough confidence is appended to the sentence, with a
cooldown against committing the same held sign twice.
"""

import math
import time
from collections import Counter, deque
from typing import Optional, Tuple

from .config import RecognizerConfig
from .matcher import MatchResult

NO_MATCH = "no-match"
PROVISIONAL = "provisional"
STABLE = "stable"


def _now_ms() -> float:
    return time.monotonic() * 1000.0


def _rounded(d) -> Optional[float]:
    # inf (nothing passed validation) is not valid JSON
    if d is None or math.isinf(d):
        return None
    return round(float(d), 2)


class LabelSmoother:
    """Last labels with majority vote."""

    def __init__(self, maxlen: int = 5, min_votes: int = 3):
        self.maxlen = maxlen
        self.min_votes = min_votes
        self.hist = deque(maxlen=maxlen)

    def push(self, label: str) -> None:
        self.hist.append(label)

    def reset(self) -> None:
        self.hist.clear()

    def __len__(self):
        return len(self.hist)

    def vote(self) -> Tuple[str, int]:
        """(most frequent label, its count); ties go to the oldest label."""
        if not self.hist:
            return "", 0
        label, votes = Counter(self.hist).most_common(1)[0]
        return label, votes

    def stable(self) -> Tuple[Optional[str], int]:
        label, votes = self.vote()
        if votes < self.min_votes:
            return None, votes
        return label, votes


class SignStabilizer:
    """
    no-match -> provisional -> stable state machine for one live session.
    """

    def __init__(self, config: Optional[RecognizerConfig] = None, variant: str = "baseline"):
        self.config = config or RecognizerConfig()
        s = self.config.smoothing(variant)
        self.history_size = int(s["history"])
        self.stability_bonus = float(s["stability_bonus"])
        self.smoother = LabelSmoother(self.history_size, int(s["min_votes"]))
        self.state = NO_MATCH
        self.stable_prediction = ""
        self.confidence = 0

    def reset(self) -> None:
        self.smoother.reset()
        self.state = NO_MATCH
        self.stable_prediction = ""
        self.confidence = 0

    def update(self, match: Optional[MatchResult], debug_distance: float = math.inf) -> dict:
        votes = 0
        if match is None:
            self.reset()
        else:
            self.smoother.push(match.sign_name)
            label, votes = self.smoother.stable()
            if label is None:
                self.state = PROVISIONAL
                self.stable_prediction = ""
                self.confidence = 0
            else:
                self.state = STABLE
                self.stable_prediction = label
                bonus = votes / self.history_size * self.stability_bonus
                self.confidence = int(round(min(100.0, match.confidence + bonus)))

        return {
            "state": self.state,
            "raw": match.sign_name if match else None,
            "stable_prediction": self.stable_prediction,
            "confidence": self.confidence,
            "debug_distance": _rounded(debug_distance),
            "votes": votes,
            "total": len(self.smoother),
        }


class SentenceBuilder:
    """Stabilizer (sentence variant) plus dwell-to-commit word sequence."""

    def __init__(self, config: Optional[RecognizerConfig] = None):
        self.config = config or RecognizerConfig()
        self.stabilizer = SignStabilizer(self.config, variant="sentence")
        self.commit_ms = self.config.commit_ms
        self.cooldown_ms = self.config.cooldown_ms
        self.min_confidence = self.config.min_confidence

        self.words = []
        self.last_word = ""
        self.last_word_change_ms = 0.0
        self.last_commit_ms: Optional[float] = None
        self.last_committed_word: Optional[str] = None

    def _cooled_down(self, word: str, now_ms: float) -> bool:
        if self.last_commit_ms is None:
            return True
        if self.last_committed_word != word:
            return True
        return (now_ms - self.last_commit_ms) > self.cooldown_ms

    def held_ms(self, now_ms: float) -> float:
        if not self.last_word:
            return 0.0
        return now_ms - self.last_word_change_ms

    def update(self, match: Optional[MatchResult], now_ms: Optional[float] = None,
               debug_distance: float = math.inf) -> dict:
        if now_ms is None:
            now_ms = _now_ms()
        out = self.stabilizer.update(match, debug_distance)
        word = out["stable_prediction"]

        if word != self.last_word:
            self.last_word = word
            self.last_word_change_ms = now_ms

        committed = None
        if (
            word
            and self.held_ms(now_ms) >= self.commit_ms
            and out["confidence"] >= self.min_confidence
            and self._cooled_down(word, now_ms)
        ):
            self.words.append(word)
            self.last_commit_ms = now_ms
            self.last_committed_word = word
            # the sign has to be held for another full dwell before repeating
            self.last_word_change_ms = now_ms
            committed = word

        out.update(self.sentence_state())
        out["committed"] = committed
        out["held_ms"] = self.held_ms(now_ms)
        return out

    def undo(self) -> Optional[str]:
        if not self.words:
            return None
        return self.words.pop()

    def clear(self) -> None:
        self.words.clear()

    def sentence_state(self) -> dict:
        return {
            "words": list(self.words),
            "sentence": " ".join(self.words),
            "held_word": self.last_word,
        }
