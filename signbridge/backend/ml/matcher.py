"""
K-nearest-neighbour matching of a detected hand against labeled samples.

Samples are grouped by lower-cased sign name. For every sign whose shape
rule accepts the hand, the distances to its samples are sorted and the K
smallest averaged. The sign with the lowest average wins if it is under
the threshold; confidence rewards both the margin to the threshold and the
gap to the runner-up.
"""

import math
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .config import RecognizerConfig
from .distance import normalize, weighted_distance
from .landmarks import lms_to_xyz
from .rules import ShapeValidator


@dataclass(frozen=True)
class MatchResult:
    sign_name: str
    avg_distance: float
    sample_count: int
    confidence: int = 0

    def to_dict(self):
        return asdict(self)


class SampleCorpus:
    """
    Read-only snapshot of the labeled samples, grouped by sign and
    pre-normalized. Refreshing means building a new corpus, never mutating
    an existing one.
    """

    def __init__(self, samples: Iterable = ()):
        self.groups = defaultdict(list)
        self.augmented = defaultdict(int)
        total = 0
        for s in samples:
            key = s.sign_name.lower()
            self.groups[key].append(normalize(lms_to_xyz(s.landmarks)))
            if getattr(s, "is_augmented", False):
                self.augmented[key] += 1
            total += 1
        self.groups = dict(self.groups)
        self.total = total

    def __len__(self):
        return self.total

    def __bool__(self):
        return self.total > 0

    @property
    def sign_names(self) -> list:
        return sorted(self.groups)

    def stats(self) -> list:
        return [
            {
                "sign_name": name,
                "count": len(self.groups[name]),
                "augmented_count": self.augmented.get(name, 0),
            }
            for name in self.sign_names
        ]


def knn_distance(norm_detected: np.ndarray, norm_samples: list, k: int = 3,
                 weights: Optional[np.ndarray] = None) -> float:
    """Mean of the k smallest distances (all of them if fewer than k)."""
    if not norm_samples:
        return math.inf
    dists = sorted(weighted_distance(norm_detected, s, weights) for s in norm_samples)
    n = min(k, len(dists))
    return sum(dists[:n]) / n


def _confidence(best: float, second: Optional[float], threshold: float) -> int:
    threshold_score = max(0.0, (threshold - best) / threshold) * 50
    if second is None:
        gap_score = 50.0
    elif best > 0:
        gap_score = min(50.0, (second - best) / best * 100)
    else:
        gap_score = 50.0 if second > 0 else 0.0
    # halves round up
    return int(math.floor(max(0.0, min(100.0, threshold_score + gap_score)) + 0.5))


class KnnMatcher:
    def __init__(self, config: Optional[RecognizerConfig] = None,
                 validator: Optional[ShapeValidator] = None):
        self.config = config or RecognizerConfig()
        self.validator = validator or ShapeValidator(self.config)
        self.k = self.config.k
        self.threshold = self.config.threshold
        self.weights = np.asarray(self.config.weights, dtype=np.float64)

    def _scored(self, detected, corpus: SampleCorpus, validate: bool) -> list:
        xyz = lms_to_xyz(detected)
        norm = normalize(xyz)
        shape = self.validator.shape(xyz) if validate else None

        results = []
        for name, norm_samples in corpus.groups.items():
            if validate and not self.validator.validate(name, xyz, shape=shape):
                continue
            d = knn_distance(norm, norm_samples, self.k, self.weights)
            if math.isinf(d):
                continue
            results.append(MatchResult(name, d, len(norm_samples)))
        results.sort(key=lambda r: r.avg_distance)
        return results

    def match(self, detected, corpus: SampleCorpus) -> Optional[MatchResult]:
        """Best sign for `detected`, or None when nothing is close enough."""
        return self.match_with_distance(detected, corpus)[0]

    def match_with_distance(self, detected, corpus: SampleCorpus) -> Tuple[Optional[MatchResult], float]:
        """
        Like match(), also returning the closest valid KNN distance even
        when it misses the threshold (inf when no sign passed validation).
        """
        if not corpus:
            return None, math.inf
        results = self._scored(detected, corpus, validate=True)
        if not results:
            return None, math.inf

        best = results[0]
        if best.avg_distance >= self.threshold:
            return None, best.avg_distance

        second = results[1].avg_distance if len(results) > 1 else None
        conf = _confidence(best.avg_distance, second, self.threshold)
        return MatchResult(best.sign_name, best.avg_distance, best.sample_count, conf), best.avg_distance

    def ranking(self, detected, corpus: SampleCorpus) -> list:
        """KNN distance of every sign, ignoring shape rules (debug view)."""
        if not corpus:
            return []
        return [
            {"sign_name": r.sign_name, "avg_distance": r.avg_distance, "sample_count": r.sample_count}
            for r in self._scored(detected, corpus, validate=False)
        ]
