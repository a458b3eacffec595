import math

import numpy as np
import pytest

from signbridge.backend.ml.config import RecognizerConfig
from signbridge.backend.ml.distance import mirror, normalize, weighted_distance
from signbridge.backend.ml.matcher import KnnMatcher, MatchResult, SampleCorpus, _confidence, knn_distance
from signbridge.backend.ml.samples import SignSample

import hands


@pytest.fixture
def matcher(config):
    return KnnMatcher(config)


def test_empty_corpus_matches_nothing(matcher):
    corpus = SampleCorpus([])
    assert not corpus
    assert matcher.match(hands.fist(), corpus) is None
    assert matcher.match_with_distance(hands.fist(), corpus) == (None, math.inf)
    assert matcher.ranking(hands.fist(), corpus) == []


def test_fist_matches_a(matcher, fist_samples, flat_samples):
    corpus = SampleCorpus(fist_samples + flat_samples)
    result = matcher.match(hands.jitter(hands.fist(), 0.001), corpus)
    assert isinstance(result, MatchResult)
    assert result.sign_name == "a"
    assert result.sample_count == 3
    assert result.avg_distance < 1.0
    # 'b' is vetoed by its shape rule, so there is no runner-up
    assert result.confidence > 90


def test_flat_hand_matches_b(matcher, fist_samples, flat_samples):
    result = matcher.match(hands.flat(), SampleCorpus(fist_samples + flat_samples))
    assert result.sign_name == "b"


def test_vetoed_sign_is_never_returned(matcher, flat_samples):
    corpus = SampleCorpus(flat_samples)
    assert matcher.match(hands.fist(), corpus) is None
    match, d = matcher.match_with_distance(hands.fist(), corpus)
    assert match is None and math.isinf(d)


def test_mirrored_hand_matches(matcher, fist_samples, flat_samples):
    result = matcher.match(mirror(hands.fist()), SampleCorpus(fist_samples + flat_samples))
    assert result.sign_name == "a"


def test_threshold_is_exclusive(fist_samples):
    strict = KnnMatcher(RecognizerConfig({"matcher": {"threshold": 1e-6}}))
    corpus = SampleCorpus(fist_samples)
    detected = hands.jitter(hands.fist(), 0.01)
    match, d = strict.match_with_distance(detected, corpus)
    assert match is None
    assert d >= 1e-6 and not math.isinf(d)


def test_sign_names_are_grouped_case_insensitively():
    corpus = SampleCorpus([SignSample("A", hands.fist()), SignSample("a", hands.fist())])
    assert corpus.sign_names == ["a"]
    assert len(corpus) == 2


def test_knn_averages_k_closest():
    norm = normalize(hands.fist())
    samples = [normalize(h) for h in (hands.fist(), hands.curved(), hands.flat())]
    dists = sorted(weighted_distance(norm, s) for s in samples)
    assert knn_distance(norm, samples, k=1) == pytest.approx(0.0)
    assert knn_distance(norm, samples, k=2) == pytest.approx(sum(dists[:2]) / 2)
    # fewer samples than k: average all of them
    assert knn_distance(norm, samples, k=5) == pytest.approx(sum(dists) / 3)
    assert math.isinf(knn_distance(norm, []))


def test_confidence_formula():
    assert _confidence(1.0, 2.0, 4.5) == 89
    assert _confidence(2.0, 2.5, 4.5) == 53
    assert _confidence(0.0, None, 4.5) == 100
    assert _confidence(0.0, 0.0, 4.5) == 50
    assert _confidence(5.0, None, 4.5) == 50
    # 12.5 + 50 rounds half up
    assert _confidence(3.0, None, 4.0) == 63
    for best, second in [(0.1, 0.2), (1.0, 4.0), (4.4, 4.41)]:
        assert 0 <= _confidence(best, second, 4.5) <= 100


def test_closer_samples_never_lower_confidence(matcher):
    far = [SignSample("a", hands.jitter(hands.fist(), d)) for d in (0.01, 0.012, 0.015)]
    other = [SignSample("x", hands.curved()) for _ in range(3)]
    detected = hands.fist()

    before = matcher.match(detected, SampleCorpus(far + other))
    closer = [SignSample("a", hands.fist()) for _ in range(3)]
    after = matcher.match(detected, SampleCorpus(far + other + closer))

    assert before.sign_name == after.sign_name == "a"
    assert after.avg_distance <= before.avg_distance
    assert after.confidence >= before.confidence


def test_ranking_ignores_rules(matcher, fist_samples, flat_samples):
    ranking = matcher.ranking(hands.fist(), SampleCorpus(fist_samples + flat_samples))
    assert [r["sign_name"] for r in ranking] == ["a", "b"]
    assert ranking[0]["avg_distance"] <= ranking[1]["avg_distance"]
    assert ranking[1]["sample_count"] == 3


def test_corpus_stats():
    samples = [
        SignSample("a", hands.fist()),
        SignSample("a", hands.fist(), is_augmented=True),
        SignSample("b", hands.flat()),
    ]
    assert SampleCorpus(samples).stats() == [
        {"sign_name": "a", "count": 2, "augmented_count": 1},
        {"sign_name": "b", "count": 1, "augmented_count": 0},
    ]


def test_match_result_to_dict():
    r = MatchResult("a", 0.5, 3, 90)
    assert r.to_dict() == {"sign_name": "a", "avg_distance": 0.5, "sample_count": 3, "confidence": 90}


def test_numpy_hands_are_accepted(matcher, fist_samples):
    arr = np.asarray(hands.fist())
    corpus = SampleCorpus(fist_samples + [SignSample("a", arr)])
    assert len(corpus) == 4
    assert matcher.match(arr, corpus).sign_name == "a"
