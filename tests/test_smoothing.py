import pytest

from signbridge.backend.ml.config import RecognizerConfig
from signbridge.backend.ml.matcher import MatchResult
from signbridge.backend.ml.smoothing import (
    NO_MATCH,
    PROVISIONAL,
    STABLE,
    LabelSmoother,
    SentenceBuilder,
    SignStabilizer,
)


def m(label, confidence=80):
    return MatchResult(label, 1.0, 3, confidence)


def test_label_smoother_majority():
    s = LabelSmoother(5, 3)
    for label in "abac":
        s.push(label)
    assert s.stable() == (None, 2)
    s.push("a")
    assert s.stable() == ("a", 3)
    assert len(s) == 5
    s.push("b")
    s.push("b")
    # oldest 'a' and 'b' dropped out: a c a b b
    assert s.vote() == ("a", 2)


def test_stabilizer_needs_majority(config):
    st = SignStabilizer(config)
    outs = [st.update(m(label)) for label in "abaca"]
    assert [o["state"] for o in outs] == [PROVISIONAL] * 4 + [STABLE]
    assert [o["stable_prediction"] for o in outs[:4]] == [""] * 4
    assert outs[-1]["stable_prediction"] == "a"
    assert outs[-1]["raw"] == "a"


def test_stabilizer_never_publishes_without_majority(config):
    for variant in ("baseline", "sentence"):
        st = SignStabilizer(config, variant)
        for i in range(30):
            out = st.update(m("abc"[i % 3]))
            assert out["stable_prediction"] == ""
            assert out["confidence"] == 0


def test_stabilizer_blends_confidence_with_votes(config):
    st = SignStabilizer(config)
    for _ in range(2):
        st.update(m("a", 70))
    out = st.update(m("a", 70))
    assert out["votes"] == 3
    assert out["confidence"] == 82
    st.update(m("a", 70))
    out = st.update(m("a", 70))
    assert out["confidence"] == 90
    out = st.update(m("a", 95))
    assert out["confidence"] == 100


def test_missing_match_resets_history(config):
    st = SignStabilizer(config)
    for _ in range(3):
        out = st.update(m("a"))
    assert out["state"] == STABLE

    out = st.update(None, debug_distance=float("inf"))
    assert out["state"] == NO_MATCH
    assert out["stable_prediction"] == ""
    assert out["total"] == 0
    assert out["debug_distance"] is None

    out = st.update(m("a"))
    assert out["state"] == PROVISIONAL
    assert out["total"] == 1


def test_unknown_variant(config):
    with pytest.raises(KeyError):
        SignStabilizer(config, "turbo")


def feed(builder, label, times, confidence=80):
    """Push `label` at each timestamp; return the words committed along the way."""
    committed = []
    for t in times:
        out = builder.update(m(label, confidence) if label else None, now_ms=t)
        if out["committed"]:
            committed.append(out["committed"])
    return committed


def test_commit_after_dwell(config):
    b = SentenceBuilder(config)
    # 4 of 7 votes: stable from t=150
    assert feed(b, "a", [0, 50, 100, 150]) == []
    assert feed(b, "a", [150 + 1199]) == []
    assert feed(b, "a", [150 + 1200]) == ["a"]
    assert b.words == ["a"]


def test_held_sign_repeats_after_cooldown(config):
    b = SentenceBuilder(config)
    assert feed(b, "a", [0, 50, 100, 150, 1350]) == ["a"]
    # dwell restarts at the commit and the cooldown is exclusive
    assert feed(b, "a", [2000, 2550]) == []
    assert feed(b, "a", [2551]) == ["a"]
    assert b.words == ["a", "a"]


def test_low_confidence_never_commits(config):
    b = SentenceBuilder(config)
    # 10 + 4/7 * 20 stays below 60
    assert feed(b, "a", range(0, 5000, 50), confidence=10) == []


def test_cooldown_only_blocks_the_same_word():
    cfg = RecognizerConfig({"commit": {"commit_ms": 100, "cooldown_ms": 1000}})
    b = SentenceBuilder(cfg)
    assert feed(b, "a", [0, 10, 20, 30, 130]) == ["a"]
    assert feed(b, "a", [230]) == []
    # a different word commits right away, then 'a' is allowed again
    assert feed(b, "b", [240, 250, 260, 270, 370]) == ["b"]
    assert feed(b, "a", [380, 390, 400, 410, 510]) == ["a"]
    assert b.words == ["a", "b", "a"]


def test_lost_hand_restarts_dwell(config):
    b = SentenceBuilder(config)
    feed(b, "a", [0, 50, 100, 150])
    feed(b, None, [200])
    assert b.last_word == ""
    assert feed(b, "a", [250, 300, 350, 400, 1500]) == []
    assert feed(b, "a", [1600]) == ["a"]


def test_undo_and_clear(config):
    b = SentenceBuilder(config)
    assert b.undo() is None
    b.words.extend(["h", "e", "y"])
    assert b.undo() == "y"
    assert b.sentence_state()["sentence"] == "h e"
    b.clear()
    assert b.sentence_state() == {"words": [], "sentence": "", "held_word": ""}
