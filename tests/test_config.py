import pytest

from signbridge.backend.ml.config import CONFIG_PATH, DEFAULTS, RecognizerConfig


def test_defaults():
    cfg = RecognizerConfig()
    assert cfg.k == 3
    assert cfg.threshold == 4.5
    assert len(cfg.weights) == 21
    assert cfg.commit_ms == 1200
    assert cfg.cooldown_ms == 1200
    assert cfg.min_confidence == 60
    assert cfg.smoothing("baseline") == {"history": 5, "min_votes": 3, "stability_bonus": 20}
    assert cfg.smoothing("sentence") == {"history": 7, "min_votes": 4, "stability_bonus": 20}


def test_bundled_yaml_matches_defaults():
    assert CONFIG_PATH.exists()
    cfg = RecognizerConfig.load()
    assert cfg.cfg == DEFAULTS


def test_partial_override_is_deep_merged(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("matcher:\n  k: 5\nsmoothing:\n  baseline:\n    min_votes: 4\n")
    cfg = RecognizerConfig.load(path)
    assert cfg.k == 5
    assert cfg.threshold == 4.5
    assert cfg.smoothing("baseline")["min_votes"] == 4
    assert cfg.smoothing("baseline")["history"] == 5


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert RecognizerConfig.load(tmp_path / "nope.yml").k == 3


def test_defaults_are_not_shared():
    RecognizerConfig({"matcher": {"k": 9}})
    assert DEFAULTS["matcher"]["k"] == 3


def test_bad_weights():
    with pytest.raises(ValueError):
        RecognizerConfig({"matcher": {"weights": [1.0] * 20}})


def test_unknown_smoothing_variant():
    with pytest.raises(KeyError):
        RecognizerConfig().smoothing("nope")
