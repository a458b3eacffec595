import copy
from pathlib import Path
from typing import Optional

import yaml


CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"

DEFAULTS = {
    "matcher": {
        "k": 3,
        "threshold": 4.5,
        "weights": [
            1.0,
            0.8, 0.8, 0.8, 1.2,
            1.0, 0.9, 0.9, 1.2,
            1.0, 0.9, 0.9, 1.2,
            1.0, 0.9, 0.9, 1.2,
            1.0, 0.9, 0.9, 1.2,
        ],
    },
    "rules": {
        "thumb_fold_pinky_dist": 0.15,
        "thumb_fold_index_dist": 0.08,
        "a_max_linearity": 0.9,
        "b_min_index_linearity": 0.9,
        "c_min_avg_linearity": 0.65,
        "c_max_avg_linearity": 0.90,
        "c_min_index_middle_dist": 0.03,
        "d_min_index_linearity": 0.9,
        "d_max_other_linearity": 0.95,
        "e_max_avg_thumb_dist": 0.15,
        "e_max_avg_linearity": 0.75,
        "f_max_index_thumb_dist": 0.12,
        "f_min_other_linearity": 0.80,
        "m_max_linearity": 0.85,
    },
    "smoothing": {
        "baseline": {"history": 5, "min_votes": 3, "stability_bonus": 20},
        "sentence": {"history": 7, "min_votes": 4, "stability_bonus": 20},
    },
    "commit": {
        "commit_ms": 1200,
        "cooldown_ms": 1200,
        "min_confidence": 60,
    },
}


def _merge(base: dict, override: dict) -> dict:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _merge(base[k], v)
        else:
            base[k] = v
    return base


class RecognizerConfig:
    """
    All tunable constants of the recognition pipeline in one place.

    Built from the defaults above, deep-merged with an optional dict
    (usually the contents of config.yml). Matcher, validator and
    stabilizers read their values from here at construction time.
    """

    def __init__(self, cfg: Optional[dict] = None):
        self.cfg = copy.deepcopy(DEFAULTS)
        if cfg:
            _merge(self.cfg, cfg)

        m = self.cfg["matcher"]
        self.k = int(m["k"])
        self.threshold = float(m["threshold"])
        self.weights = [float(w) for w in m["weights"]]
        if len(self.weights) != 21:
            raise ValueError(f"matcher.weights must have 21 entries, got {len(self.weights)}")

        self.rules = {k: float(v) for k, v in self.cfg["rules"].items()}

        c = self.cfg["commit"]
        self.commit_ms = float(c["commit_ms"])
        self.cooldown_ms = float(c["cooldown_ms"])
        self.min_confidence = float(c["min_confidence"])

    def smoothing(self, variant: str = "baseline") -> dict:
        s = self.cfg["smoothing"]
        if variant not in s:
            raise KeyError(f"unknown smoothing variant: {variant}")
        return s[variant]

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "RecognizerConfig":
        path = Path(path) if path else CONFIG_PATH
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            return cls(yaml.safe_load(f) or {})
