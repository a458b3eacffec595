"""
Per-sign hand shape rules.

A rule is a hard constraint on finger linearity, fingertip distances and
thumb folding. It can only veto a sign: signs without a rule always pass,
and a passing rule says nothing about whether the sign actually matches.
Thresholds come from the `rules` section of RecognizerConfig and assume
the raw (unnormalized) landmark coordinates from the hand landmarker.
"""

from typing import Optional

from .config import RecognizerConfig
from .geometry import avg_tip_to_thumb, dist_3d, finger_linearities, thumb_folded
from .landmarks import INDEX_TIP, MIDDLE_TIP, THUMB_TIP


class HandShape:
    """Metrics shared by all rules, computed once per hand."""

    def __init__(self, xyz, cfg: dict):
        self.xyz = xyz
        lins = finger_linearities(xyz)
        self.index = lins["index"]
        self.middle = lins["middle"]
        self.ring = lins["ring"]
        self.pinky = lins["pinky"]
        self.avg_linearity = (self.index + self.middle + self.ring + self.pinky) / 4
        self.thumb_folded = thumb_folded(
            xyz,
            pinky_thr=cfg["thumb_fold_pinky_dist"],
            index_thr=cfg["thumb_fold_index_dist"],
        )

    def tip_dist(self, i, j):
        return dist_3d(self.xyz[i], self.xyz[j])


# Fist: no extended fingers
def _rule_a(s: HandShape, c: dict) -> bool:
    return s.index < c["a_max_linearity"] and s.middle < c["a_max_linearity"]


# Flat hand, thumb tucked
def _rule_b(s: HandShape, c: dict) -> bool:
    return s.index >= c["b_min_index_linearity"] and s.thumb_folded


# Curved, spread fingers (holding a cup)
def _rule_c(s: HandShape, c: dict) -> bool:
    if not (c["c_min_avg_linearity"] <= s.avg_linearity <= c["c_max_avg_linearity"]):
        return False
    return s.tip_dist(INDEX_TIP, MIDDLE_TIP) >= c["c_min_index_middle_dist"]


# Index up, middle and ring not straight
def _rule_d(s: HandShape, c: dict) -> bool:
    if s.index < c["d_min_index_linearity"]:
        return False
    return s.middle <= c["d_max_other_linearity"] and s.ring <= c["d_max_other_linearity"]


# Fingertips curled onto the thumb
def _rule_e(s: HandShape, c: dict) -> bool:
    if avg_tip_to_thumb(s.xyz) > c["e_max_avg_thumb_dist"]:
        return False
    return s.avg_linearity <= c["e_max_avg_linearity"]


# Index-thumb circle, other fingers up
def _rule_f(s: HandShape, c: dict) -> bool:
    if s.tip_dist(INDEX_TIP, THUMB_TIP) > c["f_max_index_thumb_dist"]:
        return False
    thr = c["f_min_other_linearity"]
    return s.middle >= thr and s.ring >= thr and s.pinky >= thr


# Three fingers folded over a tucked thumb
def _rule_m(s: HandShape, c: dict) -> bool:
    thr = c["m_max_linearity"]
    if s.index > thr or s.middle > thr or s.ring > thr:
        return False
    return s.thumb_folded


SIGN_RULES = {
    "a": _rule_a,
    "b": _rule_b,
    "c": _rule_c,
    "d": _rule_d,
    "e": _rule_e,
    "f": _rule_f,
    "m": _rule_m,
}


def signs_with_rules() -> list:
    return sorted(SIGN_RULES)


class ShapeValidator:
    def __init__(self, config: Optional[RecognizerConfig] = None, rules: Optional[dict] = None):
        self.config = config or RecognizerConfig()
        self.rules = dict(SIGN_RULES if rules is None else rules)

    def shape(self, xyz) -> HandShape:
        return HandShape(xyz, self.config.rules)

    def validate(self, sign_name: str, xyz, shape: Optional[HandShape] = None) -> bool:
        """False only when the hand is structurally incompatible with the sign."""
        rule = self.rules.get(sign_name.lower())
        if rule is None:
            return True
        return rule(shape or self.shape(xyz), self.config.rules)


_default_validator = ShapeValidator()


def validate_sign(sign_name: str, xyz) -> bool:
    return _default_validator.validate(sign_name, xyz)
