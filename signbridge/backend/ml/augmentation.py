"""
Offline augmentation of captured samples: mirrored and slightly rotated
copies enlarge the labeled set without recording more video.
"""

import math
from typing import List, Optional, Sequence

from .samples import SignSample


class ExtractionConfig:
    def __init__(
        self,
        frame_timestamps: Sequence[float] = (0.2, 0.35, 0.5, 0.65, 0.8),
        enable_augmentation: bool = True,
        rotation_angles: Sequence[float] = (-5, 5),
        enable_mirror: bool = True,
    ):
        # fractions of the video duration to grab frames at
        self.frame_timestamps = list(frame_timestamps)
        self.enable_augmentation = enable_augmentation
        self.rotation_angles = list(rotation_angles)
        self.enable_mirror = enable_mirror


def _with_coords(lm: dict, x: float, y: float, z: float) -> dict:
    out = {"x": x, "y": y, "z": z}
    if lm.get("visibility") is not None:
        out["visibility"] = lm["visibility"]
    return out


def mirror_landmarks(landmarks: List[dict]) -> List[dict]:
    """Flip X: the same sign made with the other hand."""
    return [_with_coords(p, -p["x"], p["y"], p["z"]) for p in landmarks]


def rotate_landmarks(landmarks: List[dict], angle_deg: float) -> List[dict]:
    """Rotate about the wrist in the X-Y plane, counterclockwise for positive angles."""
    rad = math.radians(angle_deg)
    cos, sin = math.cos(rad), math.sin(rad)
    wx, wy = landmarks[0]["x"], landmarks[0]["y"]
    return [
        _with_coords(
            p,
            (p["x"] - wx) * cos - (p["y"] - wy) * sin + wx,
            (p["x"] - wx) * sin + (p["y"] - wy) * cos + wy,
            p["z"],
        )
        for p in landmarks
    ]


def clean_landmarks(landmarks: List[dict]) -> List[dict]:
    """Round to 6 decimals for storage."""
    return [_with_coords(p, round(p["x"], 6), round(p["y"], 6), round(p["z"], 6)) for p in landmarks]


def _suffixed(file_name: Optional[str], suffix: str) -> Optional[str]:
    return f"{file_name}_{suffix}" if file_name else None


def augment(sample: SignSample, config: ExtractionConfig) -> List[SignSample]:
    """[cleaned original, mirrored?, one per rotation angle...]"""
    results = [sample.replace(landmarks=clean_landmarks(sample.landmarks), is_augmented=False)]

    if config.enable_mirror:
        results.append(sample.replace(
            landmarks=clean_landmarks(mirror_landmarks(sample.landmarks)),
            is_augmented=True,
            file_name=_suffixed(sample.file_name, "mirror"),
        ))

    for angle in config.rotation_angles:
        results.append(sample.replace(
            landmarks=clean_landmarks(rotate_landmarks(sample.landmarks, angle)),
            is_augmented=True,
            file_name=_suffixed(sample.file_name, f"rot{angle:g}"),
        ))

    return results


def augmentation_multiplier(config: ExtractionConfig) -> int:
    count = 1
    if config.enable_mirror:
        count += 1
    return count + len(config.rotation_angles)
