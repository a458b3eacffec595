from typing import Optional

import numpy as np

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

NUM_LANDMARKS = 21

# (mcp, tip) per non-thumb finger
FINGERS = {
    "index": (INDEX_MCP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_TIP),
    "ring": (RING_MCP, RING_TIP),
    "pinky": (PINKY_MCP, PINKY_TIP),
}

FINGERTIPS = (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)


def lm_to_xyz(lm) -> tuple:
    """One landmark (MediaPipe object, dict or sequence) -> (x, y, z)."""
    if isinstance(lm, dict):
        return (float(lm["x"]), float(lm["y"]), float(lm["z"]))
    if isinstance(lm, (tuple, list, np.ndarray)):
        return (float(lm[0]), float(lm[1]), float(lm[2]))
    return (float(lm.x), float(lm.y), float(lm.z))


def lms_to_xyz(hand_landmarks) -> list:
    """hand_landmarks: list of 21 landmarks -> [(x,y,z), ...]"""
    return [lm_to_xyz(lm) for lm in hand_landmarks]


def _visibility(lm) -> Optional[float]:
    if isinstance(lm, dict):
        v = lm.get("visibility")
    elif isinstance(lm, (tuple, list, np.ndarray)):
        v = lm[3] if len(lm) > 3 else None
    else:
        v = getattr(lm, "visibility", None)
    return None if v is None else float(v)


def lms_to_dicts(hand_landmarks) -> list:
    """Landmarks -> JSON-friendly dicts, keeping visibility when present."""
    out = []
    for lm in hand_landmarks:
        x, y, z = lm_to_xyz(lm)
        d = {"x": x, "y": y, "z": z}
        v = _visibility(lm)
        if v is not None:
            d["visibility"] = v
        out.append(d)
    return out
