"""
Geometry helpers on hand landmark sequences.

Every function takes `xyz`, a sequence of 21 (x, y, z) points as produced
by `landmarks.lms_to_xyz`, and indexes fixed joint positions. Shorter
sequences are a caller error and fail with IndexError.
"""

import math

from .landmarks import (
    FINGERS,
    FINGERTIPS,
    INDEX_MCP,
    PINKY_MCP,
    THUMB_TIP,
)


def dist_3d(a, b):
    """Euclidean distance between (x,y,z)."""
    dx = a[0] - b[0]; dy = a[1] - b[1]; dz = a[2] - b[2]
    return math.sqrt(dx*dx + dy*dy + dz*dz)


def angle_3d(a, b, c):
    """Angle ABC in degrees (vertex at b)."""
    bax = a[0] - b[0]; bay = a[1] - b[1]; baz = a[2] - b[2]
    bcx = c[0] - b[0]; bcy = c[1] - b[1]; bcz = c[2] - b[2]
    dot = bax*bcx + bay*bcy + baz*bcz
    na = math.sqrt(bax*bax + bay*bay + baz*baz)
    nc = math.sqrt(bcx*bcx + bcy*bcy + bcz*bcz)
    cosv = dot / (na * nc or 1.0)
    cosv = max(-1.0, min(1.0, cosv))
    return math.degrees(math.acos(cosv))


def finger_linearity(xyz, mcp, tip):
    """
    How straight a finger is: MCP->TIP straight line over the summed
    MCP-PIP-DIP-TIP bone lengths. 1.0 = fully extended, lower = bent.
    """
    pip, dip = mcp + 1, mcp + 2
    bones = dist_3d(xyz[mcp], xyz[pip]) + dist_3d(xyz[pip], xyz[dip]) + dist_3d(xyz[dip], xyz[tip])
    return dist_3d(xyz[mcp], xyz[tip]) / (bones or 1.0)


def finger_linearities(xyz):
    """{finger name: linearity} for index, middle, ring, pinky."""
    return {name: finger_linearity(xyz, mcp, tip) for name, (mcp, tip) in FINGERS.items()}


def average_finger_linearity(xyz):
    lins = finger_linearities(xyz)
    return sum(lins.values()) / len(lins)


def thumb_folded(xyz, pinky_thr=0.15, index_thr=0.08):
    """Thumb tip tucked near the pinky base or the index MCP."""
    tip = xyz[THUMB_TIP]
    return dist_3d(tip, xyz[PINKY_MCP]) < pinky_thr or dist_3d(tip, xyz[INDEX_MCP]) < index_thr


def avg_tip_to_thumb(xyz):
    """Mean distance from the four fingertips to the thumb tip."""
    thumb = xyz[THUMB_TIP]
    return sum(dist_3d(xyz[t], thumb) for t in FINGERTIPS) / len(FINGERTIPS)
