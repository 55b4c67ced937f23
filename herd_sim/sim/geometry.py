# herd_sim/sim/geometry.py
from __future__ import annotations
from typing import Tuple
import math

Vec = Tuple[float, float]

ZERO: Vec = (0.0, 0.0)

def mul(v: Vec, k: float) -> Vec:
    return (v[0]*k, v[1]*k)

def add(a: Vec, b: Vec) -> Vec:
    return (a[0] + b[0], a[1] + b[1])

def length(v: Vec) -> float:
    return math.hypot(v[0], v[1])

def dist(a: Vec, b: Vec) -> float:
    return math.hypot(a[0]-b[0], a[1]-b[1])

def from_angle(angle: float, magnitude: float = 1.0) -> Vec:
    return (math.cos(angle) * magnitude, math.sin(angle) * magnitude)

def away_from(origin: Vec, point: Vec, magnitude: float) -> Vec:
    """Vector of `magnitude` pointing from origin toward point (i.e. away from origin)."""
    ang = math.atan2(point[1] - origin[1], point[0] - origin[0])
    return from_angle(ang, magnitude)

def clamp_length(v: Vec, vmax: float) -> Vec:
    spd = math.hypot(v[0], v[1])
    if spd <= vmax or spd <= 1e-12:
        return v
    f = vmax / spd
    return (v[0] * f, v[1] * f)
