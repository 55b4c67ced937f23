# herd_sim/sim/contacts.py
"""
Contact primitive used by the tick orchestrator.

The orchestrator only depends on the `ContactDetector` protocol; any physics
backend can be swapped in. `CircleContacts` is the default: every body is a
circle, overlap is centre distance < r1 + r2.
"""
from __future__ import annotations
from typing import Iterator, List, Protocol, Tuple
import math

from .models import Elephant, Farm, Deterrent
from .config import ELEPHANT, FARM, ECONOMY


class ContactDetector(Protocol):
    def overlaps(self, elephants: List[Elephant], farms: List[Farm]) -> Iterator[Tuple[Elephant, Farm]]:
        ...

    def resolve_solid(self, elephants: List[Elephant], deterrents: List[Deterrent]) -> int:
        ...


def circles_overlap(ax: float, ay: float, ar: float, bx: float, by: float, br: float) -> bool:
    return (ax - bx) ** 2 + (ay - by) ** 2 < (ar + br) ** 2


class CircleContacts:
    def __init__(self, elephant_radius: float = ELEPHANT.radius,
                 farm_radius: float = FARM.radius,
                 blocking_scale: float = ECONOMY.blocking_body_scale):
        self.elephant_radius = elephant_radius
        self.farm_radius = farm_radius
        self.blocking_scale = blocking_scale

    def overlaps(self, elephants: List[Elephant], farms: List[Farm]) -> Iterator[Tuple[Elephant, Farm]]:
        for e in elephants:
            if not e.active:
                continue
            for f in farms:
                if circles_overlap(e.x, e.y, self.elephant_radius, f.x, f.y, self.farm_radius):
                    yield e, f

    def resolve_solid(self, elephants: List[Elephant], deterrents: List[Deterrent]) -> int:
        """
        Push non-abandoned elephants out of blocking deterrent bodies and drop
        the inward velocity component. Returns the number of contacts resolved.
        """
        hits = 0
        for d in deterrents:
            if not (d.active and d.blocking):
                continue
            rd = d.body_radius(self.blocking_scale)
            min_d = rd + self.elephant_radius
            for e in elephants:
                if not e.active or e.abandoned:
                    continue
                dx, dy = e.x - d.x, e.y - d.y
                dd = math.hypot(dx, dy)
                if dd >= min_d:
                    continue
                if dd < 1e-9:
                    nx, ny = -1.0, 0.0
                else:
                    nx, ny = dx / dd, dy / dd
                e.x = d.x + nx * min_d
                e.y = d.y + ny * min_d
                inward = e.vx * nx + e.vy * ny
                if inward < 0:
                    e.vx -= inward * nx
                    e.vy -= inward * ny
                hits += 1
        return hits
