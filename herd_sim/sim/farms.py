# herd_sim/sim/farms.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Elephant, Farm, House
from .config import FARM
from .geometry import dist

# (farm, elephant that tipped it over, new damage level)
DamageEvent = Tuple[Farm, Elephant, int]

def eligible(e: Elephant, f: Farm) -> bool:
    return e.active and not e.abandoned and f.can_be_damaged_by(e.uid, FARM.max_damage)

def apply_contacts(farms: List[Farm], contacts: Iterable[Tuple[Elephant, Farm]],
                   dt_ms: float) -> List[DamageEvent]:
    """
    Accumulate contact time for one tick and return the damage crossings.

    Repeated reports of the same (farm, elephant) pair within a tick count
    once. Each eligible elephant on a farm adds dt_ms; once the farm's timer
    exceeds the threshold the current elephant is recorded, the timer resets
    and the farm gains one damage level. Farms that could still take damage but
    had no eligible contact this tick lose their accumulated time.
    """
    seen: Dict[Tuple[int, int], Tuple[Elephant, Farm]] = {}
    for e, f in contacts:
        seen.setdefault((f.uid, e.uid), (e, f))

    events: List[DamageEvent] = []
    touched = set()
    for e, f in seen.values():
        if not eligible(e, f):
            continue
        touched.add(f.uid)
        f.damage_timer += dt_ms
        if f.damage_timer > FARM.damage_threshold_ms:
            f.damaged_by.add(e.uid)
            f.damage_timer = 0.0
            f.damage_level += 1
            events.append((f, e, f.damage_level))

    for f in farms:
        if f.damage_level < FARM.max_damage and f.uid not in touched:
            f.damage_timer = 0.0
    return events

def nearest_house(farm: Farm, houses: List[House]) -> Optional[House]:
    best = None
    best_d = float("inf")
    for h in houses:
        d = dist(farm.pos(), h.pos())
        if d < best_d:
            best, best_d = h, d
    return best
