# herd_sim/sim/villagers.py
from __future__ import annotations
from typing import Dict, List, Optional

from .models import Villager, Elephant, House, EMERGING, CHASING, RETURNING
from .config import VILLAGER
from .geometry import dist, away_from

def spawn_villager(house: House, uid: int) -> Villager:
    return Villager(uid=uid, x=house.x, y=house.y, home=house.pos(), speed=VILLAGER.speed)

def nearest_target(v: Villager, elephants: List[Elephant]) -> Optional[Elephant]:
    """Nearest active, non-abandoned elephant; ties go to the earliest spawned (lowest uid)."""
    best = None
    best_key = None
    for e in elephants:
        if not e.active or e.abandoned:
            continue
        key = (dist(v.pos(), e.pos()), e.uid)
        if best_key is None or key < best_key:
            best, best_key = e, key
    return best

def _live_target(v: Villager, by_id: Dict[int, Elephant]) -> Optional[Elephant]:
    if v.target_id is None:
        return None
    e = by_id.get(v.target_id)
    if e is None or not e.active or e.abandoned:
        return None
    return e

def _set_state(v: Villager, state: str) -> None:
    v.state = state
    v.state_timer = 0.0

def _move_toward(v: Villager, tx: float, ty: float, dt_ms: float) -> None:
    v.vx, v.vy = away_from(v.pos(), (tx, ty), v.speed)
    dt = dt_ms / 1000.0
    v.x += v.vx * dt
    v.y += v.vy * dt

def step_villager(v: Villager, elephants: List[Elephant], by_id: Dict[int, Elephant],
                  dt_ms: float) -> Optional[Elephant]:
    """
    Advance one villager. Returns the elephant it confronted this tick (the
    caller applies the loss bookkeeping), otherwise None. A villager that
    reaches home is deactivated for the end-of-tick sweep.
    """
    if not v.active:
        return None
    v.state_timer += dt_ms

    if v.state == EMERGING:
        if v.state_timer > VILLAGER.emerge_ms:
            _set_state(v, CHASING)
            t = nearest_target(v, elephants)
            v.target_id = t.uid if t is not None else None
        return None

    if v.state == CHASING:
        target = _live_target(v, by_id)
        if target is None:
            _set_state(v, RETURNING)
            return None
        if dist(v.pos(), target.pos()) < VILLAGER.confront_dist:
            target.abandon()
            _set_state(v, RETURNING)
            v.vx = v.vy = 0.0
            return target
        _move_toward(v, target.x, target.y, dt_ms)
        return None

    # returning
    hx, hy = v.home
    if dist(v.pos(), v.home) < VILLAGER.home_dist:
        v.active = False
        v.vx = v.vy = 0.0
        return None
    _move_toward(v, hx, hy, dt_ms)
    return None
