# herd_sim/sim/behaviors.py
from __future__ import annotations
from typing import Dict, List
import math

from .models import Elephant, Deterrent, Farm
from .config import ARENA, ELEPHANT, STEER, FARM
from .geometry import Vec, ZERO, add, mul, dist, away_from, from_angle, clamp_length, length
from .rng import RNG

# ---------------- random walk ----------------
def choose_walk_direction() -> Vec:
    if RNG.random() < ELEPHANT.rightward_bias:
        ang = RNG.uniform(-math.pi / 4, math.pi / 4)
    else:
        ang = RNG.uniform(0.0, 2.0 * math.pi)
    return from_angle(ang)

def next_walk_interval() -> float:
    return float(RNG.randint(ELEPHANT.walk_interval_min_ms, ELEPHANT.walk_interval_max_ms))

def advance_random_walk(me: Elephant, dt_ms: float) -> Vec:
    """Tick the walk timer, re-rolling the heading on expiry. Returns the walk velocity."""
    me.walk_timer += dt_ms
    if me.walk_timer >= me.walk_change_interval:
        me.heading = choose_walk_direction()
        me.walk_timer = 0.0
        me.walk_change_interval = next_walk_interval()
    return mul(me.heading, me.speed)

# ---------------- forces ----------------
def deterrent_avoidance(me: Elephant, deterrents: List[Deterrent]) -> Vec:
    fx = fy = 0.0
    for d in deterrents:
        if not d.active:
            continue
        if not d.in_range(me.x, me.y):
            continue
        if d.blocking:
            force = me.speed
        else:
            force = (d.effectiveness / 100.0) * me.speed * STEER.area_effect_scale
        ax, ay = away_from(d.pos(), me.pos(), force)
        fx += ax; fy += ay
    return (fx, fy)

def farm_attraction(me: Elephant, farms: List[Farm]) -> Vec:
    fx = fy = 0.0
    for f in farms:
        d = dist(me.pos(), f.pos())
        if d >= STEER.farm_sense_radius:
            continue
        if not f.can_be_damaged_by(me.uid, FARM.max_damage):
            continue
        force = me.speed * STEER.farm_pull / max(d, STEER.farm_min_dist)
        ax, ay = away_from(me.pos(), f.pos(), force)
        fx += ax; fy += ay
    return (fx, fy)

def herd_flocking(me: Elephant, herd: List[Elephant]) -> Vec:
    cx = cy = 0.0
    sx = sy = 0.0
    avx = avy = 0.0
    n = 0
    for o in herd:
        if o is me or not o.active or o.abandoned:
            continue
        d = dist(me.pos(), o.pos())
        if d >= STEER.herd_radius:
            continue
        n += 1
        cx += o.x; cy += o.y
        if d < STEER.separation_radius:
            k = (STEER.separation_radius - d) / STEER.separation_radius
            ax, ay = away_from(o.pos(), me.pos(), k * me.speed * STEER.separation_scale)
            sx += ax; sy += ay
        avx += o.vx; avy += o.vy
    if n == 0:
        return ZERO
    coh = ((cx / n - me.x) * STEER.cohesion_weight, (cy / n - me.y) * STEER.cohesion_weight)
    ali = ((avx / n - me.vx) * STEER.alignment_weight, (avy / n - me.vy) * STEER.alignment_weight)
    return (coh[0] + sx + ali[0], coh[1] + sy + ali[1])

def migration_force(me: Elephant, now_ms: float) -> Vec:
    age = me.age(now_ms)
    if age < STEER.migration_delay_ms:
        return ZERO
    intervals = math.floor((age - STEER.migration_delay_ms) / STEER.migration_step_ms)
    force = STEER.migration_base + intervals * STEER.migration_increment
    return (min(force, me.speed * STEER.max_speed_mult), 0.0)

def _movement_type(forces: Dict[str, Vec]) -> str:
    if length(forces["deterrent"]) > 1:
        return "deterrent_avoidance"
    if length(forces["migration"]) > 1:
        return "migration_force"
    if length(forces["farm"]) > 1:
        return "farm_attraction"
    if length(forces["herd"]) > 1:
        return "herd_behavior"
    return "random"

# ---------------- main behavior ----------------
def step_behavior(me: Elephant, herd: List[Elephant], deterrents: List[Deterrent],
                  farms: List[Farm], now_ms: float, dt_ms: float) -> Vec:
    """
    Velocity for one elephant this tick (units / second).

    Abandoned elephants ignore everything and retreat toward the spawn edge at
    double speed. Everyone else blends:

        walk + deterrent + 0.5*farm + 0.3*herd + migration

    clamped to max_speed_mult * speed, then kept off the top/bottom margins.
    """
    if me.abandoned:
        return (-me.speed * STEER.max_speed_mult, 0.0)

    walk = advance_random_walk(me, dt_ms)
    forces = {
        "random": walk,
        "deterrent": deterrent_avoidance(me, deterrents),
        "farm": farm_attraction(me, farms),
        "herd": herd_flocking(me, herd),
        "migration": migration_force(me, now_ms),
    }

    v = walk
    v = add(v, forces["deterrent"])
    v = add(v, mul(forces["farm"], STEER.farm_weight))
    v = add(v, mul(forces["herd"], STEER.herd_weight))
    v = add(v, forces["migration"])
    vx, vy = clamp_length(v, me.speed * STEER.max_speed_mult)

    # keep within the vertical band
    if me.y < ARENA.top_margin:
        vy = max(0.0, vy)
    if me.y > ARENA.bottom_margin:
        vy = min(0.0, vy)

    me.last_forces = forces
    me.movement_type = _movement_type(forces)
    return (vx, vy)
