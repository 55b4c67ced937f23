# herd_sim/sim/deterrents.py
from __future__ import annotations
from typing import List, Optional
import logging

from .models import Deterrent, Farm, House, CampaignState
from .catalog import DeterrentCatalog
from .config import ECONOMY
from .errors import UnknownDeterrentType
from .geometry import dist

log = logging.getLogger(__name__)

def too_close_to_buildings(x: float, y: float, farms: List[Farm], houses: List[House]) -> bool:
    p = (x, y)
    if any(dist(p, f.pos()) < ECONOMY.building_clearance for f in farms):
        return True
    return any(dist(p, h.pos()) < ECONOMY.building_clearance for h in houses)

def place_deterrent(state: CampaignState, catalog: DeterrentCatalog, kind: str,
                    x: float, y: float, farms: List[Farm], houses: List[House],
                    uid: int) -> Optional[Deterrent]:
    """
    Validate and create a deterrent. Returns None (nothing mutated) when the
    type is unknown, the budget is short, or the spot is within clearance of
    a farm/house. On success the cost is charged to `state.budget`.
    """
    try:
        spec = catalog.get(kind)
    except UnknownDeterrentType as e:
        log.warning("Placement ignored: %s", e)
        return None

    if state.budget < spec.cost:
        log.debug("Not enough budget for %s (%d < %d)", kind, state.budget, spec.cost)
        return None
    if too_close_to_buildings(x, y, farms, houses):
        log.debug("Cannot place %s at (%.0f, %.0f): too close to buildings", kind, x, y)
        return None

    d = Deterrent(
        uid=uid, kind=spec.kind, name=spec.name, x=x, y=y,
        cost=spec.cost, effectiveness=spec.effectiveness,
        range=spec.range, size=spec.size, blocking=spec.blocking,
        duration_remaining=spec.duration,
    )
    state.budget -= spec.cost
    log.info("Placed %s at (%.0f, %.0f) for %d", kind, x, y, spec.cost)
    return d

def tick_deterrents(deterrents: List[Deterrent], dt_ms: float) -> List[Deterrent]:
    """Count down every active deterrent; returns the ones that expired this tick."""
    expired: List[Deterrent] = []
    for d in deterrents:
        if not d.active:
            continue
        d.duration_remaining -= dt_ms
        if d.duration_remaining <= 0:
            d.active = False
            expired.append(d)
    return expired

def about_to_expire(d: Deterrent) -> bool:
    return d.active and d.duration_remaining < ECONOMY.expiry_warning_ms
