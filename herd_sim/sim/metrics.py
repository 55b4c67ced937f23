# herd_sim/sim/metrics.py
from __future__ import annotations
from typing import Dict, Union
import os
import csv

from .models import CampaignState, WON, LOST, LOSS_FARMS, LOSS_ELEPHANTS

Field = Union[int, float, str]

def status_text(s: CampaignState, herds_in_level: int, is_last_level: bool) -> str:
    if s.game_state == WON:
        return "Victory! All herds migrated safely!"
    if s.game_state == LOST:
        if s.loss_reason == LOSS_FARMS:
            return "Defeat! Too many farms destroyed!"
        if s.loss_reason == LOSS_ELEPHANTS:
            return "Defeat! Too many elephants lost!"
        return "Defeat!"
    if s.current_herd >= herds_in_level - 1 and is_last_level:
        return "Final herd migrating..."
    if s.herd_complete:
        return f"Waiting for herd {s.current_herd + 1} to finish..."
    return f"Spawning herd {s.current_herd + 1}..."

def hud_fields(sim) -> Dict[str, Field]:
    """Scalar/text fields pushed to the UI each frame."""
    s = sim.state
    camp = sim.campaign
    return dict(
        budget=s.budget,
        level=s.current_level + 1,
        level_name=camp.level_spec().name,
        herd=s.current_herd + 1,
        herd_progress=f"{s.elephants_finished_in_herd}/{s.herd_size}",
        saved=s.saved_total,
        lost=s.lost_total,
        damaged_farms=s.damaged_farms_count,
        lost_this_herd=s.elephants_lost_this_herd,
        success_rate=round(s.success_rate() * 100),
        status=status_text(s, camp.herds_in_level(), camp.is_last_level()),
        game_state=s.game_state,
    )

def summarize_herd(sim) -> Dict[str, Field]:
    s = sim.state
    return dict(
        tick=sim.tick_count,
        time_s=round(sim.now_ms / 1000.0, 2),
        level=s.current_level + 1,
        herd=s.current_herd + 1,
        budget=s.budget,
        saved=s.saved_total,
        lost=s.lost_total,
        spawned=s.total_spawned,
        damaged_farms=s.damaged_farms_count,
        success_rate=round(s.success_rate(), 4),
        deterrents=sum(1 for d in sim.deterrents if d.active),
        game_state=s.game_state,
    )

def append_csv(path: str, row: Dict[str, Field]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    write_header = not os.path.exists(path)
    with open(path, "a", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(row.keys()))
        if write_header:
            w.writeheader()
        w.writerow(row)
