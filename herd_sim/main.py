# herd_sim/main.py
from __future__ import annotations
import argparse
from typing import List, Tuple

from .logging_config import configure_logging
from .sim.config import SIM
from .sim.engine import Simulation, build_simulation
from .sim.models import LEVEL_TRANSITION
from .sim.metrics import summarize_herd, append_csv

Placement = Tuple[str, float, float]

def parse_placement(raw: str) -> Placement:
    """'kind:x:y' -> (kind, x, y)"""
    parts = raw.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected type:x:y, got {raw!r}")
    try:
        return parts[0], float(parts[1]), float(parts[2])
    except ValueError:
        raise argparse.ArgumentTypeError(f"x and y must be numbers in {raw!r}")

def apply_placements(sim: Simulation, placements: List[Placement]) -> int:
    placed = 0
    for kind, x, y in placements:
        if sim.place_deterrent(x, y, kind=kind) is not None:
            placed += 1
    return placed

def autopilot(sim: Simulation, placements: List[Placement], max_ticks: int, csv_path: str | None) -> int:
    """
    Headless campaign: continue every level transition immediately, drop the
    scripted deterrents at the start of each level, print one line per herd.
    """
    ticks = 0
    while ticks < max_ticks and not sim.state.is_terminal():
        if sim.state.game_state == LEVEL_TRANSITION:
            sim.continue_level()
            n = apply_placements(sim, placements)
            print(f"[level] {sim.state.current_level + 1}: {sim.campaign.level_spec().name} "
                  f"(placed {n}/{len(placements)}, budget Rs.{sim.state.budget})")
            continue
        before = (sim.state.current_level, sim.state.current_herd, sim.state.game_state)
        sim.tick()
        ticks += 1
        after = (sim.state.current_level, sim.state.current_herd, sim.state.game_state)
        if after != before:
            summary = summarize_herd(sim)
            print(
                f"Level {before[0] + 1} Herd {before[1] + 1:2d} | t={summary['time_s']:8.1f}s "
                f"saved={summary['saved']:3d} lost={summary['lost']:3d} "
                f"farms={summary['damaged_farms']} budget={summary['budget']:4d} "
                f"success={summary['success_rate'] * 100:5.1f}% state={summary['game_state']}"
            )
            if csv_path:
                append_csv(csv_path, summary)
    return ticks

def run():
    parser = argparse.ArgumentParser(description="Elephant migration campaign: place deterrents, protect farms, see herds to safety")
    parser.add_argument("--seed", type=int, default=SIM.seed)
    parser.add_argument("--levels", type=str, default=SIM.levels_path)
    parser.add_argument("--deterrents", type=str, default=SIM.deterrents_path)
    parser.add_argument("--max-ticks", type=int, default=SIM.max_ticks)
    parser.add_argument("--csv", type=str, default=SIM.track_csv)
    parser.add_argument("--place", type=parse_placement, action="append", default=[],
                        metavar="TYPE:X:Y", help="deterrent placed at the start of every level (repeatable)")
    parser.add_argument("--snapshot", type=str, default=None, help="save a matplotlib PNG of the final field")
    parser.add_argument("--log-level", type=str, default=None)
    parser.add_argument("--ui", action="store_true", help="launch real-time UI")
    args = parser.parse_args()

    configure_logging(args.log_level)

    if args.ui:
        from .ui.app import run_ui
        run_ui(args.levels, args.deterrents, seed=args.seed)
        return

    sim = build_simulation(args.levels, args.deterrents, seed=args.seed)
    ticks = autopilot(sim, args.place, args.max_ticks, args.csv)

    s = sim.state
    print(f"[done] {s.game_state} after {ticks} ticks | saved={s.saved_total} lost={s.lost_total} "
          f"success={s.success_rate() * 100:.1f}%" + (f" reason={s.loss_reason}" if s.loss_reason else ""))

    if args.snapshot:
        from .sim.visualize import snapshot
        snapshot(sim, path=args.snapshot)
        print(f"[done] snapshot saved to {args.snapshot}")

if __name__ == "__main__":
    run()
