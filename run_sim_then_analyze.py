#!/usr/bin/env python3
"""
Play one campaign in the UI, then report on exactly that play-through.

The UI appends to the shared logs in runs/, so the session is taken from
the rows written after launch: herd rows first, cue rows when no herd ended.

Usage:
  python run_sim_then_analyze.py --levels configs/levels.json --tag demo
"""
import argparse
import csv
import os
import subprocess
import sys

from herd_sim.sim.config import SIM

def count_rows(path: str) -> int:
    if not os.path.exists(path):
        return 0
    with open(path, newline="") as f:
        return sum(1 for _ in csv.DictReader(f))

def new_session_ids(path: str, skip: int) -> list[str]:
    """Session ids (in first-seen order) from the rows after the first `skip`."""
    if not os.path.exists(path):
        return []
    seen: list[str] = []
    with open(path, newline="") as f:
        for i, row in enumerate(csv.DictReader(f)):
            sid = row.get("session_id")
            if i >= skip and sid and sid not in seen:
                seen.append(sid)
    return seen

def ui_command(args) -> list[str]:
    cmd = [sys.executable, "-m", "herd_sim.main", "--ui",
           "--levels", args.levels, "--deterrents", args.deterrents]
    if args.seed is not None:
        cmd += ["--seed", str(args.seed)]
    if args.log_level:
        cmd += ["--log-level", args.log_level]
    return cmd

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--levels", default=SIM.levels_path)
    ap.add_argument("--deterrents", default=SIM.deterrents_path)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--log-level", default=None)
    ap.add_argument("--herds", default="runs/ui_herds.csv")
    ap.add_argument("--cues", default="runs/ui_cues.csv")
    ap.add_argument("--outdir", default="reports")
    ap.add_argument("--tag", default="")
    args = ap.parse_args()

    herd_rows, cue_rows = count_rows(args.herds), count_rows(args.cues)

    cmd = ui_command(args)
    print("[launcher] Starting UI:", " ".join(cmd))
    ret = subprocess.call(cmd)
    if ret != 0:
        print(f"[launcher] UI exited with code {ret}", file=sys.stderr)

    sessions = new_session_ids(args.herds, herd_rows) or new_session_ids(args.cues, cue_rows)
    if not sessions:
        print("[launcher] The UI wrote no rows this run; nothing to analyze.")
        sys.exit(0)
    if len(sessions) > 1:
        print(f"[launcher] {len(sessions)} sessions appended meanwhile; using the last one.")
    sid = sessions[-1]

    tag = args.tag or os.path.splitext(os.path.basename(args.levels))[0]
    ana_cmd = [sys.executable, "analyze_ui_csv.py",
               "--herds", args.herds, "--cues", args.cues,
               "--outdir", args.outdir, "--tag", tag, "--session", sid]
    print(f"[launcher] Analyzing session {sid} (levels={args.levels})")
    sys.exit(subprocess.call(ana_cmd))

if __name__ == "__main__":
    main()
