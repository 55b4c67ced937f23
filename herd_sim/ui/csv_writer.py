# herd_sim/ui/csv_writer.py
from __future__ import annotations
import csv
import os
import uuid
from typing import Dict, List, Optional
from ..sim.metrics import summarize_herd


class HerdCsvLogger:
    """
    Append campaign stats to CSV files as the UI plays.
    - herds_path: runs/ui_herds.csv  one row whenever a herd/level/campaign ends
    - cues_path:  runs/ui_cues.csv   one row per cue (optional)
    Each run gets its own session_id so you can combine logs safely later.

    Usage from UI loop:
        logger = HerdCsvLogger()
        sim.bus.subscribe(logger.on_cue)
        ...
        if herd_changed:
            logger.append_herd(sim, notes="")
    """
    def __init__(self,
                 herds_path: str = "runs/ui_herds.csv",
                 cues_path: str = "runs/ui_cues.csv",
                 enable_cues: bool = True):
        self.herds_path = herds_path
        self.cues_path = cues_path
        self.enable_cues = enable_cues
        self.session_id = uuid.uuid4().hex[:8]
        self._sim = None

        if self.herds_path:
            os.makedirs(os.path.dirname(self.herds_path) or ".", exist_ok=True)
        if self.enable_cues and self.cues_path:
            os.makedirs(os.path.dirname(self.cues_path) or ".", exist_ok=True)

        self._herd_header = [
            "session_id", "tick", "time_s", "level", "herd", "budget",
            "saved", "lost", "spawned", "damaged_farms", "success_rate",
            "deterrents", "game_state",
            "x_min", "x_q25", "x_median", "x_q75", "x_max",
            "notes",
        ]
        if self.herds_path and not os.path.exists(self.herds_path):
            with open(self.herds_path, "w", newline="") as f:
                csv.DictWriter(f, fieldnames=self._herd_header).writeheader()

        self._cue_header = ["session_id", "tick", "cue", "detail"]
        if self.enable_cues and self.cues_path and not os.path.exists(self.cues_path):
            with open(self.cues_path, "w", newline="") as f:
                csv.DictWriter(f, fieldnames=self._cue_header).writeheader()

    # ---------------- internal helpers ----------------
    @staticmethod
    def _quantiles(xs: List[float]) -> Dict[str, float]:
        """
        Nearest-rank quantiles of elephant x positions (how far the field got).
        """
        if not xs:
            return dict(x_min=float("nan"), x_q25=float("nan"), x_median=float("nan"),
                        x_q75=float("nan"), x_max=float("nan"))
        q = sorted(xs)
        n = len(q)
        def at(p: float) -> float:
            if n == 1:
                return q[0]
            i = int(round(p * (n - 1)))
            return q[max(0, min(n - 1, i))]
        return dict(x_min=q[0], x_q25=at(0.25), x_median=at(0.50), x_q75=at(0.75), x_max=q[-1])

    def _herd_row(self, sim, notes: Optional[str]) -> Dict:
        row = dict(session_id=self.session_id)
        row.update(summarize_herd(sim))
        row.update(self._quantiles([e.x for e in sim.elephants if e.active]))
        row["notes"] = notes or ""
        return row

    # ---------------- public API ----------------
    def attach(self, sim) -> None:
        """Remember the sim whose tick counter stamps cue rows and subscribe to its bus."""
        self._sim = sim
        sim.bus.subscribe(self.on_cue)

    def append_herd(self, sim, notes: Optional[str] = None) -> None:
        if not self.herds_path:
            return
        with open(self.herds_path, "a", newline="") as f:
            w = csv.DictWriter(f, fieldnames=self._herd_header)
            w.writerow(self._herd_row(sim, notes))

    def on_cue(self, cue: str, payload: dict) -> None:
        if not (self.enable_cues and self.cues_path):
            return
        detail = " ".join(f"{k}={v}" for k, v in sorted(payload.items()))
        with open(self.cues_path, "a", newline="") as f:
            w = csv.DictWriter(f, fieldnames=self._cue_header)
            w.writerow(dict(session_id=self.session_id,
                            tick=self._sim.tick_count if self._sim is not None else "",
                            cue=cue, detail=detail))
