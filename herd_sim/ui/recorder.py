# herd_sim/ui/recorder.py
from __future__ import annotations
import os, time
from typing import Optional
import numpy as np

class Recorder:
    """
    Capture snapshots every `stride_steps` ticks for offline playback (NPZ).
    Stores: elephant pos/abandoned/uid, villager pos, farm damage, level/herd.
    """
    def __init__(self, enabled=False, stride_steps=4, arena=(1200.0, 600.0), tick_ms=16.0):
        self.enabled = enabled
        self.stride_steps = max(1, int(stride_steps))
        self.arena = (float(arena[0]), float(arena[1]))
        self.tick_ms = float(tick_ms)
        self._tstep = 0
        self.pos_list = []
        self.uid_list = []
        self.abandoned_list = []
        self.villager_list = []
        self.farm_list = []
        self.level_herd_list = []
        self.maxN = 0
        self.maxV = 0
        self.maxF = 0

    def toggle(self): self.enabled = not self.enabled; print(f"[Recorder] {'ON' if self.enabled else 'OFF'}")
    def clear(self):
        self._tstep = 0
        self.pos_list.clear(); self.uid_list.clear(); self.abandoned_list.clear()
        self.villager_list.clear(); self.farm_list.clear(); self.level_herd_list.clear()
        self.maxN = self.maxV = self.maxF = 0
        print("[Recorder] cleared")

    def maybe_capture(self, sim):
        if not self.enabled: return
        self._tstep += 1
        if (self._tstep % self.stride_steps) != 0: return

        herd = [e for e in sim.elephants if e.active]
        N = len(herd); self.maxN = max(self.maxN, N)
        pos = np.zeros((N, 2), np.float32)
        uid = np.zeros((N,), np.int32)
        ab = np.zeros((N,), np.bool_)
        for i, e in enumerate(herd):
            pos[i] = (e.x, e.y)
            uid[i] = e.uid
            ab[i] = e.abandoned
        self.pos_list.append(pos); self.uid_list.append(uid); self.abandoned_list.append(ab)

        vxy = np.array([(v.x, v.y) for v in sim.villagers if v.active], np.float32).reshape(-1, 2)
        self.villager_list.append(vxy)
        self.maxV = max(self.maxV, len(vxy))

        farms = np.array([(f.x, f.y, f.damage_level) for f in sim.world.farms], np.float32).reshape(-1, 3)
        self.farm_list.append(farms)
        self.maxF = max(self.maxF, len(farms))

        self.level_herd_list.append((sim.state.current_level, sim.state.current_herd, sim.tick_count))

    def save_npz(self, out_path: Optional[str]=None):
        if not self.pos_list:
            print("[Recorder] nothing to save"); return None

        T = len(self.pos_list); maxN = self.maxN; maxV = self.maxV; maxF = self.maxF
        pos  = np.full((T, maxN, 2), np.nan, np.float32)
        uid  = np.full((T, maxN), -1, np.int32)
        ab   = np.zeros((T, maxN), np.bool_)
        vxy  = np.full((T, maxV, 2), np.nan, np.float32)
        farm = np.full((T, maxF, 3), np.nan, np.float32)
        lht  = np.zeros((T, 3), np.int32)

        for t in range(T):
            N = self.pos_list[t].shape[0]
            pos[t, :N] = self.pos_list[t]
            uid[t, :N] = self.uid_list[t]
            ab[t, :N] = self.abandoned_list[t]
            V = self.villager_list[t].shape[0]
            if V: vxy[t, :V] = self.villager_list[t]
            F = self.farm_list[t].shape[0]
            if F: farm[t, :F] = self.farm_list[t]
            lht[t] = self.level_herd_list[t]

        if out_path is None:
            os.makedirs("recordings", exist_ok=True)
            stamp = time.strftime("%Y%m%d_%H%M%S")
            out_path = os.path.join("recordings", f"herd_run_{stamp}.npz")

        np.savez_compressed(
            out_path,
            arena=np.array(self.arena, np.float32),
            tick_ms=np.float32(self.tick_ms),
            stride_steps=np.int32(self.stride_steps),
            pos=pos, uid=uid, abandoned=ab,
            villagers=vxy, farms=farm,
            level_herd_tick=lht,
        )
        print(f"[Recorder] saved: {out_path} (T={T}, maxN={maxN})")
        return out_path
