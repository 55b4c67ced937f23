# herd_sim/sim/world.py
from __future__ import annotations
from typing import List, Tuple
import logging

from .models import Farm, House
from .rng import RNG
from .config import ARENA, FARM
from .geometry import dist

log = logging.getLogger(__name__)


class World:
    """Static layout of one level: farms, houses and the spawn edge."""
    def __init__(self, width: float = ARENA.width, height: float = ARENA.height):
        self.width = width
        self.height = height
        self.farms: List[Farm] = []
        self.houses: List[House] = []
        self._uid = 0

    def _next_uid(self) -> int:
        self._uid += 1
        return self._uid

    def clear(self) -> None:
        self.farms = []
        self.houses = []

    # --- level layout ---
    def generate_farms(self, n: int) -> None:
        for i in range(n):
            placed = False
            for _ in range(FARM.placement_attempts):
                x = float(RNG.randint(int(FARM.farm_x_min), int(FARM.farm_x_max)))
                y = float(RNG.randint(int(FARM.farm_y_min), int(FARM.farm_y_max)))
                if all(dist((x, y), f.pos()) >= FARM.min_farm_spacing for f in self.farms):
                    self.farms.append(Farm(uid=self._next_uid(), x=x, y=y))
                    placed = True
                    break
            if not placed:
                log.info("Skipped farm %d: no free spot after %d attempts", i + 1, FARM.placement_attempts)

    def generate_houses(self, n: int) -> None:
        m = FARM.house_margin
        for i in range(n):
            placed = False
            for _ in range(FARM.placement_attempts):
                x = float(RNG.randint(int(m), int(self.width - m)))
                y = float(RNG.randint(int(m), int(self.height - m)))
                if any(dist((x, y), h.pos()) < FARM.min_house_spacing for h in self.houses):
                    continue
                if any(dist((x, y), f.pos()) < FARM.house_farm_spacing for f in self.farms):
                    continue
                self.houses.append(House(uid=self._next_uid(), x=x, y=y))
                placed = True
                break
            if not placed:
                log.info("Skipped house %d: no free spot after %d attempts", i + 1, FARM.placement_attempts)

    def build_level(self, n_farms: int, n_houses: int) -> None:
        self.clear()
        self.generate_farms(n_farms)
        self.generate_houses(n_houses)

    # --- spawn / boundaries ---
    @staticmethod
    def spawn_point() -> Tuple[float, float]:
        y = float(RNG.randint(int(ARENA.spawn_y_min), int(ARENA.spawn_y_max)))
        return (ARENA.spawn_x, y)

    @staticmethod
    def reached_safety(x: float) -> bool:
        return x > ARENA.safety_x

    @staticmethod
    def exited_spawn_edge(x: float) -> bool:
        return x < ARENA.exit_x
