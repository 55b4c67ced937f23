# herd_sim/sim/campaign.py
"""
Herd / level campaign state machine.

    level_transition --continue--> playing --last herd of level--> level_transition
                                      |                                   (next level)
                                      +--farms destroyed / elephants lost--> lost
                                      +--all levels done, field empty--> won | lost

Only bookkeeping lives here; the tick orchestrator (engine.py) owns the
entities and calls the `on_*` handlers, then `evaluate()` once per tick.
"""
from __future__ import annotations
from typing import List, Optional
import logging

from .models import (
    CampaignState, Elephant, Farm,
    LEVEL_TRANSITION, PLAYING, WON, LOST,
    LOSS_FARMS, LOSS_ELEPHANTS, LOSS_LOW_SUCCESS,
)
from .catalog import LevelSpec, HerdSpec
from .config import ECONOMY, CAMPAIGN, FARM, VILLAGER
from .events import (
    EventBus, GAME_START, LEVEL_START, LEVEL_END, ELEPHANT_SAFE,
    FARM_DAMAGED, VILLAGER_INTERCEPT, GAME_WON, GAME_LOST,
)
from .rng import RNG

log = logging.getLogger(__name__)

# evaluate() outcomes
HERD_ADVANCED = "herd_advanced"
LEVEL_ADVANCED = "level_advanced"
CAMPAIGN_OVER = "campaign_over"


class Campaign:
    def __init__(self, levels: List[LevelSpec], bus: Optional[EventBus] = None,
                 budget: int = ECONOMY.starting_budget):
        if not levels:
            raise ValueError("campaign needs at least one level")
        self.levels = levels
        self.bus = bus if bus is not None else EventBus()
        self.state = CampaignState(budget=budget)
        self.state.herd_size = self.herd_spec().elephants

    # ---------------- config lookups ----------------
    def level_spec(self) -> LevelSpec:
        idx = self.state.current_level
        if 0 <= idx < len(self.levels):
            return self.levels[idx]
        log.error("No level config for level %d; falling back to first level", idx)
        return self.levels[0]

    def herd_spec(self) -> HerdSpec:
        herds = self.level_spec().herds
        return herds[min(self.state.current_herd, len(herds) - 1)]

    def herds_in_level(self) -> int:
        return len(self.level_spec().herds)

    def is_last_level(self) -> bool:
        return self.state.current_level + 1 >= len(self.levels)

    # ---------------- transitions ----------------
    def begin_level(self) -> bool:
        """External 'continue' signal. Returns False unless waiting in level_transition."""
        s = self.state
        if s.game_state != LEVEL_TRANSITION:
            return False
        s.current_herd = 0
        s.damaged_farms_count = 0
        s.campaign_finished = False
        self.start_herd()
        s.spawn_timer = CAMPAIGN.first_spawn_delay_ms
        s.game_state = PLAYING
        if not s.game_started:
            s.game_started = True
            self.bus.emit(GAME_START)
        self.bus.emit(LEVEL_START, level=s.current_level, name=self.level_spec().name)
        log.info("Level %d (%s) started", s.current_level + 1, self.level_spec().name)
        return True

    def start_herd(self) -> None:
        s = self.state
        s.herd_size = self.herd_spec().elephants
        s.elephants_spawned_in_herd = 0
        s.elephants_finished_in_herd = 0
        s.elephants_lost_this_herd = 0
        s.herd_complete = s.herd_size <= 0
        log.info("Starting herd %d of level %d with %d elephants",
                 s.current_herd + 1, s.current_level + 1, s.herd_size)

    def _advance_level(self) -> None:
        s = self.state
        self.bus.emit(LEVEL_END, level=s.current_level)
        s.current_level += 1
        s.current_herd = 0
        s.damaged_farms_count = 0
        s.herd_size = self.herd_spec().elephants
        s.elephants_spawned_in_herd = 0
        s.elephants_finished_in_herd = 0
        s.elephants_lost_this_herd = 0
        s.herd_complete = False
        s.game_state = LEVEL_TRANSITION
        log.info("Advanced to level %d: %s", s.current_level + 1, self.level_spec().name)

    def _lose(self, reason: str) -> None:
        s = self.state
        if s.is_terminal():
            return
        s.game_state = LOST
        s.loss_reason = reason
        self.bus.emit(GAME_LOST, reason=reason)
        log.info("Campaign lost (%s)", reason)

    def _win(self) -> None:
        s = self.state
        if s.is_terminal():
            return
        s.game_state = WON
        self.bus.emit(GAME_WON, success_rate=s.success_rate())
        log.info("Campaign won (success rate %.0f%%)", s.success_rate() * 100)

    # ---------------- spawning ----------------
    def spawn_due(self, dt_ms: float) -> bool:
        s = self.state
        if s.game_state != PLAYING or s.herd_complete:
            return False
        s.spawn_timer -= dt_ms
        if s.spawn_timer > 0 or s.elephants_spawned_in_herd >= s.herd_size:
            return False
        s.spawn_timer = float(RNG.randint(CAMPAIGN.spawn_interval_min_ms, CAMPAIGN.spawn_interval_max_ms))
        return True

    def register_spawn(self) -> int:
        """Count a spawned elephant; returns the herd id to stamp on it."""
        s = self.state
        s.elephants_spawned_in_herd += 1
        s.total_spawned += 1
        if s.elephants_spawned_in_herd >= s.herd_size:
            s.herd_complete = True
        return s.current_herd

    # ---------------- event handlers ----------------
    def _finish(self, e: Elephant) -> None:
        if e.herd_id == self.state.current_herd:
            self.state.elephants_finished_in_herd += 1

    def on_safety(self, e: Elephant) -> None:
        s = self.state
        s.saved_total += 1
        s.budget += ECONOMY.safety_reward
        self._finish(e)
        self.bus.emit(ELEPHANT_SAFE, uid=e.uid)

    def on_intercept(self, e: Elephant) -> None:
        s = self.state
        s.lost_total += 1
        s.elephants_lost_this_herd += 1
        self._finish(e)
        self.bus.emit(VILLAGER_INTERCEPT, uid=e.uid)
        if s.elephants_lost_this_herd >= VILLAGER.elephants_lost_limit:
            self._lose(LOSS_ELEPHANTS)

    def on_loss_removal(self, e: Elephant) -> None:
        self.state.lost_total += 1
        self._finish(e)

    def on_farm_damaged(self, farm: Farm, level: int) -> bool:
        """Returns True when the farm is now destroyed (caller sends a villager)."""
        s = self.state
        self.bus.emit(FARM_DAMAGED, farm=farm.uid, level=level)
        if level < FARM.max_damage:
            return False
        s.damaged_farms_count += 1
        if s.damaged_farms_count >= FARM.farms_lost_limit:
            self._lose(LOSS_FARMS)
        return True

    # ---------------- per-tick evaluation ----------------
    def evaluate(self, active_elephants: int) -> Optional[str]:
        s = self.state
        if s.game_state != PLAYING:
            return None

        outcome = None
        if (not s.campaign_finished and s.herd_complete
                and s.elephants_finished_in_herd >= s.herd_size):
            s.current_herd += 1
            log.info("Completed herd %d/%d of level %d",
                     s.current_herd, self.herds_in_level(), s.current_level + 1)
            if s.current_herd < self.herds_in_level():
                self.start_herd()
                outcome = HERD_ADVANCED
            elif not self.is_last_level():
                self._advance_level()
                return LEVEL_ADVANCED
            else:
                s.campaign_finished = True

        if s.campaign_finished and active_elephants == 0:
            if s.success_rate() >= CAMPAIGN.win_success_rate:
                self._win()
            else:
                self._lose(LOSS_LOW_SUCCESS)
            return CAMPAIGN_OVER
        return outcome
