# herd_sim/sim/engine.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import logging

from .models import Elephant, Deterrent, Villager, LEVEL_TRANSITION, PLAYING
from .world import World
from .catalog import LevelSpec, DeterrentCatalog, DEFAULT_LEVELS, DEFAULT_DETERRENTS, load_levels, load_deterrents
from .campaign import Campaign, LEVEL_ADVANCED
from .behaviors import step_behavior, choose_walk_direction, next_walk_interval
from .deterrents import place_deterrent, tick_deterrents
from .farms import apply_contacts, nearest_house
from .villagers import spawn_villager, step_villager
from .contacts import ContactDetector, CircleContacts
from .events import EventBus, DETERRENT_PICKED, DETERRENT_PLACED
from .errors import UnknownDeterrentType
from .config import ARENA, ELEPHANT, SIM
from .rng import RNG

log = logging.getLogger(__name__)


class Simulation:
    """
    Fixed-step tick orchestrator.

    One `tick()` advances, in order:
      deterrent countdown -> spawning -> steering (all elephants, two-phase)
      -> contacts (solid push-out, safety/exit, farm overlaps) -> villagers
      -> campaign evaluation -> end-of-tick sweep.

    Ticking only happens while the campaign is `playing`: a level transition
    waits for `continue_level()`, and won/lost freeze the field for good.
    """
    def __init__(self, levels: Optional[List[LevelSpec]] = None,
                 catalog: Optional[DeterrentCatalog] = None,
                 seed: Optional[int] = None,
                 contacts: Optional[ContactDetector] = None,
                 bus: Optional[EventBus] = None):
        if seed is not None:
            RNG.seed(seed)
        self.bus = bus if bus is not None else EventBus()
        self.catalog = catalog if catalog is not None else DeterrentCatalog(DEFAULT_DETERRENTS)
        self.campaign = Campaign(levels or list(DEFAULT_LEVELS), bus=self.bus)
        self.contacts: ContactDetector = contacts if contacts is not None else CircleContacts()
        self.world = World()

        self.elephants: List[Elephant] = []
        self.deterrents: List[Deterrent] = []
        self.villagers: List[Villager] = []
        self.selected_deterrent: Optional[str] = None

        self.now_ms: float = 0.0
        self.tick_count: int = 0
        self._next_uid = 1

    @property
    def state(self):
        return self.campaign.state

    def _uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    # ---------------- level lifecycle ----------------
    def clear_level(self) -> None:
        self.world.clear()
        self.elephants = []
        self.villagers = []
        self.deterrents = []

    def continue_level(self) -> bool:
        """External continue signal for the level transition screen."""
        if self.state.game_state != LEVEL_TRANSITION:
            return False
        spec = self.campaign.level_spec()
        self.world.build_level(spec.farms, spec.houses)
        return self.campaign.begin_level()

    # ---------------- player actions ----------------
    def _locked(self, kind: str) -> bool:
        spec = self.catalog.get(kind)
        if spec.unlock_level > self.state.current_level + 1:
            log.debug("%s is locked until level %d", kind, spec.unlock_level)
            return True
        return False

    def select_deterrent(self, kind: str) -> bool:
        try:
            if self._locked(kind):
                return False
        except UnknownDeterrentType as e:
            log.warning("Selection ignored: %s", e)
            return False
        self.selected_deterrent = kind
        self.bus.emit(DETERRENT_PICKED, kind=kind)
        return True

    def clear_selection(self) -> None:
        self.selected_deterrent = None

    def place_deterrent(self, x: float, y: float, kind: Optional[str] = None) -> Optional[Deterrent]:
        kind = kind or self.selected_deterrent
        if kind is None or self.state.game_state != PLAYING:
            return None
        if kind in self.catalog and self._locked(kind):
            return None
        d = place_deterrent(self.state, self.catalog, kind, x, y,
                            self.world.farms, self.world.houses, uid=self._uid())
        if d is not None:
            self.deterrents.append(d)
            self.bus.emit(DETERRENT_PLACED, kind=kind, x=x, y=y, cost=d.cost)
        return d

    # ---------------- elephants ----------------
    def spawn_elephant(self) -> Elephant:
        x, y = self.world.spawn_point()
        herd_id = self.campaign.register_spawn()
        e = Elephant(
            uid=self._uid(), x=x, y=y, speed=ELEPHANT.speed,
            herd_id=herd_id, spawn_time=self.now_ms,
            vx=ELEPHANT.speed, vy=0.0,
            walk_change_interval=next_walk_interval(),
        )
        self.elephants.append(e)
        log.debug("Spawned elephant %d (%d/%d) in herd %d", e.uid,
                  self.state.elephants_spawned_in_herd, self.state.herd_size, herd_id + 1)
        return e

    def remove_lost(self, uid: int) -> bool:
        """Explicitly remove an elephant as lost (counts once toward its herd)."""
        for e in self.elephants:
            if e.uid == uid and e.active:
                e.active = False
                if not e.abandoned:        # intercepted ones were counted already
                    self.campaign.on_loss_removal(e)
                return True
        return False

    def active_elephants(self) -> List[Elephant]:
        return [e for e in self.elephants if e.active]

    # ---------------- tick phases ----------------
    def _steer(self, dt_ms: float) -> None:
        live_det = [d for d in self.deterrents if d.active]
        herd = [e for e in self.elephants if e.active]
        velocities: List[Tuple[Elephant, float, float]] = []
        for me in herd:
            vx, vy = step_behavior(me, herd, live_det, self.world.farms, self.now_ms, dt_ms)
            velocities.append((me, vx, vy))

        dt = dt_ms / 1000.0
        for me, vx, vy in velocities:
            me.vx, me.vy = vx, vy
            me.x += vx * dt
            me.y += vy * dt

    def _boundaries(self) -> None:
        for e in self.elephants:
            if not e.active:
                continue
            if e.abandoned:
                if self.world.exited_spawn_edge(e.x):
                    e.active = False      # already counted as lost at interception
            elif self.world.reached_safety(e.x):
                e.active = False
                self.campaign.on_safety(e)

    def _farms(self, dt_ms: float) -> None:
        hits = apply_contacts(self.world.farms,
                              self.contacts.overlaps(self.elephants, self.world.farms), dt_ms)
        for farm, _e, level in hits:
            destroyed = self.campaign.on_farm_damaged(farm, level)
            if destroyed:
                house = nearest_house(farm, self.world.houses)
                if house is not None:
                    self.villagers.append(spawn_villager(house, uid=self._uid()))

    def _villagers(self, dt_ms: float) -> None:
        by_id: Dict[int, Elephant] = {e.uid: e for e in self.elephants if e.active}
        for v in self.villagers:
            if self.state.is_terminal():
                break
            caught = step_villager(v, self.elephants, by_id, dt_ms)
            if caught is not None:
                self.campaign.on_intercept(caught)

    def _sweep(self) -> None:
        self.elephants = [e for e in self.elephants if e.active]
        self.deterrents = [d for d in self.deterrents if d.active]
        self.villagers = [v for v in self.villagers if v.active]

    def tick(self) -> bool:
        """Advance one fixed step. Returns False when nothing was simulated."""
        if self.state.game_state != PLAYING:
            return False
        dt_ms = ARENA.tick_ms
        self.now_ms += dt_ms
        self.tick_count += 1

        for d in tick_deterrents(self.deterrents, dt_ms):
            log.debug("Deterrent %s (%d) expired", d.kind, d.uid)

        if self.campaign.spawn_due(dt_ms):
            self.spawn_elephant()

        self._steer(dt_ms)
        self.contacts.resolve_solid(self.elephants, self.deterrents)
        self._boundaries()
        self._farms(dt_ms)
        if not self.state.is_terminal():
            self._villagers(dt_ms)

        outcome = self.campaign.evaluate(sum(1 for e in self.elephants if e.active))
        self._sweep()
        if outcome == LEVEL_ADVANCED:
            self.clear_level()
        return True

    def run(self, max_ticks: int, auto_continue: bool = True) -> int:
        """Headless loop; returns ticks simulated. Stops on won/lost."""
        n = 0
        while n < max_ticks and not self.state.is_terminal():
            if self.state.game_state == LEVEL_TRANSITION:
                if not auto_continue:
                    break
                self.continue_level()
                continue
            self.tick()
            n += 1
        return n


def make_elephant(uid: int, x: float, y: float, herd_id: int = 0, spawn_time: float = 0.0) -> Elephant:
    """Stand-alone elephant with a fresh walk heading (used by tools and tests)."""
    return Elephant(uid=uid, x=x, y=y, speed=ELEPHANT.speed, herd_id=herd_id,
                    spawn_time=spawn_time, heading=choose_walk_direction(),
                    walk_change_interval=next_walk_interval())


def build_simulation(levels_path: Optional[str] = SIM.levels_path,
                     deterrents_path: Optional[str] = SIM.deterrents_path,
                     seed: Optional[int] = SIM.seed,
                     bus: Optional[EventBus] = None) -> Simulation:
    """Load both JSON configs (falling back to built-in defaults) and wire up a Simulation."""
    return Simulation(levels=load_levels(levels_path),
                      catalog=load_deterrents(deterrents_path),
                      seed=seed, bus=bus)
