# herd_sim/sim/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Tuple

Vec = Tuple[float, float]

# game states
LEVEL_TRANSITION = "level_transition"
PLAYING = "playing"
WON = "won"
LOST = "lost"

# loss reasons
LOSS_FARMS = "farms"
LOSS_ELEPHANTS = "elephants"
LOSS_LOW_SUCCESS = "low_success"

# villager states
EMERGING = "emerging"
CHASING = "chasing"
RETURNING = "returning"

@dataclass
class Elephant:
    uid: int
    x: float
    y: float
    speed: float
    herd_id: int
    spawn_time: float           # sim ms
    vx: float = 0.0
    vy: float = 0.0
    abandoned: bool = False
    active: bool = True
    heading: Vec = (1.0, 0.0)   # current random-walk unit direction
    walk_timer: float = 0.0
    walk_change_interval: float = 2000.0
    movement_type: str = "random"
    last_forces: Dict[str, Vec] = field(default_factory=dict)

    def pos(self) -> Vec:
        return (self.x, self.y)

    def age(self, now_ms: float) -> float:
        return now_ms - self.spawn_time

    def abandon(self) -> None:
        self.abandoned = True

@dataclass
class Deterrent:
    uid: int
    kind: str
    name: str
    x: float
    y: float
    cost: int
    effectiveness: float        # 0-100
    range: float
    size: float
    blocking: bool
    duration_remaining: float   # ms
    active: bool = True

    def pos(self) -> Vec:
        return (self.x, self.y)

    def in_range(self, x: float, y: float) -> bool:
        return ((self.x - x) ** 2 + (self.y - y) ** 2) ** 0.5 <= self.range

    def body_radius(self, scale: float) -> float:
        return self.size * scale

@dataclass
class Farm:
    uid: int
    x: float
    y: float
    damage_level: int = 0
    damage_timer: float = 0.0
    damaged_by: Set[int] = field(default_factory=set)

    def pos(self) -> Vec:
        return (self.x, self.y)

    def can_be_damaged_by(self, elephant_uid: int, max_damage: int) -> bool:
        return self.damage_level < max_damage and elephant_uid not in self.damaged_by

@dataclass
class House:
    uid: int
    x: float
    y: float

    def pos(self) -> Vec:
        return (self.x, self.y)

@dataclass
class Villager:
    uid: int
    x: float
    y: float
    home: Vec
    speed: float
    state: str = EMERGING
    state_timer: float = 0.0
    target_id: Optional[int] = None
    vx: float = 0.0
    vy: float = 0.0
    active: bool = True

    def pos(self) -> Vec:
        return (self.x, self.y)

@dataclass
class CampaignState:
    budget: int
    current_level: int = 0
    current_herd: int = 0
    herd_size: int = 0
    elephants_spawned_in_herd: int = 0
    elephants_finished_in_herd: int = 0
    elephants_lost_this_herd: int = 0
    herd_complete: bool = False
    saved_total: int = 0
    lost_total: int = 0
    total_spawned: int = 0
    damaged_farms_count: int = 0
    game_state: str = LEVEL_TRANSITION
    loss_reason: Optional[str] = None
    spawn_timer: float = 0.0
    campaign_finished: bool = False   # every herd of every level consumed
    game_started: bool = False

    def success_rate(self) -> float:
        total = self.saved_total + self.lost_total
        return self.saved_total / total if total > 0 else 0.0

    def is_terminal(self) -> bool:
        return self.game_state in (WON, LOST)
