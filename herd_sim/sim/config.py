# herd_sim/sim/config.py
from dataclasses import dataclass

# ------------------------------------------------------------
# ARENA / TIMING
# ------------------------------------------------------------
@dataclass(frozen=True)
class ArenaConfig:
    width: float = 1200.0
    height: float = 600.0
    tick_ms: float = 16.0
    spawn_x: float = -30.0
    spawn_y_min: float = 100.0
    spawn_y_max: float = 500.0
    safety_x: float = 1250.0      # crossing this raises "reached safety"
    exit_x: float = -50.0         # abandoned elephants leave past this
    top_margin: float = 50.0      # no further upward drift above this y
    bottom_margin: float = 550.0

# ------------------------------------------------------------
# ELEPHANT BODY + RANDOM WALK
# ------------------------------------------------------------
@dataclass(frozen=True)
class ElephantConfig:
    speed: float = 20.0
    radius: float = 20.0
    walk_interval_min_ms: int = 1000
    walk_interval_max_ms: int = 3000
    rightward_bias: float = 0.3   # probability of a +-45 deg draw around +x

# ------------------------------------------------------------
# STEERING WEIGHTS (see behaviors.py)
# ------------------------------------------------------------
@dataclass(frozen=True)
class SteeringConfig:
    max_speed_mult: float = 2.0
    area_effect_scale: float = 0.6
    farm_sense_radius: float = 120.0
    farm_pull: float = 0.5
    farm_min_dist: float = 20.0
    herd_radius: float = 100.0
    separation_radius: float = 40.0
    separation_scale: float = 0.2
    cohesion_weight: float = 0.1
    alignment_weight: float = 0.1
    farm_weight: float = 0.5
    herd_weight: float = 0.3
    migration_delay_ms: float = 30000.0
    migration_step_ms: float = 15000.0
    migration_base: float = 5.0
    migration_increment: float = 3.0

# ------------------------------------------------------------
# FARMS / HOUSES / DAMAGE
# ------------------------------------------------------------
@dataclass(frozen=True)
class FarmConfig:
    radius: float = 30.0
    damage_threshold_ms: float = 2000.0
    max_damage: int = 2
    farms_lost_limit: int = 3
    min_farm_spacing: float = 120.0
    farm_x_min: float = 300.0     # leftmost quarter stays clear for spawning
    farm_x_max: float = 1100.0
    farm_y_min: float = 100.0
    farm_y_max: float = 500.0
    house_margin: float = 80.0
    min_house_spacing: float = 80.0
    house_farm_spacing: float = 60.0
    placement_attempts: int = 50

# ------------------------------------------------------------
# VILLAGERS
# ------------------------------------------------------------
@dataclass(frozen=True)
class VillagerConfig:
    speed: float = 30.0
    emerge_ms: float = 500.0
    confront_dist: float = 40.0
    home_dist: float = 10.0
    elephants_lost_limit: int = 3

# ------------------------------------------------------------
# ECONOMY / DETERRENTS
# ------------------------------------------------------------
@dataclass(frozen=True)
class EconomyConfig:
    starting_budget: int = 500
    safety_reward: int = 10
    building_clearance: float = 40.0
    blocking_body_scale: float = 0.4
    expiry_warning_ms: float = 10000.0

# ------------------------------------------------------------
# CAMPAIGN PACING
# ------------------------------------------------------------
@dataclass(frozen=True)
class CampaignConfig:
    first_spawn_delay_ms: float = 2000.0
    spawn_interval_min_ms: int = 2000
    spawn_interval_max_ms: int = 4000
    win_success_rate: float = 0.6

# ------------------------------------------------------------
# HEADLESS SETTINGS
# ------------------------------------------------------------
@dataclass(frozen=False)
class SimConfig:
    seed: int = 42
    max_ticks: int = 200_000
    levels_path: str = "configs/levels.json"
    deterrents_path: str = "configs/deterrents.json"
    track_csv: str | None = "runs/herds.csv"

# ------------------------------------------------------------
# EXPORT SINGLETONS
# ------------------------------------------------------------
ARENA = ArenaConfig()
ELEPHANT = ElephantConfig()
STEER = SteeringConfig()
FARM = FarmConfig()
VILLAGER = VillagerConfig()
ECONOMY = EconomyConfig()
CAMPAIGN = CampaignConfig()
SIM = SimConfig()
