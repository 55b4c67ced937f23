"""Integration tests for the tick orchestrator."""

from herd_sim.sim.engine import Simulation, make_elephant, build_simulation
from herd_sim.sim.events import (
    EventBus, ELEPHANT_SAFE, GAME_WON, GAME_LOST, LEVEL_START, VILLAGER_INTERCEPT,
)
from herd_sim.sim.models import (
    Farm, House, CHASING, LEVEL_TRANSITION, PLAYING, WON, LOST,
    LOSS_LOW_SUCCESS, LOSS_FARMS, LOSS_ELEPHANTS,
)
from herd_sim.sim.villagers import spawn_villager
from herd_sim.sim.world import World
from herd_sim.sim.geometry import dist
from herd_sim.sim.config import ARENA, FARM

from conftest import level, StickyContacts


def test_single_elephant_reaches_safety_and_wins(catalog):
    bus = EventBus()
    sim = Simulation(levels=[level(1)], catalog=catalog, seed=11, bus=bus)
    ticks = sim.run(20_000)
    assert ticks < 20_000
    assert sim.state.game_state == WON
    assert bus.count(ELEPHANT_SAFE) == 1
    assert bus.count(GAME_WON) == 1
    assert sim.state.budget == 510
    assert sim.state.saved_total == 1
    assert sim.elephants == []


def test_safety_fires_once_per_crossing(big_herd_sim, bus):
    e = make_elephant(1001, ARENA.safety_x - 5, 300, spawn_time=big_herd_sim.now_ms)
    e.heading, e.walk_change_interval = (1.0, 0.0), 1e9
    big_herd_sim.elephants.append(e)
    for _ in range(100):
        big_herd_sim.tick()
    assert bus.count(ELEPHANT_SAFE) == 1
    assert big_herd_sim.state.budget == 510
    assert big_herd_sim.state.elephants_finished_in_herd == 1
    assert e not in big_herd_sim.elephants


def test_abandoned_elephant_leaves_by_spawn_edge(big_herd_sim):
    e = make_elephant(1001, ARENA.exit_x + 5, 300)
    e.abandon()
    big_herd_sim.elephants.append(e)
    for _ in range(20):
        big_herd_sim.tick()
    assert not e.active
    assert big_herd_sim.state.lost_total == 0    # counted at interception, not on exit


def test_spawning_follows_herd_pacing(big_herd_sim):
    for _ in range(124):
        big_herd_sim.tick()
    assert big_herd_sim.state.total_spawned == 0
    big_herd_sim.tick()
    assert big_herd_sim.state.total_spawned == 1
    e = big_herd_sim.elephants[0]
    assert e.herd_id == 0
    assert ARENA.spawn_y_min <= e.y <= ARENA.spawn_y_max


def test_tick_only_while_playing(catalog):
    sim = Simulation(levels=[level(1)], catalog=catalog, seed=1)
    assert sim.state.game_state == LEVEL_TRANSITION
    assert not sim.tick()
    assert sim.tick_count == 0
    assert sim.continue_level()
    assert sim.tick()
    assert not sim.continue_level()


def test_terminal_state_halts_ticking(big_herd_sim):
    big_herd_sim.campaign._lose(LOSS_LOW_SUCCESS)
    n = big_herd_sim.tick_count
    assert not big_herd_sim.tick()
    assert big_herd_sim.tick_count == n
    assert big_herd_sim.state.game_state == LOST


def test_continue_builds_level_layout(catalog, bus):
    sim = Simulation(levels=[level(3, farms=4, houses=2)], catalog=catalog, seed=5, bus=bus)
    sim.continue_level()
    assert sim.state.game_state == PLAYING
    assert len(sim.world.farms) <= 4
    assert len(sim.world.houses) <= 2
    assert bus.count(LEVEL_START) == 1
    farms = sim.world.farms
    for i, a in enumerate(farms):
        for b in farms[i + 1:]:
            assert dist(a.pos(), b.pos()) >= FARM.min_farm_spacing


def test_level_advance_clears_field(catalog):
    sim = Simulation(levels=[level(1), level(1)], catalog=catalog, seed=9)
    sim.continue_level()
    sim.place_deterrent(600, 100, kind="thorns")
    sim.run(20_000, auto_continue=False)
    assert sim.state.game_state == LEVEL_TRANSITION
    assert sim.state.current_level == 1
    assert sim.elephants == []
    assert sim.deterrents == []
    assert sim.world.farms == []


def test_remove_lost_counts_once(big_herd_sim):
    e = make_elephant(1001, 300, 300)
    big_herd_sim.elephants.append(e)
    assert big_herd_sim.remove_lost(e.uid)
    assert not big_herd_sim.remove_lost(e.uid)
    assert big_herd_sim.state.lost_total == 1
    assert big_herd_sim.state.elephants_finished_in_herd == 1


def test_build_simulation_from_repo_configs(repo_root):
    sim = build_simulation(str(repo_root / "configs" / "levels.json"),
                           str(repo_root / "configs" / "deterrents.json"), seed=1)
    assert len(sim.campaign.levels) == 3
    assert "electric_fence" in sim.catalog


def test_world_spawn_and_boundaries():
    x, y = World.spawn_point()
    assert x == ARENA.spawn_x
    assert ARENA.spawn_y_min <= y <= ARENA.spawn_y_max
    assert World.reached_safety(ARENA.safety_x + 0.1)
    assert not World.reached_safety(ARENA.safety_x)
    assert World.exited_spawn_edge(ARENA.exit_x - 0.1)


def test_remove_lost_after_interception_does_not_recount(big_herd_sim):
    e = make_elephant(1001, 300, 300)
    big_herd_sim.elephants.append(e)
    e.abandon()
    big_herd_sim.campaign.on_intercept(e)
    assert big_herd_sim.remove_lost(e.uid)
    assert not e.active
    assert big_herd_sim.state.lost_total == 1
    assert big_herd_sim.state.elephants_finished_in_herd == 1


# ---------- losing conditions through the tick loop ----------
def _parked(uid, x, y):
    e = make_elephant(uid, x, y)
    e.heading, e.walk_change_interval = (1.0, 0.0), 1e9
    return e


def test_trampled_farms_lose_the_campaign(big_herd_sim, bus):
    sim = big_herd_sim
    sim.contacts = StickyContacts()
    sim.world.farms.extend([Farm(uid=901, x=500, y=150), Farm(uid=902, x=500, y=300),
                            Farm(uid=903, x=500, y=450)])
    a, b = _parked(1001, 300, 250), _parked(1002, 300, 350)
    sim.elephants.extend([a, b])
    sim.contacts.on_farm.update({a.uid, b.uid})

    for _ in range(400):
        if not sim.tick():
            break
    assert sim.state.game_state == LOST
    assert sim.state.loss_reason == LOSS_FARMS
    assert sim.state.damaged_farms_count == 3
    assert all(f.damage_level == 2 for f in sim.world.farms)
    assert bus.count(GAME_LOST) == 1


def test_third_interception_in_a_herd_loses(big_herd_sim, bus):
    sim = big_herd_sim
    herd = [_parked(1001 + i, 600, y) for i, y in enumerate((150, 300, 450))]
    sim.elephants.extend(herd)

    for i, e in enumerate(herd):
        v = spawn_villager(House(uid=950 + i, x=e.x - 10, y=e.y), uid=950 + i)
        v.state, v.target_id = CHASING, e.uid
        sim.villagers.append(v)
        sim.tick()
        assert e.abandoned
        if i < 2:
            assert sim.state.game_state == PLAYING
            assert sim.state.lost_total == i + 1

    assert sim.state.game_state == LOST
    assert sim.state.loss_reason == LOSS_ELEPHANTS
    assert bus.count(VILLAGER_INTERCEPT) == 3
    assert bus.count(GAME_LOST) == 1


def test_villagers_stand_down_once_farms_lose(big_herd_sim, bus):
    sim = big_herd_sim
    sim.contacts = StickyContacts()
    sim.state.damaged_farms_count = 2
    e1, e2 = _parked(1001, 300, 150), _parked(1002, 300, 450)
    sim.elephants.extend([e1, e2])
    sim.world.farms.append(Farm(uid=901, x=320, y=150, damage_level=1, damage_timer=1990.0))
    sim.contacts.on_farm.add(e1.uid)
    v = spawn_villager(House(uid=950, x=e2.x - 10, y=e2.y), uid=950)
    v.state, v.target_id = CHASING, e2.uid
    sim.villagers.append(v)

    sim.tick()
    assert sim.state.game_state == LOST
    assert sim.state.loss_reason == LOSS_FARMS
    assert not e2.abandoned
    assert sim.state.lost_total == 0
    assert bus.count(VILLAGER_INTERCEPT) == 0
