"""Tests for the herd / level campaign state machine."""

import pytest

from herd_sim.sim.campaign import Campaign, HERD_ADVANCED, LEVEL_ADVANCED, CAMPAIGN_OVER
from herd_sim.sim.engine import make_elephant
from herd_sim.sim.events import (
    EventBus, GAME_START, LEVEL_START, LEVEL_END, GAME_WON, GAME_LOST, ELEPHANT_SAFE,
)
from herd_sim.sim.models import (
    Farm, LEVEL_TRANSITION, PLAYING, WON, LOST,
    LOSS_FARMS, LOSS_ELEPHANTS, LOSS_LOW_SUCCESS,
)

from conftest import level


def _spawn(campaign, n):
    """Register n spawns and return elephants stamped with the herd id."""
    out = []
    for _ in range(n):
        herd_id = campaign.register_spawn()
        out.append(make_elephant(campaign.state.total_spawned, -30, 300, herd_id=herd_id))
    return out


@pytest.fixture
def campaign():
    c = Campaign([level(5, 5)], bus=EventBus())
    c.begin_level()
    return c


class TestLifecycle:
    def test_starts_in_level_transition(self):
        c = Campaign([level(4)])
        assert c.state.game_state == LEVEL_TRANSITION
        assert c.state.budget == 500

    def test_begin_level(self, campaign):
        s = campaign.state
        assert s.game_state == PLAYING
        assert s.herd_size == 5
        assert s.spawn_timer == 2000.0
        assert campaign.bus.count(GAME_START) == 1
        assert campaign.bus.count(LEVEL_START) == 1
        assert not campaign.begin_level()

    def test_requires_a_level(self):
        with pytest.raises(ValueError):
            Campaign([])

    def test_spawn_pacing(self, campaign):
        assert not campaign.spawn_due(1000.0)
        assert campaign.spawn_due(1000.0)
        assert 2000 <= campaign.state.spawn_timer <= 4000

    def test_no_spawn_beyond_herd_size(self, campaign):
        _spawn(campaign, 5)
        assert campaign.state.herd_complete
        assert not campaign.spawn_due(10_000.0)

    def test_empty_herd_completes_immediately(self):
        c = Campaign([level(0, 2)])
        c.begin_level()
        assert c.state.herd_complete
        assert c.evaluate(0) == HERD_ADVANCED
        assert c.state.current_herd == 1


class TestHerdAndLevelAdvance:
    def test_herd_advance_keeps_totals(self, campaign):
        herd = _spawn(campaign, 5)
        for e in herd:
            campaign.on_safety(e)
        assert campaign.evaluate(0) == HERD_ADVANCED
        s = campaign.state
        assert s.current_herd == 1
        assert s.elephants_finished_in_herd == 0
        assert s.elephants_spawned_in_herd == 0
        assert s.saved_total == 5
        assert s.budget == 550

    def test_no_advance_until_all_finished(self, campaign):
        herd = _spawn(campaign, 5)
        for e in herd[:4]:
            campaign.on_safety(e)
        assert campaign.evaluate(1) is None
        assert campaign.state.current_herd == 0

    def test_stragglers_from_old_herd_do_not_count(self, campaign):
        old = _spawn(campaign, 5)
        for e in old[:4]:
            campaign.on_safety(e)
        campaign.on_loss_removal(old[4])
        campaign.evaluate(0)
        _spawn(campaign, 1)
        campaign.on_safety(old[0])
        assert campaign.state.elephants_finished_in_herd == 0

    def test_level_advance(self):
        c = Campaign([level(1), level(1)], bus=EventBus())
        c.begin_level()
        (e,) = _spawn(c, 1)
        c.on_safety(e)
        assert c.evaluate(0) == LEVEL_ADVANCED
        s = c.state
        assert s.game_state == LEVEL_TRANSITION
        assert s.current_level == 1
        assert s.saved_total == 1
        assert s.budget == 510
        assert c.bus.count(LEVEL_END) == 1

        assert c.begin_level()
        assert c.bus.count(GAME_START) == 1
        assert c.bus.count(LEVEL_START) == 2

    def test_damaged_farms_reset_per_level(self):
        c = Campaign([level(1), level(1)])
        c.begin_level()
        c.on_farm_damaged(Farm(uid=1, x=0, y=0), 2)
        (e,) = _spawn(c, 1)
        c.on_safety(e)
        c.evaluate(0)
        c.begin_level()
        assert c.state.damaged_farms_count == 0


class TestEndConditions:
    def test_three_destroyed_farms_lose(self, campaign):
        for uid in (1, 2, 3):
            assert campaign.on_farm_damaged(Farm(uid=uid, x=0, y=0), 2)
        assert campaign.state.game_state == LOST
        assert campaign.state.loss_reason == LOSS_FARMS

    def test_first_damage_level_does_not_count(self, campaign):
        assert not campaign.on_farm_damaged(Farm(uid=1, x=0, y=0), 1)
        assert campaign.state.damaged_farms_count == 0

    def test_three_intercepts_in_one_herd_lose(self, campaign):
        for e in _spawn(campaign, 3):
            campaign.on_intercept(e)
        assert campaign.state.game_state == LOST
        assert campaign.state.loss_reason == LOSS_ELEPHANTS
        assert campaign.state.lost_total == 3

    def test_win_at_seventy_percent(self, campaign):
        herd = _spawn(campaign, 5)
        for e in herd[:4]:
            campaign.on_safety(e)
        campaign.on_intercept(herd[4])
        assert campaign.evaluate(0) == HERD_ADVANCED

        herd = _spawn(campaign, 5)
        for e in herd[:3]:
            campaign.on_safety(e)
        for e in herd[3:]:
            campaign.on_intercept(e)
        assert campaign.evaluate(0) == CAMPAIGN_OVER
        s = campaign.state
        assert (s.saved_total, s.lost_total) == (7, 3)
        assert s.success_rate() == pytest.approx(0.7)
        assert s.game_state == WON
        assert campaign.bus.count(GAME_WON) == 1

    def test_low_success_loses(self):
        c = Campaign([level(5)])
        c.begin_level()
        herd = _spawn(c, 5)
        c.on_safety(herd[0])
        for e in herd[1:]:
            c.on_loss_removal(e)
        c.evaluate(0)
        assert c.state.game_state == LOST
        assert c.state.loss_reason == LOSS_LOW_SUCCESS

    def test_waits_for_field_to_clear(self):
        c = Campaign([level(1)])
        c.begin_level()
        (e,) = _spawn(c, 1)
        c.on_intercept(e)
        assert c.evaluate(1) is None
        assert c.state.campaign_finished
        assert c.state.game_state == PLAYING
        assert c.evaluate(0) == CAMPAIGN_OVER

    def test_terminal_state_is_sticky(self, campaign):
        for e in _spawn(campaign, 3):
            campaign.on_intercept(e)
        assert campaign.state.game_state == LOST
        campaign._win()
        assert campaign.state.game_state == LOST
        assert campaign.evaluate(0) is None
        assert campaign.bus.count(GAME_LOST) == 1

    def test_success_rate_zero_without_finishers(self, campaign):
        assert campaign.state.success_rate() == 0.0

    def test_safety_event_payload(self, campaign):
        (e,) = _spawn(campaign, 1)
        campaign.on_safety(e)
        assert campaign.bus.history[-1] == (ELEPHANT_SAFE, {"uid": e.uid})
