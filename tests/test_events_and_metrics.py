"""Tests for cue delivery, HUD text and the CSV / NPZ writers."""

import csv
import os
import argparse

import numpy as np
import pytest

from herd_sim.sim.events import EventBus, FARM_DAMAGED, GAME_START, ALL_CUES
from herd_sim.sim.metrics import status_text, hud_fields, summarize_herd, append_csv
from herd_sim.sim.models import CampaignState, WON, LOST, PLAYING, LOSS_FARMS, LOSS_ELEPHANTS
from herd_sim.ui.csv_writer import HerdCsvLogger
from herd_sim.ui.recorder import Recorder
from herd_sim.main import parse_placement, apply_placements, autopilot
from herd_sim.sim.engine import Simulation, make_elephant

from conftest import level


class TestEventBus:
    def test_failing_listener_is_skipped(self, caplog):
        bus = EventBus()
        seen = []

        def broken(cue, payload):
            raise RuntimeError("speaker unplugged")

        bus.subscribe(broken)
        bus.subscribe(lambda cue, payload: seen.append((cue, payload)))
        bus.emit(FARM_DAMAGED, farm=1, level=2)
        assert seen == [(FARM_DAMAGED, {"farm": 1, "level": 2})]
        assert "cue listener failed" in caplog.text

    def test_history_and_unsubscribe(self):
        bus = EventBus()
        seen = []
        fn = lambda cue, payload: seen.append(cue)
        bus.subscribe(fn)
        bus.emit(GAME_START)
        bus.unsubscribe(fn)
        bus.emit(GAME_START)
        assert seen == [GAME_START]
        assert bus.count(GAME_START) == 2
        bus.clear()
        assert bus.count(GAME_START) == 0

    def test_cue_names_are_unique(self):
        assert len(set(ALL_CUES)) == len(ALL_CUES) == 10


class TestStatusText:
    def test_outcomes(self):
        s = CampaignState(budget=0, game_state=WON)
        assert status_text(s, 3, True).startswith("Victory")
        s = CampaignState(budget=0, game_state=LOST, loss_reason=LOSS_FARMS)
        assert "farms" in status_text(s, 3, True)
        s.loss_reason = LOSS_ELEPHANTS
        assert "elephants" in status_text(s, 3, True)

    def test_progress(self):
        s = CampaignState(budget=0, game_state=PLAYING, current_herd=0)
        assert status_text(s, 3, False) == "Spawning herd 1..."
        s.herd_complete = True
        assert status_text(s, 3, False) == "Waiting for herd 1 to finish..."
        s.current_herd = 2
        assert status_text(s, 3, True) == "Final herd migrating..."


def test_hud_and_summary_fields(big_herd_sim):
    f = hud_fields(big_herd_sim)
    assert (f["budget"], f["level"], f["herd"], f["herd_progress"]) == (500, 1, 1, "0/50")
    row = summarize_herd(big_herd_sim)
    assert row["game_state"] == PLAYING
    assert row["success_rate"] == 0.0


def test_append_csv_writes_header_once(tmp_path):
    path = str(tmp_path / "out" / "herds.csv")
    append_csv(path, {"a": 1, "b": 2})
    append_csv(path, {"a": 3, "b": 4})
    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_csv_logger_rows_and_cues(tmp_path, big_herd_sim):
    herds, cues = tmp_path / "h.csv", tmp_path / "c.csv"
    logger = HerdCsvLogger(herds_path=str(herds), cues_path=str(cues))
    logger.attach(big_herd_sim)
    big_herd_sim.elephants.extend([make_elephant(1001, 100, 300), make_elephant(1002, 300, 300)])
    big_herd_sim.select_deterrent("thorns")
    logger.append_herd(big_herd_sim, notes="check")

    with open(herds, newline="") as f:
        (row,) = list(csv.DictReader(f))
    assert row["session_id"] == logger.session_id
    assert float(row["x_min"]) == 100.0 and float(row["x_max"]) == 300.0
    assert row["notes"] == "check"
    with open(cues, newline="") as f:
        (cue,) = list(csv.DictReader(f))
    assert cue["cue"] == "deterrent_picked"
    assert cue["detail"] == "kind=thorns"


def test_quantiles_empty_is_nan():
    q = HerdCsvLogger._quantiles([])
    assert np.isnan(q["x_median"])
    assert HerdCsvLogger._quantiles([5.0])["x_q75"] == 5.0


def test_recorder_saves_npz(tmp_path, big_herd_sim, capsys):
    rec = Recorder(enabled=False, stride_steps=1)
    rec.toggle()
    for _ in range(130):
        big_herd_sim.tick()
        rec.maybe_capture(big_herd_sim)
    out = rec.save_npz(str(tmp_path / "run.npz"))
    data = np.load(out)
    assert data["pos"].shape == (130, 1, 2)
    assert data["level_herd_tick"][-1][2] == 130
    assert "[Recorder] saved" in capsys.readouterr().out


def test_recorder_nothing_to_save():
    assert Recorder().save_npz() is None


class TestCli:
    def test_parse_placement(self):
        assert parse_placement("thorns:400:250.5") == ("thorns", 400.0, 250.5)
        with pytest.raises(argparse.ArgumentTypeError):
            parse_placement("thorns:400")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_placement("thorns:x:y")

    def test_apply_placements_skips_invalid(self, big_herd_sim):
        n = apply_placements(big_herd_sim, [("thorns", 400, 300), ("moat", 500, 300), ("trench", 600, 300)])
        assert n == 1

    def test_autopilot_plays_campaign(self, tmp_path, catalog, capsys):
        sim = Simulation(levels=[level(1)], catalog=catalog, seed=11)
        csv_path = str(tmp_path / "herds.csv")
        ticks = autopilot(sim, [("thorns", 600, 80)], 20_000, csv_path)
        assert 0 < ticks < 20_000
        assert sim.state.game_state == WON
        out = capsys.readouterr().out
        assert "[level] 1: Test Level (placed 1/1" in out
        with open(csv_path, newline="") as f:
            assert list(csv.DictReader(f))[-1]["game_state"] == WON


class TestLauncher:
    def _log(self, path, sids):
        fresh = not os.path.exists(path)
        with open(path, "a", newline="") as f:
            w = csv.DictWriter(f, fieldnames=["session_id", "tick"])
            if fresh:
                w.writeheader()
            for i, sid in enumerate(sids):
                w.writerow({"session_id": sid, "tick": i})

    def test_picks_sessions_appended_after_launch(self, tmp_path):
        from run_sim_then_analyze import count_rows, new_session_ids
        herds = str(tmp_path / "ui_herds.csv")
        self._log(herds, ["old1", "old1", "old2"])
        before = count_rows(herds)
        assert before == 3
        self._log(herds, ["new", "new"])
        assert new_session_ids(herds, before) == ["new"]
        assert new_session_ids(str(tmp_path / "missing.csv"), 0) == []

    def test_ui_command_passes_configs_through(self):
        from run_sim_then_analyze import ui_command
        args = argparse.Namespace(levels="a.json", deterrents="b.json", seed=3, log_level=None)
        cmd = ui_command(args)
        assert cmd[-6:] == ["--levels", "a.json", "--deterrents", "b.json", "--seed", "3"]
