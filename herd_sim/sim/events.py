# herd_sim/sim/events.py
from __future__ import annotations
from typing import Callable, List, Tuple
import logging

log = logging.getLogger(__name__)

# discrete cues for audio / UI collaborators
GAME_START = "game_start"
LEVEL_START = "level_start"
LEVEL_END = "level_end"
DETERRENT_PICKED = "deterrent_picked"
DETERRENT_PLACED = "deterrent_placed"
FARM_DAMAGED = "farm_damaged"
VILLAGER_INTERCEPT = "villager_intercept"
ELEPHANT_SAFE = "elephant_safe"
GAME_WON = "game_won"
GAME_LOST = "game_lost"

ALL_CUES = (
    GAME_START, LEVEL_START, LEVEL_END, DETERRENT_PICKED, DETERRENT_PLACED,
    FARM_DAMAGED, VILLAGER_INTERCEPT, ELEPHANT_SAFE, GAME_WON, GAME_LOST,
)

Listener = Callable[[str, dict], None]


class EventBus:
    """
    Fire-and-forget cue delivery.
    Listeners are called synchronously inside the tick; a failing listener is
    logged and skipped so presentation bugs never stop the simulation.
    Every emitted cue is also kept in `history` (name, payload) for tests/HUD.
    """
    def __init__(self, keep_history: bool = True):
        self._listeners: List[Listener] = []
        self.keep_history = keep_history
        self.history: List[Tuple[str, dict]] = []

    def subscribe(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def unsubscribe(self, fn: Listener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def emit(self, cue: str, **payload) -> None:
        if self.keep_history:
            self.history.append((cue, payload))
        for fn in list(self._listeners):
            try:
                fn(cue, payload)
            except Exception:
                log.exception("cue listener failed for %s", cue)

    def count(self, cue: str) -> int:
        return sum(1 for name, _ in self.history if name == cue)

    def clear(self) -> None:
        self.history.clear()
