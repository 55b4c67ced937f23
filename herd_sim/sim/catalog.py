# herd_sim/sim/catalog.py
"""
Level + deterrent catalogs.

Both catalogs are plain JSON files:

    levels.json      {"levels": [{"name", "farms", "houses", "herds": [{"elephants"}]}]}
    deterrents.json  {"deterrents": {type: {"name", "cost", "effectiveness",
                                            "duration", "range", "size",
                                            "blocking", "unlockLevel",
                                            "description"}}}

A missing or malformed file never stops the simulation: the loaders log the
problem and fall back to the built-in single-level defaults below.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
import json
import logging
import os

from .errors import ConfigurationMissing, UnknownDeterrentType

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class HerdSpec:
    elephants: int

@dataclass(frozen=True)
class LevelSpec:
    name: str
    farms: int
    houses: int
    herds: tuple

@dataclass(frozen=True)
class DeterrentSpec:
    kind: str
    name: str
    cost: int
    effectiveness: float
    duration: float      # ms
    range: float
    size: float = 40.0
    blocking: bool = False
    unlock_level: int = 1
    description: str = ""

DEFAULT_LEVELS: List[LevelSpec] = [
    LevelSpec(name="Default Level", farms=4, houses=2,
              herds=(HerdSpec(8), HerdSpec(10), HerdSpec(12))),
]

DEFAULT_DETERRENTS: Dict[str, DeterrentSpec] = {
    "thorny_bush": DeterrentSpec(kind="thorny_bush", name="Thorny Bush", cost=20,
                                 effectiveness=50, duration=200000, range=50,
                                 unlock_level=1),
}


class DeterrentCatalog:
    def __init__(self, specs: Dict[str, DeterrentSpec]):
        self._specs = dict(specs)

    def get(self, kind: str) -> DeterrentSpec:
        try:
            return self._specs[kind]
        except KeyError:
            raise UnknownDeterrentType(kind) from None

    def kinds(self) -> List[str]:
        return list(self._specs.keys())

    def available(self, level_index: int) -> List[DeterrentSpec]:
        """Types unlocked at (0-based) level_index."""
        return [s for s in self._specs.values() if s.unlock_level <= level_index + 1]

    def newly_unlocked(self, level_index: int) -> List[DeterrentSpec]:
        return [s for s in self._specs.values() if s.unlock_level == level_index + 1]

    def __contains__(self, kind: str) -> bool:
        return kind in self._specs

    def __len__(self) -> int:
        return len(self._specs)


# ---------------- parsing ----------------
def _read_json(path: Optional[str]) -> dict:
    if not path or not os.path.exists(path):
        raise ConfigurationMissing(f"config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:   # JSONDecodeError, UnicodeDecodeError
        raise ConfigurationMissing(f"could not read {path}: {e}") from e

def parse_levels(raw: dict) -> List[LevelSpec]:
    if not isinstance(raw, dict) or not isinstance(raw.get("levels"), list) or not raw["levels"]:
        raise ConfigurationMissing("levels config has no 'levels' list")
    levels: List[LevelSpec] = []
    for i, lv in enumerate(raw["levels"]):
        try:
            herds = tuple(HerdSpec(int(h["elephants"])) for h in lv["herds"])
            if not herds:
                raise ValueError("level has no herds")
            levels.append(LevelSpec(
                name=str(lv.get("name", f"Level {i + 1}")),
                farms=int(lv["farms"]),
                houses=int(lv["houses"]),
                herds=herds,
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationMissing(f"level {i + 1} is malformed: {e}") from e
    return levels

def parse_deterrents(raw: dict) -> Dict[str, DeterrentSpec]:
    if not isinstance(raw, dict) or not isinstance(raw.get("deterrents"), dict) or not raw["deterrents"]:
        raise ConfigurationMissing("deterrents config has no 'deterrents' table")
    specs: Dict[str, DeterrentSpec] = {}
    for kind, d in raw["deterrents"].items():
        try:
            duration = d["duration"] if "duration" in d else d["duration_ms"]
            specs[kind] = DeterrentSpec(
                kind=kind,
                name=str(d.get("name", kind)),
                cost=int(d["cost"]),
                effectiveness=max(0.0, min(100.0, float(d["effectiveness"]))),
                duration=float(duration),
                range=float(d["range"]),
                size=float(d.get("size", 40.0)),
                blocking=bool(d.get("blocking", False)),
                unlock_level=int(d.get("unlockLevel", 1)),
                description=str(d.get("description", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationMissing(f"deterrent {kind!r} is malformed: {e}") from e
    return specs


# ---------------- public loaders (with fallback) ----------------
def load_levels(path: Optional[str]) -> List[LevelSpec]:
    try:
        levels = parse_levels(_read_json(path))
    except ConfigurationMissing as e:
        log.warning("Failed to load levels configuration (%s); using built-in default level", e)
        return list(DEFAULT_LEVELS)
    log.info("Loaded %d levels from %s", len(levels), path)
    return levels

def load_deterrents(path: Optional[str]) -> DeterrentCatalog:
    try:
        specs = parse_deterrents(_read_json(path))
    except ConfigurationMissing as e:
        log.warning("Failed to load deterrents configuration (%s); using built-in default catalog", e)
        return DeterrentCatalog(DEFAULT_DETERRENTS)
    log.info("Loaded %d deterrent types from %s", len(specs), path)
    return DeterrentCatalog(specs)
