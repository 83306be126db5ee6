"""Mutable player state: the only thing that is ever saved."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..constants import BASE_FUEL, DEFAULT_GALAXY_SEED, STARTING_DATA
from ..states import View
from .upgrades import UpgradeCategory, default_upgrades

if TYPE_CHECKING:
    from .galaxy import Galaxy


@dataclass
class PlanetActions:
    """Which one-shot actions have been completed on a planet."""

    scanned: bool = False
    mined: bool = False
    explored: bool = False


@dataclass
class JournalEntry:
    """A narrated log line; ``details`` holds kind-specific fields."""

    kind: str  # "start", "jump", "enter_system", "scan_planet", "discovery", ...
    timestamp: float
    star_id: int | None = None
    planet_id: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class PlayerState:
    galaxy_seed: int
    visited_stars: set[int] = field(default_factory=set)
    reachable_stars: set[int] = field(default_factory=lambda: {0})
    current_view: View = View.GALAXY
    current_star_id: int | None = None
    ship_star_id: int = 0
    ship_planet_id: int | None = None
    scanned_planets: set[str] = field(default_factory=set)
    planet_actions: dict[str, PlanetActions] = field(default_factory=dict)
    journal: list[JournalEntry] = field(default_factory=list)
    fuel: float = BASE_FUEL
    data: int = STARTING_DATA
    upgrades: dict[UpgradeCategory, int] = field(default_factory=default_upgrades)
    resolved_events: dict[str, dict[str, Any]] = field(default_factory=dict)
    total_scans: int = 0
    total_jumps: int = 0

    def actions_for(self, key: str) -> PlanetActions:
        """Action record for a planet key, created on first access."""
        if key not in self.planet_actions:
            self.planet_actions[key] = PlanetActions()
        return self.planet_actions[key]

    def add_journal(
        self,
        kind: str,
        star_id: int | None = None,
        planet_id: int | None = None,
        **details: Any,
    ) -> JournalEntry:
        entry = JournalEntry(kind, time.time(), star_id, planet_id, details)
        self.journal.append(entry)
        return entry


def create_state(seed: int = DEFAULT_GALAXY_SEED) -> PlayerState:
    """Fresh state for a new game on galaxy ``seed``."""
    return PlayerState(galaxy_seed=seed)


def ensure_home_reachable(state: PlayerState, galaxy: Galaxy) -> None:
    """Restore the reachability invariant and sync galaxy visited flags."""
    if not galaxy.stars:
        return
    state.reachable_stars.add(0)
    state.reachable_stars.update(galaxy.stars[0].adjacent_ids)
    for star_id in state.visited_stars:
        if 0 <= star_id < len(galaxy.stars):
            star = galaxy.stars[star_id]
            star.visited = True
            state.reachable_stars.update(star.adjacent_ids)
