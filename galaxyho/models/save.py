"""Save / load player state to JSON.

Uses platformdirs for cross-platform save location:
  Linux:   ~/.local/share/galaxyho/save.json
  macOS:   ~/Library/Application Support/galaxyho/save.json
  Windows: C:/Users/.../AppData/Local/galaxyho/save.json

The galaxy and every system are regenerated from the seed; only the
player's mutable state is persisted. Sets are written as sorted lists.
Version 1 saves (camelCase keys, no economy fields, no action map) are
migrated on load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

from ..constants import BASE_FUEL, DEFAULT_GALAXY_SEED, STARTING_DATA
from ..states import View
from .gameplay import get_max_fuel
from .rng import clamp
from .state import JournalEntry, PlanetActions, PlayerState
from .upgrades import MAX_TIER, UpgradeCategory, default_upgrades

logger = logging.getLogger(__name__)

SAVE_VERSION = 2
SAVE_DIR = Path(user_data_dir("galaxyho"))
SAVE_FILE = SAVE_DIR / "save.json"

# Version 1 field names
_LEGACY_KEYS = {
    "galaxySeed": "galaxy_seed",
    "visitedStars": "visited_stars",
    "reachableStars": "reachable_stars",
    "currentView": "current_view",
    "currentStarId": "current_star_id",
    "shipStarId": "ship_star_id",
    "shipPlanetId": "ship_planet_id",
    "scannedPlanets": "scanned_planets",
    "planetActions": "planet_actions",
    "resolvedEvents": "resolved_events",
    "totalScans": "total_scans",
    "totalJumps": "total_jumps",
}

_JOURNAL_CORE = {"kind", "type", "timestamp", "star_id", "starId", "planet_id", "planetId"}


# ── Serialise helpers ─────────────────────────────────────────────────

def _journal_to_dict(entry: JournalEntry) -> dict:
    d = {
        "kind": entry.kind,
        "timestamp": entry.timestamp,
        "star_id": entry.star_id,
        "planet_id": entry.planet_id,
    }
    d.update(entry.details)
    return d


def _journal_from_dict(d: dict) -> JournalEntry:
    return JournalEntry(
        kind=str(d.get("kind", d["type"] if "type" in d else "note")),
        timestamp=float(d.get("timestamp", 0.0)),
        star_id=d.get("star_id", d.get("starId")),
        planet_id=d.get("planet_id", d.get("planetId")),
        details={k: v for k, v in d.items() if k not in _JOURNAL_CORE},
    )


def _actions_to_dict(actions: PlanetActions) -> dict:
    return {"scanned": actions.scanned, "mined": actions.mined, "explored": actions.explored}


def _actions_from_dict(d: dict) -> PlanetActions:
    return PlanetActions(
        scanned=bool(d.get("scanned", False)),
        mined=bool(d.get("mined", False)),
        explored=bool(d.get("explored", False)),
    )


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return value


def _upgrades_from_dict(d: dict | None) -> dict[UpgradeCategory, int]:
    upgrades = default_upgrades()
    for name, level in (d or {}).items():
        try:
            category = UpgradeCategory(name)
        except ValueError:
            continue
        upgrades[category] = max(0, min(MAX_TIER, int(level)))
    return upgrades


def state_to_dict(state: PlayerState) -> dict:
    """JSON-compatible form of ``state``; sets become sorted lists."""
    return {
        "version": SAVE_VERSION,
        "galaxy_seed": state.galaxy_seed,
        "visited_stars": sorted(state.visited_stars),
        "reachable_stars": sorted(state.reachable_stars),
        "current_view": state.current_view.value,
        "current_star_id": state.current_star_id,
        "ship_star_id": state.ship_star_id,
        "ship_planet_id": state.ship_planet_id,
        "scanned_planets": sorted(state.scanned_planets),
        "planet_actions": {k: _actions_to_dict(a) for k, a in state.planet_actions.items()},
        "journal": [_journal_to_dict(e) for e in state.journal],
        "fuel": state.fuel,
        "data": state.data,
        "upgrades": {c.value: level for c, level in state.upgrades.items()},
        "resolved_events": {k: dict(v) for k, v in state.resolved_events.items()},
        "total_scans": state.total_scans,
        "total_jumps": state.total_jumps,
    }


def _migrate_keys(data: dict) -> dict:
    migrated = dict(data)
    for old, new in _LEGACY_KEYS.items():
        if old in migrated and new not in migrated:
            migrated[new] = migrated.pop(old)
    return migrated


def state_from_dict(data: Any) -> PlayerState | None:
    """Rebuild state from its saved form, or None when the shape is wrong."""
    if not isinstance(data, dict):
        return None
    data = _migrate_keys(data)
    if data.get("reachable_stars") is None or "ship_star_id" not in data:
        return None

    try:
        scanned = {str(k) for k in data.get("scanned_planets") or []}
        state = PlayerState(
            galaxy_seed=int(data.get("galaxy_seed", DEFAULT_GALAXY_SEED)),
            visited_stars={int(i) for i in data.get("visited_stars") or []},
            reachable_stars={int(i) for i in data["reachable_stars"]},
            ship_star_id=int(data["ship_star_id"]),
            ship_planet_id=data.get("ship_planet_id"),
            scanned_planets=scanned,
            fuel=_number(data.get("fuel", BASE_FUEL)),
            data=int(data.get("data", STARTING_DATA)),
            upgrades=_upgrades_from_dict(data.get("upgrades")),
            resolved_events={
                str(k): dict(v) if isinstance(v, dict) else {"success": bool(v)}
                for k, v in (data.get("resolved_events") or {}).items()
            },
            total_scans=int(data.get("total_scans", 0)),
            total_jumps=int(data.get("total_jumps", 0)),
        )
        if state.ship_planet_id is not None:
            state.ship_planet_id = int(state.ship_planet_id)
        state.fuel = clamp(state.fuel, 0, get_max_fuel(state))

        for key, actions in (data.get("planet_actions") or {}).items():
            state.planet_actions[str(key)] = _actions_from_dict(actions)
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Discarding malformed save: %s", exc)
        return None

    # Older saves only tracked scans
    for key in scanned:
        if key not in state.planet_actions:
            state.planet_actions[key] = PlanetActions(scanned=True)
    state.scanned_planets.update(k for k, a in state.planet_actions.items() if a.scanned)

    for raw in data.get("journal") or []:
        try:
            state.journal.append(_journal_from_dict(raw))
        except (ValueError, TypeError, KeyError, AttributeError):
            pass  # Skip unreadable log lines

    # Visual state is never resumed
    state.current_view = View.GALAXY
    state.current_star_id = None
    return state


# ── Public API ────────────────────────────────────────────────────────

def save_state(state: PlayerState, path: Path | None = None) -> dict:
    """Write ``state`` to disk and return the serialized form."""
    path = path or SAVE_FILE
    data = state_to_dict(state)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("Saved state to %s", path)
    return data


def load_state(path: Path | None = None) -> PlayerState | None:
    """Read a save. Returns None if it is missing or unusable."""
    path = path or SAVE_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as exc:
        logger.warning("Could not read save %s: %s", path, exc)
        return None

    state = state_from_dict(data)
    if state is None:
        logger.warning("Save at %s has an incompatible format; starting fresh", path)
    return state


def has_save(path: Path | None = None) -> bool:
    """Check if a save file exists."""
    return (path or SAVE_FILE).exists()


def delete_save(path: Path | None = None) -> None:
    """Remove the save file if it exists."""
    path = path or SAVE_FILE
    if path.exists():
        path.unlink()
