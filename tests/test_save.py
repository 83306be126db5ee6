"""Save / load of player state."""

import json

import pytest

from galaxyho.constants import BASE_FUEL, DEFAULT_GALAXY_SEED
from galaxyho.models.gameplay import get_max_fuel
from galaxyho.models.save import (
    SAVE_VERSION,
    delete_save,
    has_save,
    load_state,
    save_state,
    state_from_dict,
    state_to_dict,
)
from galaxyho.models.state import PlanetActions, create_state
from galaxyho.models.upgrades import UpgradeCategory
from galaxyho.states import View


def _played_state():
    state = create_state(99)
    state.visited_stars = {0, 5, 3}
    state.reachable_stars = {0, 1, 3, 5, 8}
    state.ship_star_id = 5
    state.ship_planet_id = 2
    state.scanned_planets = {"5-2", "0-1"}
    state.planet_actions = {
        "5-2": PlanetActions(scanned=True, mined=True),
        "0-1": PlanetActions(scanned=True, explored=True),
    }
    state.fuel = 42.5
    state.data = 77
    state.upgrades[UpgradeCategory.ENGINES] = 2
    state.resolved_events = {"5-2": {"template_id": "derelict_ship", "choice": 1, "success": True}}
    state.total_scans = 2
    state.total_jumps = 3
    state.current_view = View.SYSTEM
    state.current_star_id = 5
    state.add_journal("jump", star_id=5, from_star=3, distance=12.3)
    return state


def test_sets_become_sorted_lists():
    data = state_to_dict(_played_state())
    assert data["version"] == SAVE_VERSION
    assert data["visited_stars"] == [0, 3, 5]
    assert data["reachable_stars"] == [0, 1, 3, 5, 8]
    assert data["scanned_planets"] == ["0-1", "5-2"]
    assert data["upgrades"]["engines"] == 2
    json.dumps(data)


def test_save_and_load_restores_progress(tmp_path):
    path = tmp_path / "save.json"
    original = _played_state()
    save_state(original, path)
    loaded = load_state(path)

    assert loaded.galaxy_seed == 99
    assert loaded.visited_stars == {0, 3, 5}
    assert loaded.reachable_stars == original.reachable_stars
    assert loaded.ship_star_id == 5
    assert loaded.ship_planet_id == 2
    assert loaded.planet_actions == original.planet_actions
    assert loaded.fuel == 42.5
    assert loaded.data == 77
    assert loaded.upgrades == original.upgrades
    assert loaded.resolved_events == original.resolved_events
    assert (loaded.total_scans, loaded.total_jumps) == (2, 3)
    assert loaded.journal[0].kind == "jump"
    assert loaded.journal[0].details == {"from_star": 3, "distance": 12.3}


def test_view_is_reset_on_load():
    loaded = state_from_dict(state_to_dict(_played_state()))
    assert loaded.current_view is View.GALAXY
    assert loaded.current_star_id is None


def test_missing_file(tmp_path):
    path = tmp_path / "none.json"
    assert load_state(path) is None
    assert not has_save(path)


def test_corrupt_json_is_ignored(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json")
    assert load_state(path) is None


def test_undecodable_bytes_are_ignored(tmp_path):
    path = tmp_path / "save.json"
    path.write_bytes(b'{"reachable_stars": [0], "ship_star_id": 0, "x": "\xff\xfe"}')
    assert load_state(path) is None


@pytest.mark.parametrize("fuel, expected", [(5000, 100), (-20, 0), (55.5, 55.5)])
def test_loaded_fuel_is_clamped(fuel, expected):
    state = state_from_dict({"reachable_stars": [0], "ship_star_id": 0, "fuel": fuel})
    assert state.fuel == expected


def test_loaded_fuel_cap_follows_upgrades():
    state = state_from_dict({
        "reachable_stars": [0],
        "ship_star_id": 0,
        "fuel": 5000,
        "upgrades": {"fuel_systems": 1},
    })
    assert state.fuel == get_max_fuel(state)
    assert state.fuel > 100


def test_wrong_shape_is_rejected(tmp_path):
    assert state_from_dict([1, 2, 3]) is None
    assert state_from_dict({"ship_star_id": 0}) is None
    assert state_from_dict({"reachable_stars": [0]}) is None
    assert state_from_dict({"reachable_stars": None, "ship_star_id": 0}) is None
    assert state_from_dict({"reachable_stars": [0], "ship_star_id": 0, "fuel": "lots"}) is None

    path = tmp_path / "save.json"
    path.write_text(json.dumps({"hello": "world"}))
    assert load_state(path) is None


def test_minimal_save_gets_defaults():
    state = state_from_dict({"reachable_stars": [0, 2], "ship_star_id": 0})
    assert state.galaxy_seed == DEFAULT_GALAXY_SEED
    assert state.fuel == BASE_FUEL
    assert state.data == 0
    assert all(level == 0 for level in state.upgrades.values())
    assert state.resolved_events == {}
    assert state.planet_actions == {}
    assert (state.total_scans, state.total_jumps) == (0, 0)


def test_version_one_save_is_migrated():
    legacy = {
        "galaxySeed": 7,
        "visitedStars": [0, 4],
        "reachableStars": [0, 1, 4],
        "currentView": "system",
        "currentStarId": 4,
        "shipStarId": 4,
        "shipPlanetId": 1,
        "scannedPlanets": ["4-1", "0-0"],
        "journal": [{"type": "scan_planet", "starId": 4, "planetId": 1, "timestamp": 10}],
    }
    state = state_from_dict(legacy)
    assert state.galaxy_seed == 7
    assert state.visited_stars == {0, 4}
    assert state.ship_star_id == 4
    assert state.ship_planet_id == 1
    assert state.planet_actions["4-1"] == PlanetActions(scanned=True, mined=False, explored=False)
    assert state.planet_actions["0-0"].scanned
    assert state.current_view is View.GALAXY
    assert state.journal[0].kind == "scan_planet"
    assert state.journal[0].star_id == 4


def test_backfill_keeps_existing_actions():
    state = state_from_dict({
        "reachable_stars": [0],
        "ship_star_id": 0,
        "scanned_planets": ["0-1"],
        "planet_actions": {"0-1": {"scanned": True, "mined": True}, "0-2": {"scanned": True}},
    })
    assert state.planet_actions["0-1"].mined
    assert state.scanned_planets == {"0-1", "0-2"}


def test_upgrade_levels_are_clamped_and_unknowns_dropped():
    state = state_from_dict({
        "reachable_stars": [0],
        "ship_star_id": 0,
        "upgrades": {"engines": 9, "sensors": -2, "warp": 3},
    })
    assert state.upgrades[UpgradeCategory.ENGINES] == 3
    assert state.upgrades[UpgradeCategory.SENSORS] == 0
    assert len(state.upgrades) == len(UpgradeCategory)


def test_unreadable_journal_lines_are_skipped():
    state = state_from_dict({
        "reachable_stars": [0],
        "ship_star_id": 0,
        "journal": [{"kind": "jump", "timestamp": 1}, "garbage", {"kind": "scan_planet", "timestamp": "x"}],
    })
    assert [e.kind for e in state.journal] == ["jump"]


def test_has_and_delete_save(tmp_path):
    path = tmp_path / "nested" / "save.json"
    save_state(create_state(), path)
    assert has_save(path)
    delete_save(path)
    assert not has_save(path)
    delete_save(path)
