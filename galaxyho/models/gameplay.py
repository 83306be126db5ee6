"""Fuel and data economy.

Everything here is a pure function of a ``PlayerState`` snapshot, or a
mutator that keeps ``state.fuel`` inside ``[0, get_max_fuel(state)]``.
Per-planet rolls are seeded from the planet's seed plus a fixed salt, so a
planet always yields the same amount for the same purpose.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import (
    BASE_MAX_FUEL,
    BASE_REGEN_RATE,
    DEFAULT_PLANET_FUEL,
    EXPLORE_DATA_REWARD,
    FUEL_PER_LY,
    LOW_FUEL_THRESHOLD,
    MINING_DATA_REWARD,
    SCAN_DATA_REWARD,
)
from .galaxy import Star, star_distance
from .rng import Mulberry32, clamp, hash_int, lerp, round_half_up
from .system import Planet, PlanetType
from .upgrades import UpgradeCategory

if TYPE_CHECKING:
    from .state import PlayerState

# Roll salts
FUEL_SALT = 8888
SCAN_SALT = 7777
MINING_SALT = 6666
EXPLORE_SALT = 5555

FUEL_BY_PLANET_TYPE: dict[PlanetType, tuple[int, int]] = {
    PlanetType.TERRAN: (3, 7),
    PlanetType.DESERT: (2, 5),
    PlanetType.ICE: (4, 9),
    PlanetType.GAS_GIANT: (6, 12),
    PlanetType.LAVA: (3, 8),
    PlanetType.OCEAN: (4, 8),
    PlanetType.WATER: (5, 10),
}


@dataclass
class UpgradeEffects:
    """Folded modifiers of every owned upgrade tier."""

    fuel_cost_mult: float = 1.0
    jump_range: int = 1
    system_speed_mult: float = 1.0
    reveal_events: bool = False
    success_rate_bonus: float = 0.0
    orbital_scan: bool = False
    max_fuel_mult: float = 1.0
    fuel_gain_mult: float = 1.0
    solar_regen: bool = False
    regen_rate: float = 0.0
    diplomacy: bool = False
    data_gain_mult: float = 1.0
    beacon_network: bool = False


def get_upgrade_effects(state: PlayerState) -> UpgradeEffects:
    """Lower tiers keep applying once a higher tier is owned."""
    e = UpgradeEffects()
    upgrades = getattr(state, "upgrades", None)
    if not upgrades:
        return e

    engines = upgrades.get(UpgradeCategory.ENGINES, 0)
    sensors = upgrades.get(UpgradeCategory.SENSORS, 0)
    fuel_systems = upgrades.get(UpgradeCategory.FUEL_SYSTEMS, 0)
    comms = upgrades.get(UpgradeCategory.COMMS, 0)

    if engines >= 1:
        e.fuel_cost_mult *= 0.75
    if engines >= 2:
        e.jump_range = 2
    if engines >= 3:
        e.fuel_cost_mult *= 0.67
        e.system_speed_mult = 1.5

    if sensors >= 1:
        e.reveal_events = True
    if sensors >= 2:
        e.success_rate_bonus += 0.10
    if sensors >= 3:
        e.orbital_scan = True

    if fuel_systems >= 1:
        e.max_fuel_mult = 1.5
    if fuel_systems >= 2:
        e.fuel_gain_mult = 1.5
    if fuel_systems >= 3:
        e.solar_regen = True
        e.regen_rate = 0.5

    if comms >= 1:
        e.diplomacy = True
    if comms >= 2:
        e.data_gain_mult = 1.3
    if comms >= 3:
        e.beacon_network = True
    return e


# ---------------------------------------------------------------------------
# Fuel
# ---------------------------------------------------------------------------

def get_max_fuel(state: PlayerState) -> int:
    return round_half_up(BASE_MAX_FUEL * get_upgrade_effects(state).max_fuel_mult)


def calculate_jump_fuel_cost(from_star: Star, to_star: Star, state: PlayerState) -> int:
    dist = star_distance(from_star, to_star)
    return round_half_up(dist * FUEL_PER_LY * get_upgrade_effects(state).fuel_cost_mult)


def can_jump(from_star: Star, to_star: Star, state: PlayerState) -> bool:
    return state.fuel >= calculate_jump_fuel_cost(from_star, to_star, state)


def consume_fuel(amount: float, state: PlayerState) -> None:
    state.fuel = clamp(state.fuel - amount, 0, get_max_fuel(state))


def add_fuel(amount: float, state: PlayerState) -> None:
    state.fuel = clamp(state.fuel + amount, 0, get_max_fuel(state))


def is_low_fuel(state: PlayerState) -> bool:
    return state.fuel <= LOW_FUEL_THRESHOLD


def update_solar_regen(delta_time: float, state: PlayerState) -> None:
    """Passive stellar absorption, capped at max fuel."""
    effects = get_upgrade_effects(state)
    rate = effects.regen_rate if effects.solar_regen else BASE_REGEN_RATE
    state.fuel = min(get_max_fuel(state), state.fuel + rate * delta_time)


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

def add_data(amount: float, state: PlayerState) -> None:
    state.data += round_half_up(amount * get_upgrade_effects(state).data_gain_mult)


# ---------------------------------------------------------------------------
# Deterministic per-planet rolls
# ---------------------------------------------------------------------------

def get_fuel_for_planet_type(planet_type: PlanetType | str) -> tuple[int, int]:
    try:
        return FUEL_BY_PLANET_TYPE[PlanetType(planet_type)]
    except ValueError:
        return DEFAULT_PLANET_FUEL


def _roll(planet: Planet, salt: int) -> float:
    return Mulberry32(hash_int(planet.seed, salt)).random()


def roll_planet_fuel(planet: Planet) -> int:
    lo, hi = get_fuel_for_planet_type(planet.type)
    return round_half_up(lerp(lo, hi, _roll(planet, FUEL_SALT)))


def roll_scan_data(planet: Planet) -> int:
    lo, hi = SCAN_DATA_REWARD
    return round_half_up(lerp(lo, hi, _roll(planet, SCAN_SALT)))


def roll_mining_yield(planet: Planet) -> int:
    """Data from mining; metal-rich worlds yield more, never less than 1."""
    lo, hi = MINING_DATA_REWARD
    base = lerp(lo, hi, _roll(planet, MINING_SALT))
    return max(1, round_half_up(base * (0.5 + planet.metal_richness / 100)))


def roll_explore_data(planet: Planet) -> int:
    lo, hi = EXPLORE_DATA_REWARD
    return round_half_up(lerp(lo, hi, _roll(planet, EXPLORE_SALT)))
