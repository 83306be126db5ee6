"""Ship upgrade tree: four categories, three tiers each, paid for in data."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import PlayerState

logger = logging.getLogger(__name__)

MAX_TIER = 3


class UpgradeCategory(enum.Enum):
    ENGINES = "engines"
    SENSORS = "sensors"
    FUEL_SYSTEMS = "fuel_systems"
    COMMS = "comms"


@dataclass(frozen=True)
class UpgradeTier:
    id: str
    label: str
    cost: int
    description: str


@dataclass(frozen=True)
class UpgradeBranch:
    label: str
    icon: str
    tiers: tuple[UpgradeTier, UpgradeTier, UpgradeTier]


UPGRADE_TREE: dict[UpgradeCategory, UpgradeBranch] = {
    UpgradeCategory.ENGINES: UpgradeBranch("Engines", ">>", (
        UpgradeTier("fuel_efficiency", "Fuel Efficiency", 50, "Reduce fuel cost per jump by 25%"),
        UpgradeTier("jump_range", "Extended Range", 120, "Jump to stars 2 hops away"),
        UpgradeTier("warp_mk2", "Warp Mk II", 250, "Further fuel reduction + faster system travel"),
    )),
    UpgradeCategory.SENSORS: UpgradeBranch("Sensors", "((", (
        UpgradeTier("event_preview", "Event Scanner", 40, "See event indicators on planets"),
        UpgradeTier("deep_scan", "Deep Scanner", 100, "+10% success rate on event choices"),
        UpgradeTier("orbital_scan", "Orbital Scan", 200, "Scan planets without flying to them"),
    )),
    UpgradeCategory.FUEL_SYSTEMS: UpgradeBranch("Fuel Systems", "{}", (
        UpgradeTier("tank_expansion", "Tank Expansion", 60, "Increase max fuel by 50%"),
        UpgradeTier("harvest_bonus", "Fuel Harvester", 130, "+50% fuel gained from planets"),
        UpgradeTier("solar_regen", "Solar Collector", 220, "3x faster stellar fuel absorption"),
    )),
    UpgradeCategory.COMMS: UpgradeBranch("Communications", "~=", (
        UpgradeTier("diplomacy", "Diplomacy Suite", 45, "Unlock diplomatic choices in alien events"),
        UpgradeTier("trade_bonus", "Trade Protocols", 110, "+30% data rewards from events and scans"),
        UpgradeTier("beacon_network", "Beacon Network", 240, "Reveal all stars within 2 jumps of visited"),
    )),
}


def default_upgrades() -> dict[UpgradeCategory, int]:
    return {category: 0 for category in UpgradeCategory}


def get_tier(category: UpgradeCategory, tier: int) -> UpgradeTier:
    return UPGRADE_TREE[category].tiers[tier - 1]


def can_purchase(category: UpgradeCategory | str, tier: int, state: PlayerState) -> bool:
    """Whether ``tier`` of ``category`` is the next tier and affordable."""
    try:
        category = UpgradeCategory(category)
    except ValueError:
        return False
    if not 1 <= tier <= MAX_TIER:
        return False
    level = state.upgrades.get(category, 0)
    if level != tier - 1:
        return False
    return state.data >= get_tier(category, tier).cost


def purchase_upgrade(category: UpgradeCategory | str, tier: int, state: PlayerState) -> bool:
    """Buy one tier. Deducts exactly its cost and returns True on success."""
    if not can_purchase(category, tier, state):
        return False
    category = UpgradeCategory(category)
    upgrade = get_tier(category, tier)
    state.data -= upgrade.cost
    state.upgrades[category] = tier
    logger.info("Purchased %s (%s tier %d) for %d data", upgrade.label, category.value, tier, upgrade.cost)
    return True
