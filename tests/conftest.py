"""Shared fixtures for the galaxyho test suite."""

from __future__ import annotations

import pytest
from pygame.math import Vector3

from galaxyho.models.galaxy import SpectralClass, Star, generate_galaxy
from galaxyho.models.state import create_state
from galaxyho.models.system import Atmosphere, Planet, PlanetType, generate_planets
from galaxyho.models.upgrades import UpgradeCategory


@pytest.fixture(scope="session")
def galaxy42():
    return generate_galaxy(42)


@pytest.fixture
def state():
    return create_state(42)


def with_upgrades(state, engines=0, sensors=0, fuel_systems=0, comms=0):
    state.upgrades = {
        UpgradeCategory.ENGINES: engines,
        UpgradeCategory.SENSORS: sensors,
        UpgradeCategory.FUEL_SYSTEMS: fuel_systems,
        UpgradeCategory.COMMS: comms,
    }
    return state


def make_star(star_id=0, x=0.0, y=0.0, z=0.0, **kwargs) -> Star:
    fields = dict(
        name="Testar",
        spectral_class=SpectralClass.G,
        planet_count=5,
        seed=12345,
    )
    fields.update(kwargs)
    return Star(id=star_id, position=Vector3(x, y, z), **fields)


def make_planet(planet_id=0, **kwargs) -> Planet:
    fields = dict(
        name=f"Testar {planet_id}",
        type=PlanetType.TERRAN,
        size=5,
        habitability=70,
        metal_richness=40,
        atmosphere=Atmosphere.STANDARD,
        has_rings=False,
        special=None,
        seed=1000 + planet_id,
        visual_size=0.5,
        orbit_radius=15.0 + 5.0 * planet_id,
        orbit_speed=0.3 / (1 + planet_id),
        orbit_phase=0.0,
    )
    fields.update(kwargs)
    return Planet(id=planet_id, **fields)


@pytest.fixture
def home_planets(galaxy42):
    return generate_planets(galaxy42.stars[0])
