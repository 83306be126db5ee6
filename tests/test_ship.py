"""In-system flight state machine."""

import logging
import math

import pytest

from conftest import make_planet
from galaxyho.constants import DEFAULT_GM, DOCKED_ORBIT_MULT, FALLBACK_ORBIT_RADIUS, PARKING_ORBIT_BUFFER
from galaxyho.models.ship import (
    Arrival,
    FlightState,
    ShipFlight,
    find_slingshot_body,
    gravitational_parameter,
    parking_radius,
)

DT = 1 / 30


@pytest.fixture
def planets():
    return [make_planet(i, orbit_phase=i * 1.3) for i in range(4)]  # radii 15, 20, 25, 30


def _fly(ship, planet, start=0.0, limit=200.0, speed_mult=1.0):
    """Step until arrival; returns (arrival, states seen in order)."""
    assert ship.fly_to_planet(planet, start, speed_mult=speed_mult)
    seen = [ship.state]
    t = start
    while t < start + limit:
        t += DT
        arrival = ship.update(t, DT)
        if ship.state is not seen[-1]:
            seen.append(ship.state)
        if arrival is not None:
            return arrival, seen, t
    raise AssertionError(f"no arrival, stuck in {ship.state}")


# ── Helpers ──

def test_gravitational_parameter(planets):
    assert gravitational_parameter(planets) == pytest.approx(0.3 ** 2 * 15.0 ** 3)
    assert gravitational_parameter([]) == DEFAULT_GM


def test_parking_radius(planets):
    assert parking_radius(planets) == 30.0 + PARKING_ORBIT_BUFFER
    assert parking_radius([]) == FALLBACK_ORBIT_RADIUS


def test_slingshot_body_is_closest_to_midpoint(planets):
    body = find_slingshot_body(planets, 15.0, 30.0, exclude=(0, 3))
    assert body.id == 1  # 20 and 25 tie at 2.5; lower id wins
    assert find_slingshot_body(planets, 36.0, 15.0, exclude=(0,)).id == 2
    assert find_slingshot_body(planets, 15.0, 20.0) is None


# ── Idle states ──

def test_starts_parked(planets):
    ship = ShipFlight(planets)
    assert ship.state is FlightState.PARKING
    assert not ship.is_flying
    assert ship.docked_planet_id is None
    assert ship.position.length() == pytest.approx(36.0)


def test_parking_orbit_advances(planets):
    ship = ShipFlight(planets)
    before = ship.angle
    ship.update(1.0, 1.0)
    assert ship.angle > before
    assert ship.radius == pytest.approx(36.0)
    assert isinstance(ship.heading, float)


def test_empty_system_parks_at_fallback_radius():
    ship = ShipFlight([])
    assert ship.radius == FALLBACK_ORBIT_RADIUS
    assert ship.mu == DEFAULT_GM
    ship.update(0.5, 0.5)
    assert ship.position.length() == pytest.approx(FALLBACK_ORBIT_RADIUS)


def test_starts_docked(planets):
    ship = ShipFlight(planets, docked_planet_id=2, time=5.0)
    assert ship.state is FlightState.DOCKED
    assert ship.docked_planet_id == 2
    centre = planets[2].position_at(5.0)
    pos = ship.position
    planar = math.hypot(pos.x - centre.x, pos.z - centre.y)
    assert planar == pytest.approx(planets[2].visual_size * DOCKED_ORBIT_MULT)


def test_docked_ship_tracks_planet_orbit(planets):
    ship = ShipFlight(planets, docked_planet_id=1)
    ship.update(10.0, 10.0)
    assert ship.angle == pytest.approx(planets[1].angle_at(10.0))
    assert ship.radius == planets[1].orbit_radius


def test_unknown_docked_planet_parks(planets):
    ship = ShipFlight(planets, docked_planet_id=42)
    assert ship.state is FlightState.PARKING


# ── Flight requests ──

def test_cannot_fly_to_current_dock(planets):
    ship = ShipFlight(planets, docked_planet_id=1)
    assert not ship.fly_to_planet(planets[1])
    assert ship.state is FlightState.DOCKED


def test_second_request_rejected_in_transit(planets):
    ship = ShipFlight(planets)
    assert ship.fly_to_planet(planets[0])
    assert ship.is_flying
    assert not ship.fly_to_planet(planets[1])
    assert ship.target_planet_id == 0


def test_inbound_flight_from_parking_docks(planets):
    ship = ShipFlight(planets)
    arrival, seen, t = _fly(ship, planets[0])
    assert isinstance(arrival, Arrival)
    assert arrival.planet_id == 0
    assert seen == [
        FlightState.BURN_DEPART,
        FlightState.TRANSFER,
        FlightState.BURN_ARRIVE,
        FlightState.APPROACH,
        FlightState.DOCKED,
    ]
    assert ship.docked_planet_id == 0
    assert not ship.is_flying
    centre = planets[0].position_at(t)
    assert math.hypot(ship.position.x - centre.x, ship.position.z - centre.y) < 1.0


def test_outbound_flight_between_planets(planets):
    ship = ShipFlight(planets, docked_planet_id=0)
    arrival, seen, _ = _fly(ship, planets[3])
    assert arrival.planet_id == 3
    assert seen[0] is FlightState.BURN_DEPART
    assert seen[-1] is FlightState.DOCKED
    assert ship.radius == pytest.approx(planets[3].orbit_radius)


def test_can_fly_again_after_docking(planets):
    ship = ShipFlight(planets)
    _fly(ship, planets[1])
    arrival, _, _ = _fly(ship, planets[2], start=300.0)
    assert arrival.planet_id == 2


def test_transfer_uses_slingshot_body_when_available(planets):
    ship = ShipFlight(planets)
    ship.fly_to_planet(planets[0], 0.0)
    t = 0.0
    while ship.state is not FlightState.TRANSFER:
        t += DT
        ship.update(t, DT)
    assert ship.transfer.slingshot_id == 2
    assert ship.transfer.control_points is not None
    assert not ship.transfer.outbound


def test_flight_without_intermediate_planets(planets):
    ship = ShipFlight(planets[:1])
    arrival, _, _ = _fly(ship, planets[0])
    assert arrival.planet_id == 0


def test_transfer_departs_with_vis_viva_speed(planets):
    ship = ShipFlight(planets)
    ship.fly_to_planet(planets[0], 0.0)
    t = 0.0
    while ship.state is not FlightState.TRANSFER:
        t += DT
        ship.update(t, DT)
    tr = ship.transfer
    a = (tr.r_from + tr.r_to) / 2
    expected = math.sqrt(tr.mu * (2 / tr.r_from - 1 / a))
    circular = math.sqrt(tr.mu / tr.r_from)
    assert tr.vel.length() == pytest.approx(expected, rel=0.1)
    assert tr.vel.length() < circular


def test_faster_engines_still_arrive(planets):
    ship = ShipFlight(planets)
    arrival, _, _ = _fly(ship, planets[2], speed_mult=1.5)
    assert arrival.planet_id == 2


def test_stalled_transfer_is_forced_to_arrive(planets, monkeypatch, caplog):
    monkeypatch.setattr("galaxyho.models.ship.TRANSFER_TIMEOUT_MULT", 0.05)
    ship = ShipFlight(planets)
    with caplog.at_level(logging.WARNING, logger="galaxyho.models.ship"):
        arrival, seen, _ = _fly(ship, planets[0])
    assert arrival.timed_out
    assert arrival.planet_id == 0
    assert seen[-1] is FlightState.DOCKED
    assert ship.docked_planet_id == 0
    assert "timed out" in caplog.text


def test_normal_arrival_is_not_timed_out(planets):
    arrival, _, _ = _fly(ShipFlight(planets), planets[0])
    assert not arrival.timed_out
