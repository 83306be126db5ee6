"""In-system ship flight.

The ship moves through a small state machine::

    parking -> burn_depart -> transfer -> burn_arrive -> approach -> docked
                   ^                                                  |
                   +--------------------------------------------------+

New flights start only from ``parking`` or ``docked``. The transfer leg is
integrated numerically around the star with velocity Verlet sub-steps,
seeded with a vis-viva ellipse and nudged by a guidance term that grows
as the flight nears its nominal duration. Arrival is reported by the
return value of ``update()``.

Coordinates are star-centred and planar (x, z); ``position`` lifts them
into a ``Vector3`` with the docked tilt on y.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from pygame.math import Vector2, Vector3

from ..constants import (
    APPROACH_CATCHUP_RATE,
    BURN_DURATION,
    BURN_RADIUS_DRIFT,
    DEFAULT_GM,
    DOCKED_ORBIT_MULT,
    DOCKED_SPIN,
    DOCKED_TILT,
    FALLBACK_ORBIT_RADIUS,
    GUIDANCE_GAIN,
    MAX_SUBSTEP,
    PARKING_ORBIT_BUFFER,
    PARKING_SPEED,
    PLANET_GRAVITY_FACTOR,
    SLINGSHOT_ENABLED,
    SLINGSHOT_PULL,
    STAR_SOFTENING,
    TRANSFER_TIMEOUT_MULT,
)
from .rng import ease_in_out_cubic
from .system import Planet

logger = logging.getLogger(__name__)


class FlightState(enum.Enum):
    PARKING = "parking"
    BURN_DEPART = "burn_depart"
    TRANSFER = "transfer"
    BURN_ARRIVE = "burn_arrive"
    APPROACH = "approach"
    DOCKED = "docked"


@dataclass
class Transfer:
    """Integration record for the free-flight leg."""

    r_from: float
    r_to: float
    pos: Vector2
    vel: Vector2
    acc: Vector2
    mu: float
    duration: float  # nominal half-ellipse time
    timeout: float
    target_id: int
    outbound: bool
    elapsed: float = 0.0
    slingshot_id: int | None = None
    control_points: tuple[Vector2, Vector2, Vector2] | None = None


@dataclass(frozen=True)
class Arrival:
    planet_id: int
    time: float
    timed_out: bool = False


# ---------------------------------------------------------------------------
# System helpers
# ---------------------------------------------------------------------------

def gravitational_parameter(planets: Sequence[Planet]) -> float:
    """Star GM from the innermost planet's circular orbit (w^2 r^3)."""
    if not planets:
        return DEFAULT_GM
    ref = min(planets, key=lambda p: p.orbit_radius)
    return ref.orbit_speed ** 2 * ref.orbit_radius ** 3


def parking_radius(planets: Sequence[Planet]) -> float:
    if not planets:
        return FALLBACK_ORBIT_RADIUS
    return max(p.orbit_radius for p in planets) + PARKING_ORBIT_BUFFER


def find_slingshot_body(
    planets: Sequence[Planet],
    r_from: float,
    r_to: float,
    exclude: Iterable[int] = (),
) -> Planet | None:
    """Planet strictly between two radii, closest to their midpoint."""
    lo, hi = sorted((r_from, r_to))
    mid = (lo + hi) / 2
    skip = set(exclude)
    candidates = [p for p in planets if p.id not in skip and lo < p.orbit_radius < hi]
    if not candidates:
        return None
    return min(candidates, key=lambda p: (abs(p.orbit_radius - mid), p.id))


def _wrap_angle(a: float) -> float:
    """Map to (-pi, pi]."""
    a = math.fmod(a + math.pi, math.tau)
    if a <= 0:
        a += math.tau
    return a - math.pi


def _bezier(p0: Vector2, p1: Vector2, p2: Vector2, t: float) -> Vector2:
    omt = 1 - t
    return p0 * (omt * omt) + p1 * (2 * omt * t) + p2 * (t * t)


def _polar(radius: float, angle: float) -> Vector2:
    return Vector2(math.cos(angle), math.sin(angle)) * radius


# ---------------------------------------------------------------------------
# Ship
# ---------------------------------------------------------------------------

class ShipFlight:
    """The ship's orbit record and flight state machine for one system."""

    def __init__(
        self,
        planets: Sequence[Planet],
        star_scale: float = 1.0,
        docked_planet_id: int | None = None,
        time: float = 0.0,
    ) -> None:
        self.planets = list(planets)
        self._by_id = {p.id: p for p in self.planets}
        self.mu = gravitational_parameter(self.planets)
        self.parking_radius = parking_radius(self.planets)
        self.softening = STAR_SOFTENING * star_scale

        self.state = FlightState.PARKING
        self.radius = self.parking_radius
        self.angle = 0.0
        self.angular_speed = PARKING_SPEED
        self.dock_angle = 0.0
        self.transfer: Transfer | None = None

        self._docked_id: int | None = None
        self._target: Planet | None = None
        self._speed_mult = 1.0
        self._phase_elapsed = 0.0
        self._burn_start_radius = self.radius
        self._timed_out = False
        self._time = time

        if docked_planet_id is not None and docked_planet_id in self._by_id:
            self._dock(self._by_id[docked_planet_id], time)

    # -- queries ---------------------------------------------------------

    @property
    def is_flying(self) -> bool:
        return self.state not in (FlightState.PARKING, FlightState.DOCKED)

    @property
    def docked_planet_id(self) -> int | None:
        return self._docked_id if self.state is FlightState.DOCKED else None

    @property
    def target_planet_id(self) -> int | None:
        return self._target.id if self._target is not None else None

    @property
    def position(self) -> Vector3:
        if self.state is FlightState.DOCKED:
            planet = self._by_id[self._docked_id]
            centre = planet.position_at(self._time)
            r = planet.visual_size * DOCKED_ORBIT_MULT
            offset = _polar(r, self.dock_angle)
            return Vector3(centre.x + offset.x, r * DOCKED_TILT * math.sin(self.dock_angle), centre.y + offset.y)
        if self.state is FlightState.TRANSFER and self.transfer is not None:
            return Vector3(self.transfer.pos.x, 0.0, self.transfer.pos.y)
        p = _polar(self.radius, self.angle)
        return Vector3(p.x, 0.0, p.y)

    @property
    def heading(self) -> float:
        """Direction of travel in the orbital plane, radians."""
        if self.state is FlightState.TRANSFER and self.transfer is not None:
            v = self.transfer.vel
            if v.length_squared() > 0:
                return math.atan2(v.y, v.x)
        if self.state is FlightState.DOCKED:
            return self.dock_angle + math.pi / 2
        # Prograde tangent
        return self.angle + math.copysign(math.pi / 2, self.angular_speed or 1.0)

    # -- commands --------------------------------------------------------

    def fly_to_planet(self, planet: Planet, time: float = 0.0, speed_mult: float = 1.0) -> bool:
        """Start a flight. Returns False while already in transit."""
        if self.is_flying:
            return False
        if self.state is FlightState.DOCKED and planet.id == self._docked_id:
            return False
        if planet.id not in self._by_id:
            self._by_id[planet.id] = planet
            self.planets.append(planet)

        self._target = planet
        self._speed_mult = max(speed_mult, 1e-6)
        self._docked_id = None
        self._phase_elapsed = 0.0
        self._burn_start_radius = self.radius
        self._time = time
        self.state = FlightState.BURN_DEPART
        logger.debug("Departing r=%.2f for planet %d (r=%.2f)", self.radius, planet.id, planet.orbit_radius)
        return True

    def update(self, time: float, delta_time: float) -> Arrival | None:
        """Advance the ship to ``time``. Returns an Arrival on docking."""
        self._time = time
        dt = max(delta_time, 0.0)
        sim_dt = dt * self._speed_mult if self.is_flying else dt

        if self.state is FlightState.PARKING:
            self.radius = self.parking_radius
            self.angle += self.angular_speed * dt
        elif self.state is FlightState.BURN_DEPART:
            self._update_burn_depart(time, sim_dt)
        elif self.state is FlightState.TRANSFER:
            self._update_transfer(time, dt, sim_dt)
        elif self.state is FlightState.BURN_ARRIVE:
            self._update_burn_arrive(sim_dt)
        elif self.state is FlightState.APPROACH:
            return self._update_approach(time, dt, sim_dt)
        elif self.state is FlightState.DOCKED:
            self._follow_planet(self._by_id[self._docked_id], time)
            self.dock_angle += DOCKED_SPIN * dt
        return None

    # -- phases ----------------------------------------------------------

    def _update_burn_depart(self, time: float, sim_dt: float) -> None:
        target = self._target
        self._phase_elapsed += sim_dt
        self.angle += self.angular_speed * sim_dt
        progress = min(1.0, self._phase_elapsed / BURN_DURATION)
        direction = 1.0 if target.orbit_radius > self._burn_start_radius else -1.0
        self.radius = self._burn_start_radius + direction * BURN_RADIUS_DRIFT * ease_in_out_cubic(progress)
        if progress >= 1.0:
            self._begin_transfer(time)

    def _begin_transfer(self, time: float) -> None:
        target = self._target
        r1 = max(self.radius, 1e-6)
        r2 = target.orbit_radius
        a = (r1 + r2) / 2
        speed = math.sqrt(max(self.mu * (2 / r1 - 1 / a), 0.0))
        duration = math.pi * math.sqrt(a ** 3 / self.mu)

        pos = _polar(r1, self.angle)
        tangent = Vector2(-math.sin(self.angle), math.cos(self.angle))
        transfer = Transfer(
            r_from=r1,
            r_to=r2,
            pos=pos,
            vel=tangent * speed,
            acc=Vector2(),
            mu=self.mu,
            duration=duration,
            timeout=duration * TRANSFER_TIMEOUT_MULT,
            target_id=target.id,
            outbound=r2 > r1,
        )

        body = find_slingshot_body(self.planets, r1, r2, exclude=(target.id,)) if SLINGSHOT_ENABLED else None
        if body is not None:
            mid_time = time + duration / 2 / self._speed_mult
            arrive_time = time + duration / self._speed_mult
            transfer.slingshot_id = body.id
            transfer.control_points = (Vector2(pos), body.position_at(mid_time), target.position_at(arrive_time))
            logger.debug("Slingshot past planet %d", body.id)

        self.transfer = transfer
        transfer.acc = self._acceleration(transfer, transfer.pos, transfer.vel, time)
        self.state = FlightState.TRANSFER

    def _acceleration(self, tr: Transfer, pos: Vector2, vel: Vector2, time: float) -> Vector2:
        # Star, softened near the origin
        d2 = pos.length_squared() + self.softening ** 2
        acc = pos * (-tr.mu / d2 ** 1.5)

        planet_mu = tr.mu * PLANET_GRAVITY_FACTOR
        for planet in self.planets:
            delta = planet.position_at(time) - pos
            d2 = delta.length_squared() + planet.visual_size ** 2
            acc += delta * (planet_mu / d2 ** 1.5)

        frac = min(1.0, tr.elapsed / tr.duration)
        remaining = max(tr.duration - tr.elapsed, 0.1 * tr.duration)
        predicted = self._target.position_at(time + remaining / self._speed_mult)
        acc += ((predicted - pos) / remaining - vel) * (GUIDANCE_GAIN * frac * frac)

        if tr.control_points is not None and frac < 1.0:
            guide = _bezier(*tr.control_points, frac)
            acc += (guide - pos) * (SLINGSHOT_PULL * (1.0 - frac))
        return acc

    def _update_transfer(self, time: float, dt: float, sim_dt: float) -> None:
        tr = self.transfer
        steps = max(1, math.ceil(sim_dt / MAX_SUBSTEP))
        h = sim_dt / steps
        clock = time - dt
        r_prev = tr.pos.length()

        for _ in range(steps):
            tr.vel += tr.acc * (h / 2)
            tr.pos += tr.vel * h
            tr.elapsed += h
            clock += dt / steps
            tr.acc = self._acceleration(tr, tr.pos, tr.vel, clock)
            tr.vel += tr.acc * (h / 2)

            r = tr.pos.length()
            crossed = r >= tr.r_to if tr.outbound else r <= tr.r_to
            moving_right_way = r > r_prev if tr.outbound else r < r_prev
            if crossed and moving_right_way:
                self._end_transfer(timed_out=False)
                return
            if tr.elapsed >= tr.timeout:
                logger.warning("Transfer to planet %d timed out", tr.target_id)
                self._end_transfer(timed_out=True)
                return
            r_prev = r

    def _end_transfer(self, timed_out: bool) -> None:
        tr = self.transfer
        self.radius = tr.r_to
        self.angle = math.atan2(tr.pos.y, tr.pos.x)
        r2 = max(tr.pos.length_squared(), 1e-9)
        self.angular_speed = (tr.pos.x * tr.vel.y - tr.pos.y * tr.vel.x) / r2
        self.transfer = None
        self._timed_out = timed_out
        self._phase_elapsed = 0.0
        self.state = FlightState.BURN_ARRIVE

    def _update_burn_arrive(self, sim_dt: float) -> None:
        target = self._target
        self._phase_elapsed += sim_dt
        blend = min(1.0, 4.0 * sim_dt / BURN_DURATION)
        self.angular_speed += (target.orbit_speed - self.angular_speed) * blend
        self.angle += self.angular_speed * sim_dt
        self.radius = target.orbit_radius
        if self._phase_elapsed >= BURN_DURATION:
            self.angular_speed = target.orbit_speed
            self.state = FlightState.APPROACH

    def _update_approach(self, time: float, dt: float, sim_dt: float) -> Arrival | None:
        target = self._target
        self.angle += target.orbit_speed * dt
        gap = _wrap_angle(target.angle_at(time) - self.angle)
        step = APPROACH_CATCHUP_RATE * sim_dt
        if abs(gap) <= step:
            timed_out = self._timed_out
            self._dock(target, time)
            logger.info("Docked at planet %d", target.id)
            return Arrival(planet_id=target.id, time=time, timed_out=timed_out)
        self.angle += math.copysign(step, gap)
        return None

    def _dock(self, planet: Planet, time: float) -> None:
        self.state = FlightState.DOCKED
        self._docked_id = planet.id
        self._target = None
        self._speed_mult = 1.0
        self._timed_out = False
        self.transfer = None
        self._follow_planet(planet, time)
        self.dock_angle = self.angle

    def _follow_planet(self, planet: Planet, time: float) -> None:
        self.angle = planet.angle_at(time)
        self.radius = planet.orbit_radius
        self.angular_speed = planet.orbit_speed
