"""Procedural galaxy generation for galaxyho.

The galaxy is a flattened disc of stars joined by an undirected jump graph.
Everything is derived from a single 32-bit seed; the main stream
``Mulberry32(seed)`` is consumed in this order per placement attempt:

    radius, angle, height                     (every attempt)
    spectral class, pulsar roll,
    planet count, pulse rate (pulsars only)   (accepted candidates only)

Remnants are drawn afterwards from an independent ``Mulberry32(seed + 900)``
stream: one Fisher-Yates shuffle of star ids, then the black hole, neutron
star and white dwarf counts.
"""

from __future__ import annotations

import enum
import logging
import math
from collections import deque
from dataclasses import dataclass, field

from pygame.math import Vector3

from ..constants import (
    BLACK_HOLE_COUNT,
    CONNECTION_RANGE,
    FIELD_HEIGHT,
    FIELD_RADIUS,
    MAX_CONNECTIONS,
    MIN_STAR_DIST,
    NEUTRON_PULSE_RATE,
    NEUTRON_STAR_COUNT,
    PLACEMENT_ATTEMPTS_PER_STAR,
    PULSAR_CHANCE,
    PULSE_SPEED_MAX,
    PULSE_SPEED_MIN,
    STAR_COUNT,
    WHITE_DWARF_COUNT,
)
from .rng import Mulberry32, gen_cluster_name, gen_star_name, hash_int

logger = logging.getLogger(__name__)


class SpectralClass(enum.Enum):
    """Main-sequence spectral classes, hottest first."""

    O = "O"
    B = "B"
    A = "A"
    F = "F"
    G = "G"
    K = "K"
    M = "M"


@dataclass(frozen=True)
class SpectralSpec:
    color: int
    temp_k: int
    temp_label: str
    star_scale: float
    min_planets: int
    max_planets: int


SPECTRAL_SPECS: dict[SpectralClass, SpectralSpec] = {
    SpectralClass.O: SpectralSpec(0x2244FF, 35000, "30,000K+", 1.8, 2, 4),
    SpectralClass.B: SpectralSpec(0x22CCFF, 18000, "10-30,000K", 1.5, 3, 5),
    SpectralClass.A: SpectralSpec(0x33EEBB, 8500, "7,500-10,000K", 1.3, 3, 6),
    SpectralClass.F: SpectralSpec(0xEEDD44, 6500, "6,000-7,500K", 1.1, 4, 7),
    SpectralClass.G: SpectralSpec(0xFFBB00, 5778, "5,200-6,000K", 1.0, 3, 7),
    SpectralClass.K: SpectralSpec(0xFF7700, 4300, "3,700-5,200K", 0.85, 3, 6),
    SpectralClass.M: SpectralSpec(0xFF2200, 3100, "2,400-3,700K", 0.65, 2, 5),
}

# Cumulative thresholds, skewed toward cool dim stars
_SPECTRAL_CUMULATIVE: list[tuple[float, SpectralClass]] = [
    (0.55, SpectralClass.M),
    (0.73, SpectralClass.K),
    (0.85, SpectralClass.G),
    (0.92, SpectralClass.F),
    (0.96, SpectralClass.A),
    (0.99, SpectralClass.B),
]


def pick_spectral_class(rng: Mulberry32) -> SpectralClass:
    """Draw one spectral class (consumes exactly one value)."""
    r = rng.random()
    for threshold, spectral_class in _SPECTRAL_CUMULATIVE:
        if r < threshold:
            return spectral_class
    return SpectralClass.O


class RemnantType(enum.Enum):
    """Stellar end states replacing normal stellar behaviour."""

    BLACK_HOLE = "black_hole"
    NEUTRON_STAR = "neutron_star"
    WHITE_DWARF = "white_dwarf"


@dataclass
class Star:
    """A star node in the galaxy graph."""

    id: int
    name: str
    position: Vector3
    spectral_class: SpectralClass
    planet_count: int
    seed: int
    visited: bool = False
    adjacent_ids: list[int] = field(default_factory=list)
    is_pulsar: bool = False
    pulse_rate: float = 0.0
    remnant_type: RemnantType | None = None
    has_belt: bool = False
    has_comets: bool = False

    @property
    def spec(self) -> SpectralSpec:
        return SPECTRAL_SPECS[self.spectral_class]


def star_distance(a: Star, b: Star) -> float:
    """Euclidean distance between two stars, in light years."""
    return a.position.distance_to(b.position)


@dataclass
class Galaxy:
    """A generated galaxy: its seed, star list and cluster name."""

    seed: int
    stars: list[Star] = field(default_factory=list)
    name: str = ""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def home_star(self) -> Star:
        return self.stars[0]

    def get_star(self, star_id: int) -> Star:
        return self.stars[star_id]

    def neighbors(self, star_id: int) -> list[Star]:
        return [self.stars[i] for i in self.stars[star_id].adjacent_ids]

    def stars_within_hops(self, origins: set[int] | list[int], hops: int) -> set[int]:
        """All star ids reachable from any origin in at most ``hops`` edges."""
        found = {i for i in origins if 0 <= i < len(self.stars)}
        frontier = set(found)
        for _ in range(hops):
            nxt = set()
            for sid in frontier:
                for adj in self.stars[sid].adjacent_ids:
                    if adj not in found:
                        found.add(adj)
                        nxt.add(adj)
            if not nxt:
                break
            frontier = nxt
        return found

    def is_connected(self) -> bool:
        if not self.stars:
            return True
        return len(_bfs(self.stars, 0)) == len(self.stars)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def generate_galaxy(seed: int, star_count: int = STAR_COUNT) -> Galaxy:
    """Build a galaxy deterministically from ``seed``."""
    stars = _place_stars(seed, star_count)
    if len(stars) < star_count:
        logger.warning(
            "Star placement starved: %d of %d stars placed (seed %d)",
            len(stars), star_count, seed,
        )

    _promote_home_star(stars)
    _assign_remnants(seed, stars)
    _connect_stars(stars)
    repaired = _repair_connectivity(stars)
    _annotate_features(stars)

    logger.debug(
        "Generated galaxy seed=%d stars=%d repair_edges=%d", seed, len(stars), repaired,
    )
    return Galaxy(seed=seed, stars=stars, name=gen_cluster_name(seed))


def _place_stars(seed: int, count: int) -> list[Star]:
    """Rejection-sample positions in a disc that thins toward its rim."""
    rng = Mulberry32(seed)
    radius, height = FIELD_RADIUS, FIELD_HEIGHT
    min_dist_sq = MIN_STAR_DIST * MIN_STAR_DIST
    stars: list[Star] = []

    attempts = 0
    while len(stars) < count and attempts < count * PLACEMENT_ATTEMPTS_PER_STAR:
        attempts += 1
        r = math.sqrt(rng.random()) * radius
        theta = rng.random() * math.tau
        x = math.cos(theta) * r
        z = math.sin(theta) * r
        y = (rng.random() - 0.5) * height * (1 - r / radius * 0.6)
        pos = Vector3(x, y, z)

        if any((s.position - pos).length_squared() < min_dist_sq for s in stars):
            continue

        spectral_class = pick_spectral_class(rng)
        is_pulsar = rng.random() < PULSAR_CHANCE
        spec = SPECTRAL_SPECS[spectral_class]
        planet_count = rng.randint(spec.min_planets, spec.max_planets)
        pulse_rate = rng.uniform(PULSE_SPEED_MIN, PULSE_SPEED_MAX) if is_pulsar else 0.0

        star_seed = hash_int(seed, len(stars))
        stars.append(
            Star(
                id=len(stars),
                name=gen_star_name(star_seed),
                position=pos,
                spectral_class=spectral_class,
                planet_count=planet_count,
                seed=star_seed,
                is_pulsar=is_pulsar,
                pulse_rate=pulse_rate,
            )
        )
    return stars


def _promote_home_star(stars: list[Star]) -> None:
    """Swap the star nearest the origin into index 0 and renumber."""
    if not stars:
        return
    closest = min(range(len(stars)), key=lambda i: stars[i].position.length_squared())
    if closest != 0:
        stars[0], stars[closest] = stars[closest], stars[0]
        stars[0].id = 0
        stars[closest].id = closest


def _assign_remnants(seed: int, stars: list[Star]) -> None:
    rng = Mulberry32(seed + 900)
    order = list(range(len(stars)))
    rng.shuffle(order)

    counts = [
        (RemnantType.BLACK_HOLE, rng.randint(*BLACK_HOLE_COUNT)),
        (RemnantType.NEUTRON_STAR, rng.randint(*NEUTRON_STAR_COUNT)),
        (RemnantType.WHITE_DWARF, rng.randint(*WHITE_DWARF_COUNT)),
    ]

    # Home star stays a normal star
    candidates = iter(i for i in order if i != 0)
    for remnant, count in counts:
        for _ in range(count):
            idx = next(candidates, None)
            if idx is None:
                return
            star = stars[idx]
            star.remnant_type = remnant
            if remnant is RemnantType.BLACK_HOLE:
                star.planet_count = max(1, star.planet_count // 2)
            elif remnant is RemnantType.NEUTRON_STAR:
                star.is_pulsar = True
                star.pulse_rate = NEUTRON_PULSE_RATE
            logger.debug("Star %d (%s) is a %s", star.id, star.name, remnant.value)


def _link(a: Star, b: Star) -> None:
    if b.id not in a.adjacent_ids:
        a.adjacent_ids.append(b.id)
    if a.id not in b.adjacent_ids:
        b.adjacent_ids.append(a.id)


def _connect_stars(stars: list[Star]) -> None:
    """Link each star to its nearest neighbours within jump range."""
    for star in stars:
        in_range = []
        for other in stars:
            if other is star:
                continue
            d = star_distance(star, other)
            if d <= CONNECTION_RANGE:
                in_range.append((d, other.id))
        in_range.sort()
        for _, other_id in in_range[:MAX_CONNECTIONS]:
            _link(star, stars[other_id])


def _bfs(stars: list[Star], start: int, seen: set[int] | None = None) -> set[int]:
    seen = set() if seen is None else seen
    seen.add(start)
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        for adj in stars[cur].adjacent_ids:
            if adj not in seen:
                seen.add(adj)
                queue.append(adj)
    return seen


def _repair_connectivity(stars: list[Star]) -> int:
    """Bridge every component unreachable from star 0. Returns edges added."""
    if not stars:
        return 0
    visited = _bfs(stars, 0)
    added = 0
    for star in stars:
        if star.id in visited:
            continue
        nearest = min(visited, key=lambda v: (star_distance(star, stars[v]), v))
        _link(star, stars[nearest])
        added += 1
        _bfs(stars, star.id, visited)
    return added


def _annotate_features(stars: list[Star]) -> None:
    from .system import generate_asteroid_belt, generate_comets, generate_planets

    for star in stars:
        planets = generate_planets(star)
        star.has_belt = generate_asteroid_belt(star, planets) is not None
        star.has_comets = bool(generate_comets(star))
