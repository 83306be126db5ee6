"""Star system contents: planets, moons, asteroid belts and comets.

Nothing here is persisted. Every body is regenerated on demand from its
star, so the draw order below is part of the save format: reordering any
draw changes every planet of every existing seed.

Per planet, from ``Mulberry32(star.seed)``:

    type, size, habitability, metal, atmosphere,
    ring roll (ringed types only), special roll (+ pick on hit),
    visual size, moon roll (+ count, then 4 draws per moon),
    orbit spacing, orbit speed, orbit phase
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

from pygame.math import Vector2

from ..constants import (
    ASTEROID_BELT_CHANCE,
    ASTEROID_BELT_MARGIN,
    ASTEROID_BELT_MIN_GAP,
    COMET_CHANCE,
    COMET_ECCENTRICITY,
    COMET_MAX_INCLINATION,
    COMET_MAX_PER_SYSTEM,
    COMET_MIN_PER_SYSTEM,
    COMET_SEMI_MAJOR,
    MOON_ORBIT_FACTOR,
    MOON_ORBIT_SPEED,
    MOON_SIZE,
    ORBIT_BASE_OFFSET,
    ORBIT_BASE_STAR_FACTOR,
    ORBIT_SPACING,
    ORBIT_SPACING_EXPONENT,
    ORBIT_SPEED,
    ORBIT_SPEED_FALLOFF,
    ORBIT_SPEED_MAX_RATIO,
    SPECIAL_CHANCE,
)
from .galaxy import SPECTRAL_SPECS, SpectralClass, Star
from .rng import SPECIALS, Mulberry32, hash_int, lerp, roman


class PlanetType(enum.Enum):
    """Planet categories."""

    TERRAN = "terran"
    DESERT = "desert"
    ICE = "ice"
    GAS_GIANT = "gas_giant"
    LAVA = "lava"
    OCEAN = "ocean"
    WATER = "water"  # sub-Neptune


class Atmosphere(enum.Enum):
    NONE = "none"
    THIN = "thin"
    STANDARD = "standard"
    DENSE = "dense"
    TOXIC = "toxic"


@dataclass(frozen=True)
class PlanetTypeSpec:
    """Static ranges a planet type draws its attributes from."""

    label: str
    size_range: tuple[int, int]
    hab_range: tuple[int, int]
    metal_range: tuple[int, int]
    atmospheres: tuple[Atmosphere, ...]
    ring_chance: float = 0.0
    moon_chance: float = 0.0
    max_moons: int = 0
    visual_size: tuple[float, float] = (0.35, 0.70)


PLANET_TYPE_SPECS: dict[PlanetType, PlanetTypeSpec] = {
    PlanetType.TERRAN: PlanetTypeSpec(
        "Terran World", (4, 7), (55, 95), (20, 60),
        (Atmosphere.STANDARD, Atmosphere.DENSE),
        moon_chance=0.3, max_moons=1,
    ),
    PlanetType.DESERT: PlanetTypeSpec(
        "Desert World", (3, 6), (5, 30), (50, 90),
        (Atmosphere.THIN, Atmosphere.NONE),
        moon_chance=0.2, max_moons=1,
    ),
    PlanetType.ICE: PlanetTypeSpec(
        "Ice World", (2, 5), (0, 15), (15, 45),
        (Atmosphere.THIN, Atmosphere.NONE),
        ring_chance=0.15, moon_chance=0.25, max_moons=2,
    ),
    PlanetType.GAS_GIANT: PlanetTypeSpec(
        "Gas Giant", (7, 10), (0, 0), (0, 5),
        (Atmosphere.DENSE,),
        ring_chance=0.6, moon_chance=0.8, max_moons=4, visual_size=(0.8, 1.3),
    ),
    PlanetType.LAVA: PlanetTypeSpec(
        "Lava World", (2, 5), (0, 5), (70, 100),
        (Atmosphere.TOXIC, Atmosphere.THIN),
        moon_chance=0.1, max_moons=1,
    ),
    PlanetType.OCEAN: PlanetTypeSpec(
        "Ocean World", (4, 8), (40, 85), (5, 25),
        (Atmosphere.STANDARD, Atmosphere.DENSE),
        moon_chance=0.3, max_moons=2,
    ),
    PlanetType.WATER: PlanetTypeSpec(
        "Sub-Neptune", (5, 8), (0, 20), (5, 20),
        (Atmosphere.DENSE,),
        ring_chance=0.2, moon_chance=0.5, max_moons=3, visual_size=(0.55, 0.95),
    ),
}

_T = PlanetType

# (threshold, type) tables; the last entry catches everything above.
_HOT_TYPES = [(0.3, _T.LAVA), (0.5, _T.DESERT), (0.65, _T.GAS_GIANT), (0.75, _T.WATER), (0.88, _T.ICE), (1.0, _T.OCEAN)]
_COOL_INNER = [(0.25, _T.TERRAN), (0.45, _T.DESERT), (0.6, _T.OCEAN), (0.75, _T.WATER), (1.0, _T.LAVA)]
_COOL_OUTER = [(0.35, _T.ICE), (0.6, _T.GAS_GIANT), (0.75, _T.WATER), (1.0, _T.DESERT)]
_MILD_INNER = [(0.25, _T.TERRAN), (0.45, _T.DESERT), (0.58, _T.LAVA), (0.72, _T.OCEAN), (0.85, _T.WATER), (1.0, _T.GAS_GIANT)]
_MILD_OUTER = [(0.28, _T.GAS_GIANT), (0.45, _T.ICE), (0.6, _T.TERRAN), (0.75, _T.OCEAN), (0.88, _T.WATER), (1.0, _T.DESERT)]


def _type_table(spectral_class: SpectralClass, inner: bool) -> list[tuple[float, PlanetType]]:
    if spectral_class in (SpectralClass.O, SpectralClass.B):
        return _HOT_TYPES
    if spectral_class in (SpectralClass.K, SpectralClass.M):
        return _COOL_INNER if inner else _COOL_OUTER
    return _MILD_INNER if inner else _MILD_OUTER


def _pick_type(r: float, table: list[tuple[float, PlanetType]]) -> PlanetType:
    for threshold, planet_type in table:
        if r < threshold:
            return planet_type
    return table[-1][1]


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------

@dataclass
class Moon:
    id: int
    orbit_radius: float
    orbit_speed: float
    orbit_phase: float
    size: float
    seed: int


@dataclass
class Planet:
    """A planet, regenerated from its star's seed on demand."""

    id: int
    name: str
    type: PlanetType
    size: int
    habitability: int
    metal_richness: int
    atmosphere: Atmosphere
    has_rings: bool
    special: str | None
    seed: int
    visual_size: float
    orbit_radius: float
    orbit_speed: float
    orbit_phase: float
    moons: list[Moon] = field(default_factory=list)

    @property
    def label(self) -> str:
        return PLANET_TYPE_SPECS[self.type].label

    def angle_at(self, time: float) -> float:
        """Orbital angle around the star at ``time`` seconds."""
        return self.orbit_phase + self.orbit_speed * time

    def position_at(self, time: float) -> Vector2:
        """Position in the orbital plane at ``time`` seconds."""
        angle = self.angle_at(time)
        return Vector2(math.cos(angle), math.sin(angle)) * self.orbit_radius


@dataclass
class AsteroidBelt:
    inner_radius: float
    outer_radius: float
    seed: int


@dataclass
class Comet:
    id: int
    semi_major_axis: float
    eccentricity: float
    inclination: float
    orbit_phase: float
    seed: int

    @property
    def perihelion(self) -> float:
        return self.semi_major_axis * (1 - self.eccentricity)

    @property
    def aphelion(self) -> float:
        return self.semi_major_axis * (1 + self.eccentricity)


def planet_key(star_id: int, planet_id: int) -> str:
    """Stable registry key for a planet, e.g. ``"12-3"``."""
    return f"{star_id}-{planet_id}"


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def generate_planets(star: Star) -> list[Planet]:
    """Derive the planets of ``star``; identical output for identical stars."""
    rng = Mulberry32(star.seed)
    spectral = SPECTRAL_SPECS[star.spectral_class]
    planets: list[Planet] = []

    prev_radius = ORBIT_BASE_STAR_FACTOR * spectral.star_scale + ORBIT_BASE_OFFSET
    prev_speed = math.inf

    for i in range(star.planet_count):
        inner = i < star.planet_count * 0.4
        planet_type = _pick_type(rng.random(), _type_table(star.spectral_class, inner))
        spec = PLANET_TYPE_SPECS[planet_type]

        size = rng.randint(*spec.size_range)
        habitability = math.floor(lerp(*spec.hab_range, rng.random()))
        metal = math.floor(lerp(*spec.metal_range, rng.random()))
        atmosphere = rng.choice(spec.atmospheres)
        has_rings = spec.ring_chance > 0 and rng.random() < spec.ring_chance
        special = rng.choice(SPECIALS) if rng.random() < SPECIAL_CHANCE else None
        planet_seed = hash_int(star.seed, i * 7 + 3)
        visual_size = rng.uniform(*spec.visual_size)

        moons: list[Moon] = []
        if rng.random() < spec.moon_chance and spec.max_moons > 0:
            count = min(1 + rng.index(spec.max_moons), spec.max_moons)
            for m in range(count):
                moons.append(
                    Moon(
                        id=m,
                        orbit_radius=visual_size * rng.uniform(*MOON_ORBIT_FACTOR),
                        orbit_speed=rng.uniform(*MOON_ORBIT_SPEED),
                        orbit_phase=rng.random() * math.tau,
                        size=rng.uniform(*MOON_SIZE),
                        seed=hash_int(planet_seed, m * 13 + 7),
                    )
                )

        # Spacing grows with index so outer orbits spread further apart
        step = (i + 1) ** ORBIT_SPACING_EXPONENT - i ** ORBIT_SPACING_EXPONENT
        orbit_radius = prev_radius + rng.uniform(*ORBIT_SPACING) * step
        orbit_speed = rng.uniform(*ORBIT_SPEED) / (1 + i) ** ORBIT_SPEED_FALLOFF
        orbit_speed = min(orbit_speed, prev_speed * ORBIT_SPEED_MAX_RATIO)
        orbit_phase = rng.random() * math.tau

        planets.append(
            Planet(
                id=i,
                name=f"{star.name} {roman(i)}",
                type=planet_type,
                size=size,
                habitability=habitability,
                metal_richness=metal,
                atmosphere=atmosphere,
                has_rings=has_rings,
                special=special,
                seed=planet_seed,
                visual_size=visual_size,
                orbit_radius=orbit_radius,
                orbit_speed=orbit_speed,
                orbit_phase=orbit_phase,
                moons=moons,
            )
        )
        prev_radius, prev_speed = orbit_radius, orbit_speed

    return planets


def generate_asteroid_belt(star: Star, planets: list[Planet]) -> AsteroidBelt | None:
    """Place a belt in the widest orbital gap, or return None."""
    rng = Mulberry32(star.seed + 500)
    if rng.random() > ASTEROID_BELT_CHANCE:
        return None
    if len(planets) < 2:
        return None

    radii = sorted(p.orbit_radius for p in planets)
    best_gap, best_inner, best_outer = 0.0, 0.0, 0.0
    for a, b in zip(radii, radii[1:]):
        gap = b - a
        if gap > best_gap:
            best_gap = gap
            best_inner = a + gap * ASTEROID_BELT_MARGIN
            best_outer = b - gap * ASTEROID_BELT_MARGIN

    if best_gap < ASTEROID_BELT_MIN_GAP:
        return None
    return AsteroidBelt(best_inner, best_outer, hash_int(star.seed, 501))


def generate_comets(star: Star) -> list[Comet]:
    """Eccentric long-period comets, independent of the planets."""
    rng = Mulberry32(star.seed + 700)
    comets: list[Comet] = []
    for k in range(COMET_MAX_PER_SYSTEM):
        roll = rng.random()
        if roll >= COMET_CHANCE and len(comets) >= COMET_MIN_PER_SYSTEM:
            continue
        comets.append(
            Comet(
                id=len(comets),
                semi_major_axis=rng.uniform(*COMET_SEMI_MAJOR),
                eccentricity=rng.uniform(*COMET_ECCENTRICITY),
                inclination=rng.uniform(-COMET_MAX_INCLINATION, COMET_MAX_INCLINATION),
                orbit_phase=rng.random() * math.tau,
                seed=hash_int(star.seed, 700 + k),
            )
        )
    return comets
