"""Planet encounter system for galaxyho.

Each planet either has one seeded encounter or none. The encounter is picked
from a catalog of templates filtered by planet type and weighted by rarity,
and a chosen action resolves through its own seeded stream, so the same
planet and choice always give the same result. Once resolved, an encounter
is recorded in ``state.resolved_events`` and never comes back.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..constants import EVENT_CHANCE, MAX_SUCCESS_RATE
from .gameplay import get_upgrade_effects
from .rng import Mulberry32, hash_int, lerp, round_half_up
from .system import Planet, PlanetType, planet_key

if TYPE_CHECKING:
    from .galaxy import Star
    from .state import PlayerState

logger = logging.getLogger(__name__)

EVENT_SALT = 9999
RESOLVE_SALT = 7777


class Rarity(enum.Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"

    @property
    def weight(self) -> int:
        return _RARITY_WEIGHTS[self]


_RARITY_WEIGHTS = {Rarity.COMMON: 6, Rarity.UNCOMMON: 3, Rarity.RARE: 1}


class Risk(enum.Enum):
    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class Outcome:
    """Inclusive fuel and data ranges plus optional log text."""

    fuel: tuple[int, int]
    data: tuple[int, int]
    lore: str | None = None


@dataclass(frozen=True)
class EventChoice:
    label: str
    risk: Risk
    success_rate: float
    success: Outcome
    failure: Outcome | None = None


@dataclass(frozen=True)
class EventTemplate:
    id: str
    title: str
    description: str  # may contain {planetName} {planetType} {starName} {starClass}
    rarity: Rarity
    choices: tuple[EventChoice, ...]
    planet_types: tuple[PlanetType, ...] | None = None  # None = any planet

    def applies_to(self, planet_type: PlanetType) -> bool:
        return self.planet_types is None or planet_type in self.planet_types


@dataclass
class EventInstance:
    """A template bound to one planet, ready for the player to choose."""

    template_id: str
    title: str
    description: str
    choices: list[EventChoice] = field(default_factory=list)
    planet_key: str = ""
    planet_seed: int = 0


@dataclass
class ChoiceResult:
    success: bool
    fuel: int
    data: int
    lore: str | None = None


DIPLOMACY_CHOICE = EventChoice(
    "Diplomatic approach", Risk.LOW, 0.80,
    Outcome((3, 8), (8, 16), "A measured diplomatic approach yields cooperative results."),
)

# Templates that never get the diplomatic option
DIPLOMACY_EXEMPT = frozenset({"mineral_vein"})


# ---------------------------------------------------------------------------
# Template pools
# ---------------------------------------------------------------------------

def _universal_events() -> list[EventTemplate]:
    """Encounters possible on any planet."""
    return [
        EventTemplate(
            "distress_beacon", "Distress Beacon",
            "A faint distress signal pulses from the surface of {planetName}. The signal is old, "
            "perhaps decades, but the pattern is unmistakably human-made.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Investigate the source", Risk.MEDIUM, 0.60,
                    Outcome((5, 15), (8, 20), "Found a damaged survey probe with valuable star charts stored in its memory banks."),
                    Outcome((-8, -4), (2, 5), "The signal was a trap: an automated decoy protecting a collapsed structure. Minor hull damage from debris."),
                ),
                EventChoice(
                    "Scan from orbit", Risk.SAFE, 1.0,
                    Outcome((0, 0), (4, 10), "Remote scans reveal the beacon belongs to a long-lost survey vessel. Location logged."),
                ),
                EventChoice("Mark and move on", Risk.SAFE, 1.0, Outcome((0, 0), (1, 3))),
            ),
        ),
        EventTemplate(
            "derelict_ship", "Derelict Vessel",
            "Sensors detect a drifting ship hull in orbit around {planetName}. No life signs. "
            "The vessel's design doesn't match any known registry.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Board and salvage", Risk.MEDIUM, 0.55,
                    Outcome((10, 25), (10, 25), "The ship's cargo hold still contains sealed fuel canisters and encrypted data cores."),
                    Outcome((-5, -2), (3, 8), "Structural collapse during salvage. Managed to grab a few data chips before evacuating."),
                ),
                EventChoice(
                    "Scan the hull remotely", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 14), "External analysis reveals an unknown alloy composition. Valuable metallurgical data recorded."),
                ),
            ),
        ),
        EventTemplate(
            "cosmic_anomaly", "Cosmic Anomaly",
            "Instruments are registering impossible readings near {planetName}. Space-time appears "
            "to be subtly warped in a localized region.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Approach cautiously", Risk.HIGH, 0.45,
                    Outcome((0, 0), (20, 40), "The anomaly is a natural wormhole echo. The readings rewrite several chapters of theoretical physics."),
                    Outcome((-15, -8), (5, 10), "Gravitational shear nearly tears the hull apart. Emergency retreat, but some sensor data was captured."),
                ),
                EventChoice(
                    "Deploy remote probe", Risk.LOW, 0.85,
                    Outcome((0, 0), (10, 18), "The probe transmits stunning data before dissolving into the anomaly."),
                    Outcome((0, 0), (3, 6), "Probe lost immediately. Only baseline telemetry recovered."),
                ),
                EventChoice("Log coordinates and leave", Risk.SAFE, 1.0, Outcome((0, 0), (2, 5))),
            ),
        ),
        EventTemplate(
            "pirate_cache", "Hidden Cache",
            "A concealed signal leads to a camouflaged supply depot in the shadow of {planetName}. "
            "Someone went to great lengths to hide this.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Crack the locks", Risk.MEDIUM, 0.65,
                    Outcome((15, 30), (5, 12), "Fuel cells, spare parts, and a cryptic star map. Someone was planning a long journey."),
                    Outcome((-5, -2), (2, 5), "Anti-tamper charges destroyed most of the contents. Recovered fragments of a navigation log."),
                ),
                EventChoice(
                    "Take what's accessible", Risk.SAFE, 1.0,
                    Outcome((5, 12), (3, 7), "External containers yield modest supplies. The main vault remains sealed."),
                ),
            ),
        ),
        EventTemplate(
            "ancient_probe", "Ancient Probe",
            "An object of clearly artificial origin drifts near {planetName}. Its design is alien: "
            "geometric, precise, and impossibly old.",
            Rarity.RARE,
            (
                EventChoice(
                    "Attempt to interface", Risk.HIGH, 0.40,
                    Outcome((0, 0), (30, 50), "The probe accepts your signal and transmits a burst of data in an unknown format. Your computers will need years to decode it all."),
                    Outcome((-10, -5), (8, 15), "The probe emits an electromagnetic pulse before going dark. Some peripheral data was captured, but ship systems took damage."),
                ),
                EventChoice(
                    "Observe and document", Risk.SAFE, 1.0,
                    Outcome((0, 0), (10, 20), "High-resolution imaging and spectral analysis of the probe's surface. A remarkable discovery."),
                ),
            ),
        ),
        EventTemplate(
            "radiation_storm", "Radiation Storm",
            "A wave of intense radiation is sweeping across {planetName}. The storm is interfering "
            "with sensors but may reveal hidden planetary features.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Ride it out and scan", Risk.MEDIUM, 0.60,
                    Outcome((0, 0), (12, 22), "The radiation illuminates subsurface structures normally invisible to scanners. Extraordinary geological data."),
                    Outcome((-6, -3), (3, 7), "Sensor overload. The storm was more intense than predicted. Partial data recovered."),
                ),
                EventChoice(
                    "Shield and wait", Risk.SAFE, 1.0,
                    Outcome((-2, -1), (4, 8), "Passive readings from behind shields still yield useful atmospheric data."),
                ),
            ),
        ),
        EventTemplate(
            "micro_singularity", "Micro-Singularity",
            "A pinpoint gravitational anomaly orbits {planetName}. It's too small to be a black hole, "
            "but too strong to be natural debris.",
            Rarity.RARE,
            (
                EventChoice(
                    "Attempt capture with tractor beam", Risk.EXTREME, 0.30,
                    Outcome((0, 0), (40, 60), "The singularity is stabilized in a containment field. This could revolutionize energy research."),
                    Outcome((-20, -12), (5, 12), "The singularity evaporates in a burst of Hawking radiation. Significant damage to external arrays."),
                ),
                EventChoice(
                    "Study from safe distance", Risk.LOW, 0.90,
                    Outcome((0, 0), (15, 25), "Detailed gravitational mapping of the singularity. Its quantum properties defy standard models."),
                    Outcome((0, 0), (5, 8), "The singularity decayed before measurements could complete."),
                ),
            ),
        ),
        EventTemplate(
            "communication_fragment", "Signal Fragment",
            "A repeating transmission is bouncing off {planetName}'s atmosphere. The signal appears "
            "to originate from outside this galaxy cluster.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Decode the signal", Risk.LOW, 0.75,
                    Outcome((0, 0), (12, 22), "The signal contains a mathematical sequence, a prime number progression. This is not natural."),
                    Outcome((0, 0), (4, 8), "Decoding fails as the signal degrades too quickly. Partial frequency analysis stored."),
                ),
                EventChoice(
                    "Record raw transmission", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Raw waveform captured for later analysis."),
                ),
            ),
        ),
        EventTemplate(
            "space_whale", "Void Leviathan",
            "Something immense is moving through the void near {planetName}. Bio-luminescent, "
            "kilometers long, and absolutely alive.",
            Rarity.RARE,
            (
                EventChoice(
                    "Follow at a distance", Risk.MEDIUM, 0.70,
                    Outcome((-5, -2), (20, 35), "The creature leads you through a region rich in exotic particles. Its migration route is now charted."),
                    Outcome((-10, -5), (5, 10), "The creature takes notice and emits a powerful electromagnetic burst. Systems scrambled."),
                ),
                EventChoice(
                    "Observe and catalog", Risk.SAFE, 1.0,
                    Outcome((0, 0), (10, 18), "High-resolution holographic recording of a spacefaring organism. A biological impossibility, now proven real."),
                ),
            ),
        ),
        EventTemplate(
            "smuggler_stash", "Smuggler's Stash",
            "Tucked in a crater on {planetName}, a cleverly disguised cargo pod sits waiting. Its "
            "transponder pings with an obsolete merchant code.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Open it", Risk.LOW, 0.80,
                    Outcome((8, 18), (3, 8), "Fuel reserves and processed minerals. Whoever stashed this never came back."),
                    Outcome((-3, -1), (1, 3), "The pod is rigged with a corrosive agent. Minor damage, minimal contents."),
                ),
                EventChoice(
                    "Scan contents first", Risk.SAFE, 1.0,
                    Outcome((4, 8), (2, 5), "Non-invasive scans identify useful materials. Safe extraction."),
                ),
            ),
        ),
        EventTemplate(
            "temporal_echo", "Temporal Echo",
            "For a brief moment, sensors detect a duplicate of your own ship near {planetName}: same "
            "transponder code, same energy signature. Then it vanishes.",
            Rarity.RARE,
            (
                EventChoice(
                    "Investigate the coordinates", Risk.HIGH, 0.50,
                    Outcome((0, 0), (25, 45), "Temporal residue at the location contains information from a possible future. The implications are staggering."),
                    Outcome((-12, -6), (5, 12), "The temporal field collapses violently. Systems damaged but the chronal data is preserved."),
                ),
                EventChoice(
                    "Log it as an anomaly", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "The echo is documented. Perhaps future visits will shed more light."),
                ),
            ),
        ),
        EventTemplate(
            "mineral_vein", "Exposed Mineral Vein",
            "Surface scans of {planetName} reveal a massive mineral deposit exposed by recent "
            "geological activity. Rich in rare elements.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Extract samples", Risk.LOW, 0.80,
                    Outcome((5, 12), (8, 16), "High-purity mineral samples collected. The deposit contains several elements not in standard databases."),
                    Outcome((-3, -1), (3, 6), "Extraction disturbs the geological formation. Limited samples recovered before retreating."),
                ),
                EventChoice(
                    "Spectral analysis only", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Detailed compositional data logged from orbit."),
                ),
            ),
        ),
    ]


def _terran_events() -> list[EventTemplate]:
    only = (PlanetType.TERRAN,)
    return [
        EventTemplate(
            "colony_ruins", "Colony Ruins",
            "Overgrown structures on {planetName} tell the story of a failed settlement. Nature has "
            "reclaimed most of it, but central buildings remain intact.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Explore the structures", Risk.MEDIUM, 0.65,
                    Outcome((5, 12), (12, 25), "Personal logs reveal the colony was abandoned due to seismic instability. Their research data is invaluable."),
                    Outcome((-5, -2), (4, 8), "A floor gives way. Emergency extraction needed, but some records were recovered."),
                ),
                EventChoice(
                    "Aerial survey", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 12), "Mapping the ruins from above reveals a settlement pattern suggesting advanced urban planning."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "primitive_life", "Primitive Life Signs",
            "Bioscanners detect complex organic molecules and possible microbial colonies on "
            "{planetName}'s surface. This could be first-contact territory.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Collect samples", Risk.MEDIUM, 0.70,
                    Outcome((0, 0), (15, 30), "Confirmed: multicellular organisms with a unique amino acid structure. This changes everything."),
                    Outcome((-4, -2), (5, 10), "Contamination protocols triggered. Samples compromised, but spectral data preserved."),
                ),
                EventChoice(
                    "Non-invasive observation", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 16), "Detailed recordings of possible biological activity. Inconclusive but promising."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "breathable_atm", "Breathable Pocket",
            "A sheltered valley on {planetName} maintains atmospheric conditions within human "
            "tolerance. Temperature, pressure, oxygen: all viable.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Land and explore on foot", Risk.MEDIUM, 0.60,
                    Outcome((-3, -1), (12, 22), "Walking on alien soil under an alien sky. Soil and air samples will be studied for decades."),
                    Outcome((-8, -4), (5, 10), "Unexpected weather system forced emergency liftoff. Limited ground data collected."),
                ),
                EventChoice(
                    "Drop atmospheric probes", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 14), "Probes confirm stable conditions. This location is flagged as a potential settlement site."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "tectonic_readings", "Tectonic Activity",
            "Seismic sensors detect unusual periodic tremors on {planetName}. The pattern is too "
            "regular to be natural plate tectonics.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Deploy deep-core probe", Risk.MEDIUM, 0.60,
                    Outcome((0, 0), (10, 20), "The tremors originate from a massive subsurface cavity. Something resonates down there."),
                    Outcome((-4, -2), (3, 7), "Probe crushed by tectonic pressure. Partial data transmitted before loss."),
                ),
                EventChoice(
                    "Record surface data", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Seismic waveform analysis cataloged."),
                ),
            ),
            only,
        ),
    ]


def _desert_events() -> list[EventTemplate]:
    only = (PlanetType.DESERT,)
    return [
        EventTemplate(
            "buried_vault", "Buried Vault",
            "Ground-penetrating radar reveals a sealed chamber beneath the dunes of {planetName}. "
            "The structure is far older than any known civilization.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Excavate the entrance", Risk.HIGH, 0.50,
                    Outcome((0, 0), (20, 35), "Inside: preserved artifacts of unknown origin. Crystal tablets covered in mathematical notation."),
                    Outcome((-8, -4), (5, 12), "The vault's internal atmosphere ignites on contact with outside air. Explosion damages equipment."),
                ),
                EventChoice(
                    "Scan through the walls", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 15), "Non-invasive scans map the vault's interior. Multiple chambers with metallic objects detected."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "heat_minerals", "Heat-Forged Minerals",
            "Extreme surface temperatures on {planetName} have created crystals of extraordinary "
            "purity. They gleam through the heat haze like scattered stars.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Surface collection run", Risk.MEDIUM, 0.65,
                    Outcome((8, 15), (5, 12), "Crystals collected. Their lattice structure could improve fuel cell efficiency."),
                    Outcome((-5, -2), (2, 5), "Heat damage to collection equipment. Minimal samples secured."),
                ),
                EventChoice(
                    "Remote analysis", Risk.SAFE, 1.0,
                    Outcome((0, 0), (4, 9), "Spectral data on the crystal formations logged."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "sandstorm_data", "Megastorm",
            "A planet-wide sandstorm on {planetName} generates massive electrical discharges. The "
            "storm's electromagnetic signature contains structured patterns.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Fly into the storm edge", Risk.HIGH, 0.45,
                    Outcome((-5, -2), (15, 28), "Lightning-created glass formations on the surface contain frozen electromagnetic memories. Unprecedented."),
                    Outcome((-12, -6), (3, 8), "The storm was stronger than models predicted. Emergency ascent. Ship battered but intact."),
                ),
                EventChoice(
                    "Monitor from orbit", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 12), "Storm dynamics recorded. The electrical patterns suggest a self-organizing system."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "fossilized_life", "Fossil Field",
            "Erosion on {planetName} has exposed a vast bed of fossilized organisms. These creatures "
            "lived millions of years ago in a now-vanished ocean.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Excavate specimens", Risk.LOW, 0.80,
                    Outcome((0, 0), (12, 22), "Pristine fossils of beings that breathed methane. Their biology is unlike anything in known records."),
                    Outcome((-2, -1), (4, 8), "Specimens crumble on extraction. Imaging data preserved."),
                ),
                EventChoice(
                    "Photograph and scan", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 12), "Detailed 3D models of fossil structures compiled."),
                ),
            ),
            only,
        ),
    ]


def _ice_events() -> list[EventTemplate]:
    only = (PlanetType.ICE,)
    return [
        EventTemplate(
            "subsurface_ocean", "Subsurface Ocean",
            "Thermal imaging reveals liquid water beneath {planetName}'s ice crust. The ocean is "
            "heated by tidal forces and may harbor life.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Drill through the ice", Risk.HIGH, 0.50,
                    Outcome((-5, -2), (20, 35), "Contact with liquid water confirmed. Chemical analysis suggests complex organic chemistry."),
                    Outcome((-10, -5), (5, 10), "Drill head lost in a pressurized geyser eruption. Partial water samples recovered from spray."),
                ),
                EventChoice(
                    "Sonar mapping", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 15), "Ice-penetrating sonar reveals the ocean is 40km deep with thermal vents along the bottom."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "cryo_vault", "Cryo-Preserved Data",
            "An artificial structure is encased in {planetName}'s ice. Inside, temperature-sensitive "
            "storage devices have been perfectly preserved.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Thaw and extract", Risk.MEDIUM, 0.60,
                    Outcome((0, 0), (15, 30), "The storage devices contain navigational data from a civilization that mapped stars we haven't reached yet."),
                    Outcome((-4, -2), (5, 10), "Thermal shock destroys some devices. Partial data recovered from the most resilient cores."),
                ),
                EventChoice(
                    "Scan through the ice", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 12), "Non-invasive imaging captures the external structure. Data patterns visible but unreadable."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "crystal_formations", "Crystal Caverns",
            "Crevasses on {planetName} lead to vast underground caverns lined with luminescent ice "
            "crystals. They pulse with an inner light.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Descend into the caverns", Risk.MEDIUM, 0.65,
                    Outcome((3, 8), (10, 20), "The crystals are natural energy capacitors. They store and release photons over millennia."),
                    Outcome((-6, -3), (3, 7), "An ice shelf collapses, trapping the probe. Remote-detonated charges free it with some crystal samples."),
                ),
                EventChoice(
                    "Sample from the rim", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Surface crystal samples collected. Their optical properties are remarkable."),
                ),
            ),
            only,
        ),
    ]


def _gas_giant_events() -> list[EventTemplate]:
    only = (PlanetType.GAS_GIANT,)
    return [
        EventTemplate(
            "cloud_harvesting", "Cloud Harvesting",
            "The upper atmosphere of {planetName} is rich in hydrogen-3 and other fusion-grade "
            "fuels. A skimming run could replenish your tanks.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Deep atmospheric dive", Risk.HIGH, 0.50,
                    Outcome((20, 40), (5, 10), "Tanks filled to capacity. The dive also captured exotic atmospheric compounds."),
                    Outcome((-10, -5), (3, 6), "Unexpected pressure spike forces emergency ascent. Fuel spent exceeds fuel collected."),
                ),
                EventChoice(
                    "Upper atmosphere skim", Risk.LOW, 0.85,
                    Outcome((10, 20), (3, 6), "Conservative skim yields solid fuel reserves."),
                    Outcome((2, 5), (1, 3), "Turbulence limits collection time. Modest reserves gathered."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "storm_dive", "Storm Formation",
            "A cyclone the size of a continent is forming on {planetName}. Wind speeds exceed "
            "800 km/h. The storm's eye contains unusual readings.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Dive into the eye", Risk.EXTREME, 0.35,
                    Outcome((0, 0), (25, 45), "The eye contains a stable anti-cyclone with exotic particles. A phenomenon never before documented."),
                    Outcome((-15, -8), (5, 12), "Caught by a wind shear. Emergency thrusters drain fuel reserves escaping the vortex."),
                ),
                EventChoice(
                    "Observe from above", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 15), "Storm dynamics recorded in detail. The formation pattern suggests deep atmospheric convection."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "atmospheric_life", "Atmospheric Life",
            "Bio-luminescent organisms drift through {planetName}'s cloud bands. Vast colonies of "
            "gas-dwelling creatures, each kilometers across.",
            Rarity.RARE,
            (
                EventChoice(
                    "Fly through a colony", Risk.MEDIUM, 0.60,
                    Outcome((0, 0), (20, 35), "The organisms communicate via bioluminescent pulses. You've captured a complete vocabulary of light patterns."),
                    Outcome((-8, -4), (8, 15), "The colony reacts defensively and acidic secretions damage external sensors. Partial data recovered."),
                ),
                EventChoice(
                    "Observe at distance", Risk.SAFE, 1.0,
                    Outcome((0, 0), (10, 18), "Hours of footage documenting gas-giant biology. An entirely new branch of life."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "magnetic_anomaly", "Magnetic Anomaly",
            "{planetName}'s magnetic field has a localized inversion. Compass readings spin wildly "
            "near the equator. Something is causing this.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Deploy magnetometer array", Risk.LOW, 0.80,
                    Outcome((0, 0), (10, 18), "The inversion is caused by a metallic asteroid core suspended deep in the atmosphere. Fascinating."),
                    Outcome((-2, -1), (3, 6), "Array scrambled by the magnetic field. Baseline measurements preserved."),
                ),
                EventChoice(
                    "Record from orbit", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Magnetic field topology mapped from safe distance."),
                ),
            ),
            only,
        ),
    ]


def _lava_events() -> list[EventTemplate]:
    only = (PlanetType.LAVA,)
    return [
        EventTemplate(
            "geothermal_energy", "Geothermal Source",
            "Intense geothermal vents on {planetName} radiate enough energy to power a small city. "
            "The heat could be converted to fuel.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Deploy thermal collectors", Risk.MEDIUM, 0.60,
                    Outcome((12, 22), (5, 10), "Thermal conversion successful. The vent composition suggests a deep mantle rich in rare earths."),
                    Outcome((-5, -2), (2, 5), "An eruption destroys the collectors. Heat damage to ship's undercarriage."),
                ),
                EventChoice(
                    "Thermal imaging scan", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Vent system mapped. The heat patterns reveal the planet's internal structure."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "heat_artifact", "Heat-Shielded Artifact",
            "Something metallic glints in a lava flow on {planetName}. It should have melted, but "
            "it's structurally intact at 1,200°C.",
            Rarity.RARE,
            (
                EventChoice(
                    "Retrieve with shielded drone", Risk.HIGH, 0.45,
                    Outcome((0, 0), (25, 40), "The artifact is a perfect sphere of unknown alloy. It's warm to the touch but contains intricate internal structures."),
                    Outcome((-8, -4), (5, 12), "Drone lost in a lava surge. Telemetry before loss suggests the artifact was artificially placed."),
                ),
                EventChoice(
                    "Spectrometric analysis from orbit", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 15), "The alloy has a melting point beyond any known material. Composition logged for further study."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "volcanic_minerals", "Volcanic Deposits",
            "Recent eruptions on {planetName} have brought rare heavy elements to the surface. The "
            "cooling flows shimmer with metallic veins.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Mine the cooling flows", Risk.MEDIUM, 0.60,
                    Outcome((6, 14), (8, 16), "Heavy element extraction successful. Platinum-group metals in abundance."),
                    Outcome((-4, -2), (3, 6), "The flow reignites unexpectedly. Partial collection before retreat."),
                ),
                EventChoice(
                    "Orbital spectrometry", Risk.SAFE, 1.0,
                    Outcome((0, 0), (4, 9), "Surface composition mapped in detail."),
                ),
            ),
            only,
        ),
    ]


def _ocean_events() -> list[EventTemplate]:
    only = (PlanetType.OCEAN,)
    return [
        EventTemplate(
            "deep_dive", "Abyssal Discovery",
            "{planetName}'s oceans are kilometers deep. Sonar pings return echoes that suggest "
            "massive structures on the ocean floor.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Deploy deep submersible", Risk.HIGH, 0.50,
                    Outcome((0, 0), (20, 35), "Crystalline spires rise from the ocean floor, a natural formation that concentrates thermal energy like a living city."),
                    Outcome((-8, -4), (5, 12), "Submersible crushed by pressure at depth. Black box data recovered from surface debris."),
                ),
                EventChoice(
                    "Sonar mapping only", Risk.SAFE, 1.0,
                    Outcome((0, 0), (8, 15), "Detailed bathymetric map of the ocean floor. Multiple anomalous structures identified."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "aquatic_signals", "Aquatic Intelligence",
            "Hydrophone arrays detect complex acoustic patterns in {planetName}'s oceans. The "
            "sounds have grammar-like structure.",
            Rarity.RARE,
            (
                EventChoice(
                    "Attempt acoustic contact", Risk.MEDIUM, 0.55,
                    Outcome((0, 0), (25, 40), "The ocean responds to your transmission with new patterns. A dialogue begins. The implications are world-changing."),
                    Outcome((-5, -2), (8, 15), "The ocean goes silent after your transmission. Perhaps it was startled. Recording of pre-contact sounds preserved."),
                ),
                EventChoice(
                    "Listen and record", Risk.SAFE, 1.0,
                    Outcome((0, 0), (12, 20), "Hours of acoustic data captured. Linguists will study this for years."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "tidal_energy", "Tidal Resonance",
            "{planetName}'s tidal forces create standing waves of extraordinary power. The energy "
            "is rhythmic, predictable, and immense.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Tidal energy harvest", Risk.MEDIUM, 0.65,
                    Outcome((10, 20), (5, 10), "Energy conversion yields significant fuel reserves. The tidal dynamics are beautifully complex."),
                    Outcome((-4, -2), (2, 5), "A rogue wave damages the collection array. Modest energy captured before retrieval."),
                ),
                EventChoice(
                    "Tidal pattern analysis", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "The tidal model reveals this planet has three gravitational influences. There may be a hidden moon."),
                ),
            ),
            only,
        ),
    ]


def _sub_neptune_events() -> list[EventTemplate]:
    only = (PlanetType.WATER,)
    return [
        EventTemplate(
            "cloud_city", "Cloud Formations",
            "Enormous convective cells in {planetName}'s atmosphere create cathedral-like cloud "
            "structures. Stable enough to land on, theoretically.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Atmospheric insertion", Risk.HIGH, 0.45,
                    Outcome((5, 12), (15, 28), "Inside the cloud structure: ice crystals arranged in fractal patterns, a natural computer of sorts."),
                    Outcome((-10, -5), (5, 10), "Turbulence overwhelms stabilizers. Emergency ascent with partial atmospheric samples."),
                ),
                EventChoice(
                    "Spectral cloud analysis", Risk.SAFE, 1.0,
                    Outcome((0, 0), (6, 12), "Cloud composition analysis reveals exotic chemistry. Water-ammonia gradients create natural distilleries."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "atm_harvesting", "Atmospheric Harvesting",
            "{planetName}'s dense atmosphere contains hydrogen compounds that can be processed into "
            "fuel. The concentration is unusually high.",
            Rarity.COMMON,
            (
                EventChoice(
                    "Extended harvesting run", Risk.MEDIUM, 0.65,
                    Outcome((15, 25), (3, 8), "Fuel tanks topped off. The atmospheric chemistry suggests recent cometary bombardment."),
                    Outcome((2, 5), (2, 4), "Pressure fluctuations cut the run short. Partial harvest completed."),
                ),
                EventChoice(
                    "Quick surface skim", Risk.SAFE, 1.0,
                    Outcome((6, 12), (2, 5), "Conservative skim. Safe and efficient."),
                ),
            ),
            only,
        ),
        EventTemplate(
            "pressure_anomaly", "Pressure Anomaly",
            "A region of {planetName}'s atmosphere maintains impossibly low pressure: a bubble of "
            "near-vacuum in an otherwise dense world.",
            Rarity.UNCOMMON,
            (
                EventChoice(
                    "Enter the bubble", Risk.MEDIUM, 0.60,
                    Outcome((0, 0), (12, 22), "Inside the bubble: perfect clarity. The low pressure zone is maintained by some kind of energy field of unknown origin."),
                    Outcome((-6, -3), (4, 8), "The bubble collapses as you enter. Rapid pressure equalization damages hull plating."),
                ),
                EventChoice(
                    "Probe from outside", Risk.SAFE, 1.0,
                    Outcome((0, 0), (5, 10), "Measurements of the bubble's boundary suggest it's artificially maintained. By what?"),
                ),
            ),
            only,
        ),
    ]


EVENT_TEMPLATES: list[EventTemplate] = [
    *_universal_events(),
    *_terran_events(),
    *_desert_events(),
    *_ice_events(),
    *_gas_giant_events(),
    *_lava_events(),
    *_ocean_events(),
    *_sub_neptune_events(),
]

_TEMPLATES_BY_ID: dict[str, EventTemplate] = {t.id: t for t in EVENT_TEMPLATES}


def get_template(template_id: str) -> EventTemplate | None:
    return _TEMPLATES_BY_ID.get(template_id)


# ---------------------------------------------------------------------------
# Selection and resolution
# ---------------------------------------------------------------------------

def _fill_placeholders(text: str, planet: Planet, star: Star) -> str:
    return (
        text.replace("{planetName}", planet.name)
        .replace("{planetType}", planet.label)
        .replace("{starName}", star.name)
        .replace("{starClass}", star.spectral_class.value)
    )


def generate_planet_event(planet: Planet, star: Star, state: PlayerState) -> EventInstance | None:
    """The planet's encounter, or None if it has none or it was resolved.

    Draws from ``Mulberry32(hash_int(planet.seed, 9999))``: the occurrence
    roll, then the index into the rarity-weighted pool.
    """
    key = planet_key(star.id, planet.id)
    if key in state.resolved_events:
        return None

    rng = Mulberry32(hash_int(planet.seed, EVENT_SALT))
    if rng.random() > EVENT_CHANCE:
        return None

    pool: list[EventTemplate] = []
    for template in EVENT_TEMPLATES:
        if template.applies_to(planet.type):
            pool.extend([template] * template.rarity.weight)
    if not pool:
        return None
    template = pool[rng.index(len(pool))]

    choices = list(template.choices)
    if get_upgrade_effects(state).diplomacy and template.id not in DIPLOMACY_EXEMPT:
        choices.append(DIPLOMACY_CHOICE)

    return EventInstance(
        template_id=template.id,
        title=template.title,
        description=_fill_placeholders(template.description, planet, star),
        choices=choices,
        planet_key=key,
        planet_seed=planet.seed,
    )


def resolve_choice(event: EventInstance, choice_index: int, state: PlayerState) -> ChoiceResult:
    """Resolve one choice and record the encounter as finished.

    Draws from ``Mulberry32(hash_int(planet_seed, index * 1000 + 7777))``:
    success roll, fuel interpolation, data interpolation. Out-of-range
    indices and already resolved encounters give a zero-effect failure.
    """
    if not 0 <= choice_index < len(event.choices) or event.planet_key in state.resolved_events:
        return ChoiceResult(success=False, fuel=0, data=0, lore=None)

    choice = event.choices[choice_index]
    effects = get_upgrade_effects(state)
    rng = Mulberry32(hash_int(event.planet_seed, choice_index * 1000 + RESOLVE_SALT))

    roll = rng.random()
    if choice.risk is Risk.SAFE:
        success = True
    else:
        success = roll < min(choice.success_rate + effects.success_rate_bonus, MAX_SUCCESS_RATE)

    outcome = choice.success if success else (choice.failure or choice.success)
    fuel = round_half_up(lerp(*outcome.fuel, rng.random()))
    data_raw = round_half_up(lerp(*outcome.data, rng.random()))
    data = round_half_up(data_raw * effects.data_gain_mult)

    state.resolved_events[event.planet_key] = {
        "template_id": event.template_id,
        "choice": choice_index,
        "success": success,
    }
    logger.info(
        "Resolved %s at %s choice %d: success=%s fuel=%d data=%d",
        event.template_id, event.planet_key, choice_index, success, fuel, data,
    )
    return ChoiceResult(success=success, fuel=fuel, data=data, lore=outcome.lore)
