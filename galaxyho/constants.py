"""Game-wide constants for galaxyho."""

TITLE = "Galaxy HO"
GAME_VERSION = "5.0.0"

# --- Galaxy field ---
DEFAULT_GALAXY_SEED = 42
STAR_COUNT = 100
FIELD_RADIUS = 80.0
FIELD_HEIGHT = 12.0
MIN_STAR_DIST = 8.0
MAX_CONNECTIONS = 5
CONNECTION_RANGE = 28.0
PLACEMENT_ATTEMPTS_PER_STAR = 100

# --- Pulsars ---
PULSAR_CHANCE = 0.04
PULSE_SPEED_MIN = 2.0
PULSE_SPEED_MAX = 6.0

# --- Stellar remnants (inclusive count ranges) ---
BLACK_HOLE_COUNT = (1, 2)
NEUTRON_STAR_COUNT = (1, 3)
WHITE_DWARF_COUNT = (2, 4)
NEUTRON_PULSE_RATE = 8.0

# --- Planet orbits ---
ORBIT_BASE_STAR_FACTOR = 12.0
ORBIT_BASE_OFFSET = 3.0
ORBIT_SPACING = (3.5, 6.0)
ORBIT_SPACING_EXPONENT = 1.35
ORBIT_SPEED = (0.15, 0.30)
ORBIT_SPEED_FALLOFF = 1.4
ORBIT_SPEED_MAX_RATIO = 0.92  # outer planet never faster than this share of the inner one
SPECIAL_CHANCE = 0.10

# --- Moons ---
MOON_ORBIT_FACTOR = (1.8, 3.0)  # multiples of planet visual size
MOON_ORBIT_SPEED = (0.4, 1.2)
MOON_SIZE = (0.08, 0.2)

# --- Asteroid belts ---
ASTEROID_BELT_CHANCE = 0.35
ASTEROID_BELT_MIN_GAP = 3.0
ASTEROID_BELT_MARGIN = 0.2

# --- Comets ---
COMET_CHANCE = 0.3
COMET_MIN_PER_SYSTEM = 0
COMET_MAX_PER_SYSTEM = 3
COMET_SEMI_MAJOR = (30.0, 70.0)
COMET_ECCENTRICITY = (0.5, 0.9)
COMET_MAX_INCLINATION = 0.4

# --- Economy ---
BASE_FUEL = 100
BASE_MAX_FUEL = 100
FUEL_PER_LY = 1.5
BASE_REGEN_RATE = 0.05
LOW_FUEL_THRESHOLD = 20
STARTING_DATA = 0
SCAN_DATA_REWARD = (3, 8)
EXPLORE_DATA_REWARD = (3, 6)
MINING_DATA_REWARD = (2, 6)
DEFAULT_PLANET_FUEL = (2, 6)
EVENT_CHANCE = 0.7
MAX_SUCCESS_RATE = 0.98
BEACON_RANGE_HOPS = 2

# --- Flight simulator ---
PARKING_ORBIT_BUFFER = 6.0
FALLBACK_ORBIT_RADIUS = 20.0
PARKING_SPEED = 0.12  # rad/s
BURN_DURATION = 1.2  # seconds
BURN_RADIUS_DRIFT = 0.6
DEFAULT_GM = 400.0
MAX_SUBSTEP = 1.0 / 120.0
TRANSFER_TIMEOUT_MULT = 3.0
STAR_SOFTENING = 2.0
PLANET_GRAVITY_FACTOR = 0.02  # planet mass as a share of the star's
GUIDANCE_GAIN = 4.0
APPROACH_CATCHUP_RATE = 1.5  # rad/s
DOCKED_ORBIT_MULT = 1.6
DOCKED_SPIN = 1.4  # rad/s
DOCKED_TILT = 0.25
SLINGSHOT_ENABLED = True
SLINGSHOT_PULL = 0.5
