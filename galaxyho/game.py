"""galaxyho: game session (state router).

``GameSession`` owns the player state and the generated galaxy and routes
every player action through the economy, event and flight modules. It is
driven by ``tick()`` once per frame; rendering lives elsewhere.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path

from .constants import BEACON_RANGE_HOPS, DEFAULT_GALAXY_SEED, GAME_VERSION, TITLE
from .logging_config import setup_logging
from .models.events import ChoiceResult, EventInstance, generate_planet_event, resolve_choice
from .models.galaxy import Galaxy, Star, generate_galaxy, star_distance
from .models.gameplay import (
    add_data,
    add_fuel,
    calculate_jump_fuel_cost,
    can_jump,
    consume_fuel,
    get_upgrade_effects,
    roll_explore_data,
    roll_mining_yield,
    roll_planet_fuel,
    roll_scan_data,
    update_solar_regen,
)
from .models.rng import round_half_up
from .models.save import load_state, save_state
from .models.ship import Arrival, ShipFlight
from .models.state import PlayerState, create_state, ensure_home_reachable
from .models.system import Planet, PlanetType, generate_planets, planet_key
from .models.upgrades import UpgradeCategory, purchase_upgrade
from .states import View

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Resources gained by a planet action."""

    fuel: int = 0
    data: int = 0


def _home_planet(planets: list[Planet]) -> int | None:
    """Most habitable terran world, else the first planet."""
    terran = [p for p in planets if p.type is PlanetType.TERRAN]
    if terran:
        return max(terran, key=lambda p: (p.habitability, -p.id)).id
    return planets[0].id if planets else None


class GameSession:
    """Core session class: one galaxy, one player, one ship."""

    def __init__(self, state: PlayerState, galaxy: Galaxy, time: float = 0.0) -> None:
        self.state = state
        self.galaxy = galaxy
        self.time = time
        self._planets: dict[int, list[Planet]] = {}
        ensure_home_reachable(state, galaxy)
        self.ship = self._make_ship()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def new(cls, seed: int = DEFAULT_GALAXY_SEED) -> GameSession:
        galaxy = generate_galaxy(seed)
        state = create_state(seed)
        state.visited_stars.add(0)
        state.ship_star_id = 0
        home = galaxy.home_star
        state.ship_planet_id = _home_planet(generate_planets(home))
        session = cls(state, galaxy)
        state.add_journal("start", star_id=0, planet_id=state.ship_planet_id, star_name=home.name)
        logger.info("New game in %s (seed %d), home star %s", galaxy.name, seed, home.name)
        return session

    @classmethod
    def resume(cls, path: Path | None = None, seed: int = DEFAULT_GALAXY_SEED) -> GameSession:
        """Continue from a save, or start fresh when there is none."""
        state = load_state(path)
        if state is None:
            return cls.new(seed)
        galaxy = generate_galaxy(state.galaxy_seed)
        if not 0 <= state.ship_star_id < len(galaxy.stars):
            logger.warning("Saved ship star %d is out of range; returning home", state.ship_star_id)
            state.ship_star_id = 0
            state.ship_planet_id = None
        logger.info("Resumed game in %s with %d stars visited", galaxy.name, len(state.visited_stars))
        return cls(state, galaxy)

    def save(self, path: Path | None = None) -> dict:
        return save_state(self.state, path)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def ship_star(self) -> Star:
        return self.galaxy.get_star(self.state.ship_star_id)

    @property
    def current_star(self) -> Star | None:
        if self.state.current_star_id is None:
            return None
        return self.galaxy.get_star(self.state.current_star_id)

    def planets_for(self, star_id: int) -> list[Planet]:
        """System planets, generated on first request and cached."""
        if star_id not in self._planets:
            self._planets[star_id] = generate_planets(self.galaxy.get_star(star_id))
        return self._planets[star_id]

    def get_planet(self, star_id: int, planet_id: int) -> Planet | None:
        if not 0 <= star_id < len(self.galaxy.stars):
            return None
        for planet in self.planets_for(star_id):
            if planet.id == planet_id:
                return planet
        return None

    def _make_ship(self) -> ShipFlight:
        star = self.ship_star
        return ShipFlight(
            self.planets_for(star.id),
            star_scale=star.spec.star_scale,
            docked_planet_id=self.state.ship_planet_id,
            time=self.time,
        )

    def _is_docked_at(self, star_id: int, planet_id: int) -> bool:
        return (
            self.state.ship_star_id == star_id
            and self.state.ship_planet_id == planet_id
            and self.ship.docked_planet_id == planet_id
        )

    # ------------------------------------------------------------------
    # Galaxy navigation
    # ------------------------------------------------------------------

    def jump_targets(self) -> list[Star]:
        """Reachable stars within engine range of the ship."""
        hops = get_upgrade_effects(self.state).jump_range
        in_range = self.galaxy.stars_within_hops({self.state.ship_star_id}, hops)
        in_range.discard(self.state.ship_star_id)
        return [self.galaxy.stars[i] for i in sorted(in_range) if i in self.state.reachable_stars]

    def jump_cost(self, star_id: int) -> int:
        return calculate_jump_fuel_cost(self.ship_star, self.galaxy.get_star(star_id), self.state)

    def jump_to_star(self, star_id: int) -> bool:
        """Jump the ship to another star. Returns False if not allowed."""
        state = self.state
        if self.ship.is_flying:
            return False
        if star_id not in {s.id for s in self.jump_targets()}:
            logger.debug("Star %d is not a jump target from %d", star_id, state.ship_star_id)
            return False

        origin = self.ship_star
        target = self.galaxy.get_star(star_id)
        if not can_jump(origin, target, state):
            logger.info("Not enough fuel to reach %s", target.name)
            return False

        cost = calculate_jump_fuel_cost(origin, target, state)
        consume_fuel(cost, state)
        state.total_jumps += 1
        state.ship_star_id = target.id
        state.ship_planet_id = None
        state.visited_stars.add(target.id)
        target.visited = True
        state.reachable_stars.update(target.adjacent_ids)
        if get_upgrade_effects(state).beacon_network:
            state.reachable_stars |= self.galaxy.stars_within_hops(state.visited_stars, BEACON_RANGE_HOPS)

        state.add_journal(
            "jump",
            star_id=target.id,
            from_star=origin.id,
            distance=round(star_distance(origin, target), 1),
            fuel_cost=cost,
        )
        self.ship = self._make_ship()
        logger.info("Jumped %s -> %s for %d fuel", origin.name, target.name, cost)
        return True

    def enter_system(self, star_id: int) -> bool:
        if star_id not in self.state.visited_stars:
            return False
        self.state.current_view = View.SYSTEM
        self.state.current_star_id = star_id
        self.state.add_journal("enter_system", star_id=star_id)
        return True

    def exit_system(self) -> None:
        self.state.current_view = View.GALAXY
        self.state.current_star_id = None

    # ------------------------------------------------------------------
    # Planet actions
    # ------------------------------------------------------------------

    def scan_planet(self, star_id: int, planet_id: int) -> ActionResult | None:
        """Scan once per planet, docked or with orbital scanners."""
        state = self.state
        planet = self.get_planet(star_id, planet_id)
        key = planet_key(star_id, planet_id)
        if planet is None or state.actions_for(key).scanned:
            return None
        orbital = get_upgrade_effects(state).orbital_scan and state.ship_star_id == star_id
        if not (orbital or self._is_docked_at(star_id, planet_id)):
            return None

        before = state.data
        add_data(roll_scan_data(planet), state)
        state.actions_for(key).scanned = True
        state.scanned_planets.add(key)
        state.total_scans += 1
        gained = state.data - before
        state.add_journal("scan_planet", star_id=star_id, planet_id=planet_id, data=gained)
        if planet.special:
            state.add_journal("discovery", star_id=star_id, planet_id=planet_id, special=planet.special)
            logger.info("Discovery on %s: %s", planet.name, planet.special)
        return ActionResult(data=gained)

    def mine_planet(self, star_id: int, planet_id: int) -> ActionResult | None:
        state = self.state
        planet = self.get_planet(star_id, planet_id)
        key = planet_key(star_id, planet_id)
        if planet is None or not self._is_docked_at(star_id, planet_id) or state.actions_for(key).mined:
            return None

        fuel_before, data_before = state.fuel, state.data
        add_fuel(round_half_up(roll_planet_fuel(planet) * get_upgrade_effects(state).fuel_gain_mult), state)
        add_data(roll_mining_yield(planet), state)
        state.actions_for(key).mined = True
        result = ActionResult(fuel=round_half_up(state.fuel - fuel_before), data=state.data - data_before)
        state.add_journal("mine_planet", star_id=star_id, planet_id=planet_id, fuel=result.fuel, data=result.data)
        return result

    def explore_planet(self, star_id: int, planet_id: int) -> ActionResult | None:
        state = self.state
        planet = self.get_planet(star_id, planet_id)
        key = planet_key(star_id, planet_id)
        if planet is None or not self._is_docked_at(star_id, planet_id) or state.actions_for(key).explored:
            return None

        before = state.data
        add_data(roll_explore_data(planet), state)
        state.actions_for(key).explored = True
        result = ActionResult(data=state.data - before)
        state.add_journal("explore_planet", star_id=star_id, planet_id=planet_id, data=result.data)
        return result

    # ------------------------------------------------------------------
    # Events and upgrades
    # ------------------------------------------------------------------

    def planet_event(self, star_id: int, planet_id: int) -> EventInstance | None:
        planet = self.get_planet(star_id, planet_id)
        if planet is None:
            return None
        return generate_planet_event(planet, self.galaxy.get_star(star_id), self.state)

    def resolve_event(self, event: EventInstance, choice_index: int) -> ChoiceResult:
        """Resolve an encounter and apply its fuel and data to the ship."""
        state = self.state
        already = event.planet_key in state.resolved_events
        result = resolve_choice(event, choice_index, state)
        if already or event.planet_key not in state.resolved_events:
            return result

        if result.fuel < 0:
            consume_fuel(-result.fuel, state)
        elif result.fuel > 0:
            add_fuel(result.fuel, state)
        state.data += result.data  # already scaled by the data multiplier

        star_id, planet_id = (int(part) for part in event.planet_key.split("-"))
        state.add_journal(
            "event",
            star_id=star_id,
            planet_id=planet_id,
            template_id=event.template_id,
            success=result.success,
            fuel=result.fuel,
            data=result.data,
        )
        return result

    def buy_upgrade(self, category: UpgradeCategory | str, tier: int) -> bool:
        if not purchase_upgrade(category, tier, self.state):
            return False
        self.state.add_journal("upgrade", category=UpgradeCategory(category).value, tier=tier)
        return True

    # ------------------------------------------------------------------
    # In-system flight
    # ------------------------------------------------------------------

    def fly_to_planet(self, planet_id: int) -> bool:
        planet = self.get_planet(self.state.ship_star_id, planet_id)
        if planet is None:
            return False
        speed = get_upgrade_effects(self.state).system_speed_mult
        if not self.ship.fly_to_planet(planet, self.time, speed_mult=speed):
            return False
        self.state.ship_planet_id = None
        return True

    def tick(self, time: float, delta_time: float) -> Arrival | None:
        """Advance one frame: solar regeneration and the ship."""
        self.time = time
        update_solar_regen(delta_time, self.state)
        arrival = self.ship.update(time, delta_time)
        if arrival is not None:
            self.state.ship_planet_id = arrival.planet_id
            self.state.add_journal("arrive", star_id=self.state.ship_star_id, planet_id=arrival.planet_id)
        return arrival


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    """Entry point for the galaxyho command."""
    parser = argparse.ArgumentParser(prog="galaxyho", description=f"{TITLE} {GAME_VERSION}")
    parser.add_argument("--seed", type=int, default=DEFAULT_GALAXY_SEED, help="galaxy seed for a new game")
    parser.add_argument("--new", action="store_true", help="ignore any existing save")
    parser.add_argument("--save-file", type=Path, default=None, help="save file location")
    parser.add_argument("--save", action="store_true", help="write the session back to disk")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.new:
        session = GameSession.new(args.seed)
    else:
        session = GameSession.resume(args.save_file, seed=args.seed)

    home = session.ship_star
    planets = session.planets_for(home.id)
    logger.info(
        "%s: %d stars, ship at %s (class %s, %d planets), fuel %.0f, data %d",
        session.galaxy.name,
        len(session.galaxy.stars),
        home.name,
        home.spectral_class.value,
        len(planets),
        session.state.fuel,
        session.state.data,
    )
    for star in session.jump_targets():
        logger.info("  jump target %-14s %3d fuel", star.name, session.jump_cost(star.id))

    if args.save:
        session.save(args.save_file)


if __name__ == "__main__":
    main()
