"""Randomised fleet placement by bounded rejection sampling."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from broadside.telemetry import get_tracer

from .board import Grid
from .ship import FLEET, GRID_SIZE, Coordinate, Orientation, Ship, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.placement")

DEFAULT_MAX_ATTEMPTS = 100


@dataclass(frozen=True)
class PlacementFailure:
    """A ship that could not be placed within the attempt budget."""

    owner: str
    ship_type: ShipType
    attempts: int


@dataclass
class PlacementReport:
    owner: str
    placed: list[Ship] = field(default_factory=list)
    failures: list[PlacementFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures


def generate_ship(ship_type: ShipType, rng: random.Random) -> Ship:
    """Draw an orientation, then an anchor that keeps the ship inside the grid."""
    orientation = rng.choice(list(Orientation))
    length = ship_type.length
    max_col = GRID_SIZE - length if orientation is Orientation.HORIZONTAL else GRID_SIZE - 1
    max_row = GRID_SIZE - length if orientation is Orientation.VERTICAL else GRID_SIZE - 1
    start = Coordinate(rng.randint(0, max_col), rng.randint(0, max_row))
    return Ship(ship_type, start, orientation)


def place_random_ship(
    grid: Grid,
    ship_type: ShipType,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Ship | PlacementFailure:
    for attempt in range(1, max_attempts + 1):
        candidate = generate_ship(ship_type, rng)
        if grid.place_ship(candidate):
            logger.debug(
                "random_ship_placed",
                extra={"ship_type": ship_type.value, "attempts": attempt, "owner": grid.owner},
            )
            return candidate
    logger.error(
        "random_ship_placement_exhausted",
        extra={"ship_type": ship_type.value, "attempts": max_attempts, "owner": grid.owner},
    )
    return PlacementFailure(grid.owner, ship_type, max_attempts)


def place_random_fleet(
    grid: Grid,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    fleet: tuple[ShipType, ...] = FLEET,
) -> PlacementReport:
    """Place each ship of ``fleet`` in order; failures are reported, not raised."""
    with tracer.start_as_current_span("placement.random_fleet") as span:
        span.set_attribute("grid.owner", grid.owner)
        report = PlacementReport(owner=grid.owner)
        for ship_type in fleet:
            outcome = place_random_ship(grid, ship_type, rng, max_attempts)
            if isinstance(outcome, PlacementFailure):
                report.failures.append(outcome)
            else:
                report.placed.append(outcome)
        span.set_attribute("placement.complete", report.complete)
        return report
