"""Per-team grid management for the Broadside engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from broadside.telemetry import get_meter, get_tracer

from .ship import FLEET, Coordinate, Ship, ShipType, all_coordinates

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a grid",
)


class CellState(Enum):
    """Visible state of a cell."""

    NEUTRAL = "neutral"
    HIT = "hit"
    WATER = "water"


class ShotResult(Enum):
    """Outcome of one coordinate fired at one grid."""

    HIT = "hit"
    MISS = "miss"
    ALREADY = "already"


@dataclass
class Cell:
    coordinate: Coordinate
    contains_ship: bool = False
    already_aimed: bool = False
    state: CellState = CellState.NEUTRAL


@dataclass(frozen=True)
class GridShot:
    """Result of :meth:`Grid.shoot` on one grid."""

    grid_id: str
    result: ShotResult
    points: int = 0
    sunk_ship: Ship | None = None


@dataclass
class Grid:
    """A team's 5×5 board: cells, ships and the coordinates hit so far."""

    owner: str
    allow_contact: bool = True
    cells: dict[Coordinate, Cell] = field(init=False)
    ships: list[Ship] = field(default_factory=list)
    hit_positions: list[Coordinate] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.cells = {coord: Cell(coord) for coord in all_coordinates()}

    def is_valid_placement(self, ship: Ship, ignore: Ship | None = None) -> bool:
        """Check fleet slot, bounds, overlap and (unless contact is allowed) adjacency.

        ``ignore`` excludes one placed ship from the check, for moves and rotations.
        """
        others = [existing for existing in self.ships if existing is not ignore]
        placed_types = [existing.ship_type for existing in others]
        if placed_types.count(ship.ship_type) >= FLEET.count(ship.ship_type):
            return False

        coords = ship.coordinates()
        if not all(coord.is_valid() for coord in coords):
            return False

        occupied = {coord for existing in others for coord in existing.coordinates()}
        if any(coord in occupied for coord in coords):
            return False

        if not self.allow_contact:
            for coord in coords:
                if any(neighbour in occupied for neighbour in coord.neighbours()):
                    return False

        return True

    def place_ship(self, ship: Ship) -> bool:
        """Add ship to the grid if placement is valid; no mutation otherwise."""
        with tracer.start_as_current_span("grid.place_ship") as span:
            span.set_attribute("ship.type", ship.ship_type.value)
            span.set_attribute("ship.start", ship.start.label)
            span.set_attribute("ship.orientation", ship.orientation.value)
            span.set_attribute("grid.owner", self.owner)
            log_fields = {
                "owner": self.owner,
                "ship_type": ship.ship_type.value,
                "orientation": ship.orientation.value,
                "start": ship.start.label,
            }
            if not self.is_valid_placement(ship):
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.debug("ship_placement_failed", extra=log_fields)
                return False

            for coord in ship.coordinates():
                self.cells[coord].contains_ship = True
            self.ships.append(ship)
            ship.check_sunk(set(self.hit_positions))
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info("ship_placed", extra=log_fields)
            return True

    def move_ship(self, index: int, start: Coordinate) -> bool:
        """Re-anchor a placed ship, keeping its orientation."""
        if not 0 <= index < len(self.ships):
            return False
        return self._replace_ship(index, self.ships[index].moved_to(start))

    def rotate_ship(self, index: int) -> bool:
        """Swap a placed ship's orientation around its anchor cell."""
        if not 0 <= index < len(self.ships):
            return False
        return self._replace_ship(index, self.ships[index].rotated())

    def _replace_ship(self, index: int, candidate: Ship) -> bool:
        current = self.ships[index]
        if not self.is_valid_placement(candidate, ignore=current):
            logger.debug(
                "ship_edit_rejected",
                extra={"owner": self.owner, "ship_type": current.ship_type.value},
            )
            return False
        for coord in current.coordinates():
            self.cells[coord].contains_ship = False
        for coord in candidate.coordinates():
            self.cells[coord].contains_ship = True
        self.ships[index] = candidate
        candidate.check_sunk(set(self.hit_positions))
        logger.info(
            "ship_moved",
            extra={
                "owner": self.owner,
                "ship_type": candidate.ship_type.value,
                "start": candidate.start.label,
                "orientation": candidate.orientation.value,
            },
        )
        return True

    def shoot(self, coord: Coordinate) -> GridShot:
        """Resolve one shot against this grid."""
        with tracer.start_as_current_span("grid.shoot") as span:
            span.set_attribute("shot.coord", coord.label)
            span.set_attribute("grid.owner", self.owner)
            if not coord.is_valid():
                logger.error("shot_out_of_bounds", extra={"coord": coord.label, "owner": self.owner})
                raise ValueError("Shot out of bounds.")

            cell = self.cells[coord]
            if cell.already_aimed:
                span.set_attribute("shot.outcome", ShotResult.ALREADY.value)
                SHOT_COUNTER.add(1, attributes={"outcome": "already", "owner": self.owner})
                return GridShot(self.owner, ShotResult.ALREADY)

            cell.already_aimed = True
            if not cell.contains_ship:
                cell.state = CellState.WATER
                span.set_attribute("shot.outcome", ShotResult.MISS.value)
                SHOT_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.debug("shot_miss", extra={"coord": coord.label, "owner": self.owner})
                return GridShot(self.owner, ShotResult.MISS)

            cell.state = CellState.HIT
            if coord not in self.hit_positions:
                self.hit_positions.append(coord)
            hits = set(self.hit_positions)
            sunk_ship: Ship | None = None
            for ship in self.ships:
                if ship.occupies(coord) and ship.check_sunk(hits):
                    sunk_ship = ship
            span.set_attribute("shot.outcome", ShotResult.HIT.value)
            span.set_attribute("shot.sunk", sunk_ship is not None)
            SHOT_COUNTER.add(1, attributes={"outcome": "hit", "owner": self.owner})
            logger.info(
                "shot_hit",
                extra={
                    "coord": coord.label,
                    "owner": self.owner,
                    "sunk": sunk_ship.ship_type.value if sunk_ship else None,
                },
            )
            return GridShot(self.owner, ShotResult.HIT, points=1, sunk_ship=sunk_ship)

    def reset_cell(self, coord: Coordinate) -> None:
        """Return a cell to unaimed/neutral and drop it from the hit set."""
        cell = self.cells[coord]
        cell.already_aimed = False
        cell.state = CellState.NEUTRAL
        if coord in self.hit_positions:
            self.hit_positions.remove(coord)

    def refresh_sunk(self) -> None:
        """Recompute every ship's sunk flag from the hit set."""
        hits = set(self.hit_positions)
        for ship in self.ships:
            ship.check_sunk(hits)

    def is_eliminated(self) -> bool:
        """True once every ship is sunk; an empty grid is never eliminated."""
        return bool(self.ships) and all(ship.is_sunk for ship in self.ships)

    def is_complete(self, fleet: tuple[ShipType, ...] = FLEET) -> bool:
        """True when the placed ships are exactly ``fleet``, one of each slot."""
        placed = sorted(ship.ship_type.value for ship in self.ships)
        return placed == sorted(ship_type.value for ship_type in fleet)

    def get_cell_state(self, coord: Coordinate) -> CellState:
        return self.cells[coord].state

    def unaimed_coordinates(self) -> list[Coordinate]:
        return [coord for coord, cell in self.cells.items() if not cell.already_aimed]
