"""Ship domain model for the Broadside engine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

GRID_SIZE = 5
COLUMN_LABELS = "ABCDE"

_COORD_PATTERN = re.compile(r"^[A-E][1-5]$")


@dataclass(frozen=True, order=True)
class Coordinate:
    """Immutable grid coordinate, zero-based column and row.

    Column 0 is ``A`` and row 0 is ``1``; ``Coordinate(2, 3)`` is ``C4``.
    Out-of-range values are representable so candidate ships can be checked.
    """

    col: int
    row: int

    @classmethod
    def parse(cls, text: str) -> Coordinate:
        """Parse exact notation such as ``C4``; anything else raises ``ValueError``.

        No case folding or trimming happens here; the CLI normalises operator input.
        """
        if not _COORD_PATTERN.fullmatch(text):
            raise ValueError(f"Invalid coordinate {text!r}; expected A1 to E5.")
        return cls(COLUMN_LABELS.index(text[0]), int(text[1]) - 1)

    @property
    def label(self) -> str:
        if 0 <= self.col < len(COLUMN_LABELS):
            column = COLUMN_LABELS[self.col]
        else:
            column = chr(ord("A") + self.col)
        return f"{column}{self.row + 1}"

    def is_valid(self) -> bool:
        return 0 <= self.col < GRID_SIZE and 0 <= self.row < GRID_SIZE

    def neighbours(self) -> list[Coordinate]:
        """Return the in-bounds 8-neighbourhood of this coordinate."""
        found: list[Coordinate] = []
        for delta_col in (-1, 0, 1):
            for delta_row in (-1, 0, 1):
                if delta_col == 0 and delta_row == 0:
                    continue
                neighbour = Coordinate(self.col + delta_col, self.row + delta_row)
                if neighbour.is_valid():
                    found.append(neighbour)
        return found

    def __str__(self) -> str:
        return self.label


def all_coordinates() -> list[Coordinate]:
    """Every coordinate of a grid, column-major (A1, A2, ... E5)."""
    return [Coordinate(col, row) for col in range(GRID_SIZE) for row in range(GRID_SIZE)]


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "H"
    VERTICAL = "V"

    def rotated(self) -> Orientation:
        return Orientation.VERTICAL if self is Orientation.HORIZONTAL else Orientation.HORIZONTAL


class ShipType(Enum):
    """Fleet composition: one carrier and one corvette per team."""

    CARRIER = "carrier"
    CORVETTE = "corvette"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return _SHIP_LENGTHS[self]

    @classmethod
    def from_tag(cls, tag: str) -> ShipType:
        try:
            return cls(tag.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown ship type {tag!r}.") from exc


_SHIP_LENGTHS = {ShipType.CARRIER: 4, ShipType.CORVETTE: 2}

# Larger ship first.
FLEET: tuple[ShipType, ...] = (ShipType.CARRIER, ShipType.CORVETTE)


def ship_positions(start: Coordinate, orientation: Orientation, length: int) -> tuple[Coordinate, ...]:
    coords: list[Coordinate] = []
    for offset in range(length):
        if orientation is Orientation.HORIZONTAL:
            coords.append(Coordinate(start.col + offset, start.row))
        else:
            coords.append(Coordinate(start.col, start.row + offset))
    return tuple(coords)


@dataclass
class Ship:
    """A single ship instance; its sunk flag is derived from a grid's hit set."""

    ship_type: ShipType
    start: Coordinate
    orientation: Orientation
    is_sunk: bool = field(default=False, compare=False)
    _coordinates: tuple[Coordinate, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._coordinates = ship_positions(self.start, self.orientation, self.ship_type.length)

    @property
    def size(self) -> int:
        return self.ship_type.length

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self._coordinates)

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self._coordinates

    def check_sunk(self, hit_positions: set[Coordinate]) -> bool:
        """Recompute and store the sunk flag against the given hit set."""
        self.is_sunk = all(coord in hit_positions for coord in self._coordinates)
        return self.is_sunk

    def overlaps(self, other: Ship) -> bool:
        """Return True if any coordinate overlaps with another ship."""
        return bool(set(self._coordinates) & set(other._coordinates))

    def moved_to(self, start: Coordinate) -> Ship:
        return Ship(self.ship_type, start, self.orientation)

    def rotated(self) -> Ship:
        """Same anchor, other orientation."""
        return Ship(self.ship_type, self.start, self.orientation.rotated())
