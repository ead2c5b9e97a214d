"""Tests for randomised fleet placement."""

import random

from broadside.engine.board import Grid
from broadside.engine.placement import generate_ship, place_random_fleet
from broadside.engine.ship import Coordinate, Orientation, Ship, ShipType


def test_generated_ships_always_fit_the_grid() -> None:
    rng = random.Random(0)
    for _ in range(200):
        for ship_type in ShipType:
            ship = generate_ship(ship_type, rng)
            assert all(coord.is_valid() for coord in ship.coordinates())


def test_random_fleet_is_complete_and_respects_no_contact() -> None:
    for seed in range(20):
        grid = Grid(owner="a", allow_contact=False)
        report = place_random_fleet(grid, random.Random(seed))
        assert report.complete
        assert [ship.ship_type for ship in grid.ships] == [ShipType.CARRIER, ShipType.CORVETTE]

        carrier, corvette = grid.ships
        assert not carrier.overlaps(corvette)
        carrier_zone = {n for coord in carrier.coordinates() for n in coord.neighbours()}
        assert not carrier_zone & set(corvette.coordinates())
        occupied = {coord for coord, cell in grid.cells.items() if cell.contains_ship}
        assert occupied == set(carrier.coordinates()) | set(corvette.coordinates())


class StuckRandom(random.Random):
    """Always proposes a horizontal ship anchored at A1."""

    def choice(self, seq):
        return Orientation.HORIZONTAL

    def randint(self, a, b):
        return 0


def test_exhausted_attempts_are_reported_not_raised() -> None:
    grid = Grid(owner="b")
    assert grid.place_ship(Ship(ShipType.CARRIER, Coordinate.parse("A1"), Orientation.HORIZONTAL))

    report = place_random_fleet(grid, StuckRandom(), max_attempts=25, fleet=(ShipType.CORVETTE,))
    assert not report.complete
    assert report.placed == []
    failure = report.failures[0]
    assert failure.owner == "b"
    assert failure.ship_type is ShipType.CORVETTE
    assert failure.attempts == 25
    assert len(grid.ships) == 1
    assert not grid.is_complete()
