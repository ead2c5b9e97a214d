"""Shared fixtures: games with hand-placed fleets."""

from __future__ import annotations

import pytest

from broadside.engine.config import GameConfig
from broadside.engine.game import BroadsideGame
from broadside.engine.ship import Coordinate, Orientation, Ship, ShipType
from broadside.engine.teams import TeamId

H = Orientation.HORIZONTAL
V = Orientation.VERTICAL

# C3 is water on every grid of this layout.
DISTINCT_LAYOUT = {
    TeamId.A: [("A1", H), ("A5", H)],
    TeamId.B: [("A1", V), ("C5", H)],
    TeamId.C: [("B2", H), ("E4", V)],
    TeamId.D: [("E1", V), ("A5", H)],
}

# Every team except A shares one layout, so A can sink all three at once.
MIRRORED_LAYOUT = {
    TeamId.A: [("A2", H), ("D4", V)],
    TeamId.B: [("A1", H), ("A5", H)],
    TeamId.C: [("A1", H), ("A5", H)],
    TeamId.D: [("A1", H), ("A5", H)],
}

SINKING_SHOTS = ["A1", "B1", "C1", "D1", "A5", "B5"]


def place_layout(game: BroadsideGame, layout: dict) -> None:
    for team in game.teams:
        for ship_type, (start, orientation) in zip((ShipType.CARRIER, ShipType.CORVETTE), layout[team.id]):
            placed = game.place_ship(team.id, Ship(ship_type, Coordinate.parse(start), orientation))
            assert placed, f"fixture layout rejected for {team.id}"


@pytest.fixture
def distinct_game() -> BroadsideGame:
    game = BroadsideGame(rng_seed=7)
    place_layout(game, DISTINCT_LAYOUT)
    assert game.start_game()
    return game


@pytest.fixture
def mirrored_game() -> BroadsideGame:
    game = BroadsideGame(rng_seed=7)
    place_layout(game, MIRRORED_LAYOUT)
    assert game.start_game()
    return game


@pytest.fixture
def three_team_game() -> BroadsideGame:
    game = BroadsideGame(config=GameConfig(team_count=3), rng_seed=7)
    place_layout(
        game,
        {
            TeamId.A: [("A2", H), ("D4", V)],
            TeamId.B: [("A1", H), ("A5", H)],
            TeamId.C: [("A3", H), ("D5", H)],
        },
    )
    assert game.start_game()
    return game
