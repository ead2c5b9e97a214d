"""Persisted game-state schema shared by every display instance.

The JSON written to the shared slot uses camelCase keys::

    {
      "teams": [{"id": "a", "name": "Team A", "score": 0, "status": "active"}, ...],
      "grids": {"a": {"cells": {"A1": {"containsShip": true, ...}, ...},
                      "ships": [{"type": "carrier", "size": 4, "orientation": "H",
                                 "positions": ["A1", "B1", "C1", "D1"], "isSunk": false}],
                      "hitPositions": []}, ...},
      "currentTeam": "a",
      "gameState": "preparation",
      "shotHistory": [{"teamId": "a", "coord": "C4", "results": [...],
                       "pointsGained": 1, "timestamp": "..."}],
      "settings": {"allowContact": true, "muteSounds": false,
                   "showBoats": false, "gameEnding": false},
      "lastUpdate": 1700000000000
    }
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_LABEL = re.compile(r"^[A-E][1-5]$")
CELLS_PER_GRID = 25


def _check_label(value: str) -> str:
    if not _LABEL.match(value):
        raise ValueError(f"invalid coordinate {value!r}")
    return value


CoordLabel = Annotated[str, AfterValidator(_check_label)]
TeamKey = Literal["a", "b", "c", "d"]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TeamRecord(WireModel):
    id: TeamKey
    name: str
    score: int = Field(default=0, ge=0)
    status: Literal["active", "eliminated"] = "active"


class CellRecord(WireModel):
    contains_ship: bool = False
    already_aimed: bool = False
    state: Literal["neutral", "hit", "water"] = "neutral"


class ShipRecord(WireModel):
    type: Literal["carrier", "corvette"]
    size: int
    orientation: Literal["H", "V"]
    positions: list[CoordLabel]
    is_sunk: bool = False

    @model_validator(mode="after")
    def _size_matches_positions(self) -> "ShipRecord":
        if len(self.positions) != self.size:
            raise ValueError("ship size does not match its positions")
        return self


class GridRecord(WireModel):
    cells: dict[CoordLabel, CellRecord]
    ships: list[ShipRecord] = Field(default_factory=list)
    hit_positions: list[CoordLabel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _full_grid(self) -> "GridRecord":
        if len(self.cells) != CELLS_PER_GRID:
            raise ValueError(f"grid must have {CELLS_PER_GRID} cells, got {len(self.cells)}")
        return self


class GridResultRecord(WireModel):
    grid_id: TeamKey
    result: Literal["hit", "miss", "already"]
    points: int = 0
    sunk_ship: Literal["carrier", "corvette"] | None = None


class ShotRecordModel(WireModel):
    team_id: TeamKey
    coord: CoordLabel
    results: list[GridResultRecord] = Field(default_factory=list)
    points_gained: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SettingsRecord(WireModel):
    allow_contact: bool = True
    mute_sounds: bool = False
    show_boats: bool = False
    game_ending: bool = False


class GameSnapshot(WireModel):
    """The authoritative state; a reload replaces local state with it wholesale."""

    teams: list[TeamRecord]
    grids: dict[TeamKey, GridRecord]
    current_team: TeamKey
    game_state: Literal["preparation", "playing", "finished"]
    shot_history: list[ShotRecordModel] = Field(default_factory=list)
    settings: SettingsRecord = Field(default_factory=SettingsRecord)
    last_update: int = 0

    @model_validator(mode="after")
    def _grid_per_team(self) -> "GameSnapshot":
        team_keys = [team.id for team in self.teams]
        if len(set(team_keys)) != len(team_keys):
            raise ValueError("duplicate team ids")
        if set(team_keys) != set(self.grids):
            raise ValueError("every team needs exactly one grid")
        if self.current_team not in self.grids:
            raise ValueError(f"current team {self.current_team!r} has no grid")
        for shot in self.shot_history:
            if shot.team_id not in self.grids:
                raise ValueError(f"shot by unknown team {shot.team_id!r}")
            unknown = {result.grid_id for result in shot.results} - set(self.grids)
            if unknown:
                raise ValueError(f"shot at {shot.coord} targets unknown grids {sorted(unknown)}")
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "GameSnapshot":
        return cls.model_validate_json(raw)
