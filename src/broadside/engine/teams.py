"""Teams taking part in a match."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TeamId(Enum):
    A = "a"
    B = "b"
    C = "c"
    D = "d"

    @classmethod
    def parse(cls, text: str) -> TeamId:
        try:
            return cls(text.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown team {text!r}; expected one of a, b, c, d.") from exc

    @property
    def default_name(self) -> str:
        return f"Team {self.value.upper()}"

    @property
    def color(self) -> str:
        return TEAM_COLORS[self]


TEAM_COLORS = {
    TeamId.A: "#ef4444",
    TeamId.B: "#3b82f6",
    TeamId.C: "#10b981",
    TeamId.D: "#f59e0b",
}


class TeamStatus(Enum):
    ACTIVE = "active"
    ELIMINATED = "eliminated"


@dataclass
class Team:
    id: TeamId
    name: str
    score: int = 0
    status: TeamStatus = TeamStatus.ACTIVE

    @classmethod
    def default(cls, team_id: TeamId) -> Team:
        return cls(team_id, team_id.default_name)

    @property
    def is_active(self) -> bool:
        return self.status is TeamStatus.ACTIVE


def team_ids(count: int) -> list[TeamId]:
    """The first ``count`` team ids in play order."""
    if not 2 <= count <= len(TeamId):
        raise ValueError(f"Team count must be between 2 and {len(TeamId)}, got {count}.")
    return list(TeamId)[:count]
