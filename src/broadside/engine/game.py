"""Multi-team Broadside game controller.

One :class:`BroadsideGame` is the authoritative context for a session. It owns
every team and grid, is the only caller of grid mutations, and ends each
state-changing operation by publishing a full snapshot through its
:class:`~broadside.sync.SyncChannel` (when one is attached).

Game conditions never raise: refused operations return ``False``, ``None`` or
a rejected :class:`ShotSummary`.
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from broadside.sync.channel import Subscription, SyncChannel
from broadside.sync.schema import (
    CellRecord,
    GameSnapshot,
    GridRecord,
    GridResultRecord,
    SettingsRecord,
    ShipRecord,
    ShotRecordModel,
    TeamRecord,
)
from broadside.telemetry import get_meter, get_tracer

from .board import CellState, Grid, GridShot, ShotResult
from .config import GameConfig
from .placement import PlacementReport, place_random_fleet
from .ship import FLEET, Coordinate, Orientation, Ship, ShipType
from .teams import Team, TeamId, TeamStatus, team_ids

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

FAN_OUT_COUNTER = meter.create_counter(
    "broadside_engine_fan_out_shots",
    unit="1",
    description="Coordinates fired by the current team",
)

ELIMINATION_COUNTER = meter.create_counter(
    "broadside_engine_eliminations",
    unit="1",
    description="Teams whose whole fleet was sunk",
)


class GamePhase(Enum):
    """High-level lifecycle of a Broadside match."""

    PREPARATION = "preparation"
    PLAYING = "playing"
    FINISHED = "finished"


class VictoryReason(Enum):
    ELIMINATION = "elimination"
    SCORE = "score"


class SoundCue(Enum):
    """Presentation cue for a resolved shot, highest priority first."""

    BIG_SPLASH = "bigSplash"
    HIT = "hit"
    MISS = "miss"


@dataclass
class GameSettings:
    allow_contact: bool = True
    mute_sounds: bool = False
    show_boats: bool = False
    # Set when all but one team are eliminated, until the game is finalized.
    game_ending: bool = False


@dataclass(frozen=True)
class ShotRecord:
    team_id: TeamId
    coord: Coordinate
    results: tuple[GridShot, ...]
    points_gained: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class PendingFinalization:
    """Token handed out when an elimination latches the end of the game."""

    token: int


@dataclass(frozen=True)
class ShotSummary:
    accepted: bool
    coord: Coordinate
    team_id: TeamId | None = None
    results: tuple[GridShot, ...] = ()
    total_points: int = 0
    has_any_hit: bool = False
    has_any_sunk_ship: bool = False
    newly_eliminated: tuple[TeamId, ...] = ()
    pending: PendingFinalization | None = None
    reason: str | None = None

    @classmethod
    def rejected(cls, coord: Coordinate, reason: str) -> ShotSummary:
        return cls(accepted=False, coord=coord, reason=reason)

    @property
    def cue(self) -> SoundCue | None:
        if not self.accepted:
            return None
        if self.has_any_sunk_ship:
            return SoundCue.BIG_SPLASH
        if self.has_any_hit:
            return SoundCue.HIT
        return SoundCue.MISS


@dataclass(frozen=True)
class Victory:
    reason: VictoryReason
    winners: tuple[TeamId, ...]


@dataclass(frozen=True)
class TeamView:
    id: TeamId
    name: str
    score: int
    status: TeamStatus
    color: str


@dataclass(frozen=True)
class BoardSnapshot:
    """Serializable view of a grid for state queries."""

    owner: TeamId
    ships: tuple[tuple[Coordinate, ...], ...]
    cells: dict[Coordinate, CellState]
    hit_positions: tuple[Coordinate, ...]
    eliminated: bool


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot handed to display collaborators."""

    phase: GamePhase
    current_team: TeamId
    teams: tuple[TeamView, ...]
    boards: dict[TeamId, BoardSnapshot]
    history: tuple[ShotRecord, ...]
    settings: GameSettings
    victory: Victory | None
    finalization_pending: bool


class BroadsideGame:
    """Coordinates phases, turns and fan-out shots between team grids."""

    def __init__(
        self,
        config: GameConfig | None = None,
        channel: SyncChannel | None = None,
        rng_seed: int | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.channel = channel
        seed = rng_seed if rng_seed is not None else self.config.rng_seed
        self._rng = random.Random(seed)
        self._tokens = itertools.count(1)
        self._pending: PendingFinalization | None = None
        self.settings = GameSettings(allow_contact=self.config.allow_contact)
        self.teams: list[Team] = [Team.default(team_id) for team_id in team_ids(self.config.team_count)]
        self.grids: dict[TeamId, Grid] = {team.id: self._new_grid(team.id) for team in self.teams}
        self.current_team: TeamId = self.teams[0].id
        self.phase: GamePhase = GamePhase.PREPARATION
        self.shot_history: list[ShotRecord] = []

    @classmethod
    def restore(
        cls,
        channel: SyncChannel,
        config: GameConfig | None = None,
        rng_seed: int | None = None,
    ) -> BroadsideGame:
        """Build an instance from the shared slot, or fresh defaults without one."""
        game = cls(config=config, channel=channel, rng_seed=rng_seed)
        if not game.reload():
            logger.info("game_state_defaults", extra={"team_count": len(game.teams)})
        return game

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def team_count(self) -> int:
        return len(self.teams)

    @property
    def pending_finalization(self) -> PendingFinalization | None:
        return self._pending

    def team(self, team_id: TeamId | str) -> Team:
        resolved = self._resolve(team_id)
        for team in self.teams:
            if team.id is resolved:
                return team
        raise ValueError(f"Team {resolved.value!r} is not part of this game.")

    def grid(self, team_id: TeamId | str) -> Grid:
        return self.grids[self.team(team_id).id]

    def current_team_info(self) -> Team:
        return self.team(self.current_team)

    def history(self) -> tuple[ShotRecord, ...]:
        return tuple(self.shot_history)

    def eliminated_count(self) -> int:
        return sum(1 for team in self.teams if team.status is TeamStatus.ELIMINATED)

    def active_teams(self) -> list[Team]:
        return [team for team in self.teams if team.is_active]

    def missing_fleets(self) -> list[TeamId]:
        """Teams whose grid does not yet hold the full fleet."""
        return [team.id for team in self.teams if not self.grids[team.id].is_complete(FLEET)]

    def victory(self) -> Victory | None:
        """Derive the result of a finished game; None while it is still running."""
        if self.phase is not GamePhase.FINISHED:
            return None
        ranked = sorted(self.teams, key=lambda team: team.score, reverse=True)
        best = ranked[0].score
        top_scorers = tuple(team.id for team in ranked if team.score == best)
        if self.eliminated_count() >= self.team_count - 1:
            survivors = self.active_teams()
            if len(survivors) == 1:
                return Victory(VictoryReason.ELIMINATION, (survivors[0].id,))
            return Victory(VictoryReason.ELIMINATION, top_scorers)
        return Victory(VictoryReason.SCORE, top_scorers)

    def get_state(self) -> GameState:
        """Return an immutable view of the current match."""
        boards = {
            team_id: BoardSnapshot(
                owner=team_id,
                ships=tuple(tuple(ship.coordinates()) for ship in grid.ships),
                cells={coord: cell.state for coord, cell in grid.cells.items()},
                hit_positions=tuple(grid.hit_positions),
                eliminated=grid.is_eliminated(),
            )
            for team_id, grid in self.grids.items()
        }
        teams = tuple(
            TeamView(team.id, team.name, team.score, team.status, team.id.color) for team in self.teams
        )
        return GameState(
            phase=self.phase,
            current_team=self.current_team,
            teams=teams,
            boards=boards,
            history=self.history(),
            settings=replace(self.settings),
            victory=self.victory(),
            finalization_pending=self._pending is not None,
        )

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------
    def place_ship(self, team_id: TeamId | str, ship: Ship) -> bool:
        if self.phase is not GamePhase.PREPARATION:
            return False
        if not self.grid(team_id).place_ship(ship):
            return False
        self._commit()
        return True

    def move_ship(self, team_id: TeamId | str, ship_type: ShipType, start: Coordinate) -> bool:
        if self.phase is not GamePhase.PREPARATION:
            return False
        grid = self.grid(team_id)
        index = self._ship_index(grid, ship_type)
        if index is None or not grid.move_ship(index, start):
            return False
        self._commit()
        return True

    def rotate_ship(self, team_id: TeamId | str, ship_type: ShipType) -> bool:
        if self.phase is not GamePhase.PREPARATION:
            return False
        grid = self.grid(team_id)
        index = self._ship_index(grid, ship_type)
        if index is None or not grid.rotate_ship(index):
            return False
        self._commit()
        return True

    def clear_team_grid(self, team_id: TeamId | str) -> bool:
        if self.phase is not GamePhase.PREPARATION:
            return False
        resolved = self.team(team_id).id
        self.grids[resolved] = self._new_grid(resolved)
        logger.info("grid_cleared", extra={"team": resolved.value})
        self._commit()
        return True

    def randomize_placement(self) -> dict[TeamId, PlacementReport]:
        """Regenerate every grid with a random fleet; empty dict outside preparation."""
        if self.phase is not GamePhase.PREPARATION:
            return {}
        with tracer.start_as_current_span("game.randomize_placement"):
            reports = self._regenerate_grids()
        self._commit()
        return reports

    def start_game(self) -> bool:
        """Leave preparation once every team has its full fleet."""
        with tracer.start_as_current_span("game.start") as span:
            if self.phase is not GamePhase.PREPARATION:
                logger.warning("start_rejected_wrong_phase", extra={"phase": self.phase.value})
                return False
            missing = self.missing_fleets()
            if missing:
                span.set_attribute("game.missing_fleets", ",".join(team.value for team in missing))
                logger.warning(
                    "start_rejected_incomplete_fleets",
                    extra={"teams": [team.value for team in missing]},
                )
                return False
            self.phase = GamePhase.PLAYING
            self.settings.game_ending = False
            self._pending = None
            logger.info(
                "game_started",
                extra={"team_count": self.team_count, "current_team": self.current_team.value},
            )
        self._commit()
        return True

    # ------------------------------------------------------------------
    # Playing
    # ------------------------------------------------------------------
    def set_current_team(self, team_id: TeamId | str) -> bool:
        """Hand the turn to an active team in this game."""
        try:
            resolved = self._resolve(team_id)
        except ValueError:
            logger.warning("set_team_rejected", extra={"team": str(team_id)})
            return False
        team = next((team for team in self.teams if team.id is resolved), None)
        if team is None or not team.is_active:
            logger.warning("set_team_rejected", extra={"team": resolved.value})
            return False
        self.current_team = resolved
        self._commit()
        return True

    def advance_turn(self) -> TeamId:
        """Move the turn to the next active team in seating order."""
        order = [team.id for team in self.teams]
        start = order.index(self.current_team)
        for offset in range(1, len(order) + 1):
            candidate = self.team(order[(start + offset) % len(order)])
            if candidate.is_active:
                if candidate.id is not self.current_team:
                    self.current_team = candidate.id
                    self._commit()
                break
        return self.current_team

    def shoot(self, target: Coordinate | str) -> ShotSummary:
        """Fire one coordinate at every grid except the current team's own."""
        coord = Coordinate.parse(target) if isinstance(target, str) else target
        with tracer.start_as_current_span("game.shoot") as span:
            span.set_attribute("team", self.current_team.value)
            span.set_attribute("coord", coord.label)
            if self.phase is not GamePhase.PLAYING:
                logger.warning(
                    "shot_rejected_wrong_phase",
                    extra={"phase": self.phase.value, "coord": coord.label},
                )
                return ShotSummary.rejected(coord, "not_playing")
            if self._pending is not None:
                logger.warning("shot_rejected_finalization_pending", extra={"coord": coord.label})
                return ShotSummary.rejected(coord, "finalization_pending")
            if not coord.is_valid():
                return ShotSummary.rejected(coord, "out_of_bounds")

            shooter = self.current_team_info()
            results = tuple(
                self.grids[team.id].shoot(coord) for team in self.teams if team.id is not shooter.id
            )
            total_points = sum(result.points for result in results)
            shooter.score += total_points
            newly_eliminated = tuple(self.check_eliminations())
            pending = self._latch_game_ending()

            self.shot_history.append(ShotRecord(shooter.id, coord, results, total_points))
            summary = ShotSummary(
                accepted=True,
                coord=coord,
                team_id=shooter.id,
                results=results,
                total_points=total_points,
                has_any_hit=any(result.result is ShotResult.HIT for result in results),
                has_any_sunk_ship=any(result.sunk_ship is not None for result in results),
                newly_eliminated=newly_eliminated,
                pending=pending,
            )
            span.set_attribute("points", total_points)
            span.set_attribute("game_ending", pending is not None)
            FAN_OUT_COUNTER.add(1, attributes={"team": shooter.id.value, "hit": summary.has_any_hit})
            logger.info(
                "shot_resolved",
                extra={
                    "team": shooter.id.value,
                    "coord": coord.label,
                    "points": total_points,
                    "score": shooter.score,
                    "results": {result.grid_id: result.result.value for result in results},
                },
            )
        self._commit()
        return summary

    def check_eliminations(self) -> list[TeamId]:
        """Flip every newly fully-sunk team to eliminated; return those teams."""
        newly: list[TeamId] = []
        for team in self.teams:
            if team.is_active and self.grids[team.id].is_eliminated():
                team.status = TeamStatus.ELIMINATED
                newly.append(team.id)
                ELIMINATION_COUNTER.add(1, attributes={"team": team.id.value})
                logger.info(
                    "team_eliminated",
                    extra={"team": team.id.value, "eliminated": self.eliminated_count()},
                )
        return newly

    def _latch_game_ending(self) -> PendingFinalization | None:
        if self.phase is not GamePhase.PLAYING:
            return None
        if self.eliminated_count() < self.team_count - 1:
            return None
        self.settings.game_ending = True
        self._pending = PendingFinalization(next(self._tokens))
        logger.info("game_ending_latched", extra={"token": self._pending.token})
        return self._pending

    def finalize(self, pending: PendingFinalization) -> bool:
        """Run the deferred end of game once the collaborator's effect is done."""
        if self._pending is None or pending != self._pending:
            logger.warning("finalize_rejected", extra={"token": pending.token})
            return False
        if self.phase is not GamePhase.PLAYING:
            self._pending = None
            return False
        self._finish("elimination")
        return True

    def end_game(self) -> Victory | None:
        """End a running game by hand; the winner is derived from the state."""
        if self.phase is not GamePhase.PLAYING:
            return None
        self._finish("manual")
        return self.victory()

    def _finish(self, trigger: str) -> None:
        with tracer.start_as_current_span("game.finish") as span:
            self.phase = GamePhase.FINISHED
            self.settings.game_ending = False
            self._pending = None
            result = self.victory()
            span.set_attribute("trigger", trigger)
            if result is not None:
                span.set_attribute("victory.reason", result.reason.value)
                span.set_attribute("victory.winners", ",".join(team.value for team in result.winners))
                logger.info(
                    "game_finished",
                    extra={
                        "trigger": trigger,
                        "reason": result.reason.value,
                        "winners": [team.value for team in result.winners],
                        "scores": {team.id.value: team.score for team in self.teams},
                    },
                )
        self._commit()

    def undo_last_shot(self) -> ShotRecord | None:
        """Revert the most recent shot's score and cells; None when nothing to undo.

        Undoing the shot that ended a finished game puts it back in play.
        """
        if self.phase is GamePhase.PREPARATION or not self.shot_history:
            return None
        with tracer.start_as_current_span("game.undo_last_shot") as span:
            record = self.shot_history.pop()
            self.team(record.team_id).score -= record.points_gained
            for result in record.results:
                # An "already" outcome belongs to an earlier shot's cell.
                if result.result is ShotResult.ALREADY:
                    continue
                grid = self.grids[TeamId(result.grid_id)]
                grid.reset_cell(record.coord)
                grid.refresh_sunk()
            self._recompute_statuses()
            if self.eliminated_count() < self.team_count - 1:
                self.settings.game_ending = False
                self._pending = None
                if self.phase is GamePhase.FINISHED:
                    self.phase = GamePhase.PLAYING
            span.set_attribute("team", record.team_id.value)
            span.set_attribute("phase", self.phase.value)
            span.set_attribute("coord", record.coord.label)
            logger.info(
                "shot_undone",
                extra={
                    "team": record.team_id.value,
                    "coord": record.coord.label,
                    "points": record.points_gained,
                },
            )
        self._commit()
        return record

    def _recompute_statuses(self) -> None:
        for team in self.teams:
            eliminated = self.grids[team.id].is_eliminated()
            team.status = TeamStatus.ELIMINATED if eliminated else TeamStatus.ACTIVE

    def reset_game(self) -> dict[TeamId, PlacementReport]:
        """Back to preparation with zero scores, fresh random fleets and no history."""
        with tracer.start_as_current_span("game.reset"):
            for team in self.teams:
                team.score = 0
                team.status = TeamStatus.ACTIVE
            self.current_team = self.teams[0].id
            self.phase = GamePhase.PREPARATION
            self.shot_history = []
            self.settings.game_ending = False
            self._pending = None
            reports = self._regenerate_grids()
            logger.info("game_reset", extra={"team_count": self.team_count})
        self._commit()
        return reports

    def update_settings(
        self,
        allow_contact: bool | None = None,
        mute_sounds: bool | None = None,
        show_boats: bool | None = None,
    ) -> GameSettings:
        if allow_contact is not None:
            self.settings.allow_contact = allow_contact
            for grid in self.grids.values():
                grid.allow_contact = allow_contact
        if mute_sounds is not None:
            self.settings.mute_sounds = mute_sounds
        if show_boats is not None:
            self.settings.show_boats = show_boats
        self._commit()
        return replace(self.settings)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def follow(self) -> Subscription:
        """Reload on every change notification; used by passive displays."""
        if self.channel is None:
            raise RuntimeError("This game has no sync channel to follow.")
        return self.channel.subscribe(self._on_state_changed)

    def _on_state_changed(self) -> None:
        self.reload()

    def reload(self) -> bool:
        """Replace local state with the shared slot; False when there is none usable."""
        if self.channel is None:
            return False
        with tracer.start_as_current_span("game.reload") as span:
            snapshot = self.channel.load()
            if snapshot is None:
                span.set_attribute("reload.applied", False)
                return False
            try:
                self.apply_snapshot(snapshot)
            except ValueError as exc:
                logger.warning("state_rejected", extra={"error": str(exc)})
                span.set_attribute("reload.applied", False)
                return False
            span.set_attribute("reload.applied", True)
            return True

    def apply_snapshot(self, snapshot: GameSnapshot) -> None:
        """Rebuild every team, grid, record and setting from ``snapshot``."""
        settings = GameSettings(**snapshot.settings.model_dump())
        teams = [
            Team(TeamId(record.id), record.name, record.score, TeamStatus(record.status))
            for record in snapshot.teams
        ]
        grids = {
            team.id: _grid_from_record(team.id, snapshot.grids[team.id.value], settings.allow_contact)
            for team in teams
        }
        history = [_shot_from_record(record, grids) for record in snapshot.shot_history]

        self.settings = settings
        self.teams = teams
        self.grids = grids
        self.shot_history = history
        self.current_team = TeamId(snapshot.current_team)
        self.phase = GamePhase(snapshot.game_state)
        if self.settings.game_ending and self.phase is GamePhase.PLAYING:
            if self._pending is None:
                self._pending = PendingFinalization(next(self._tokens))
        else:
            self._pending = None

    def to_snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            teams=[
                TeamRecord(id=team.id.value, name=team.name, score=team.score, status=team.status.value)
                for team in self.teams
            ],
            grids={team_id.value: _grid_to_record(grid) for team_id, grid in self.grids.items()},
            current_team=self.current_team.value,
            game_state=self.phase.value,
            shot_history=[_shot_to_record(record) for record in self.shot_history],
            settings=SettingsRecord(
                allow_contact=self.settings.allow_contact,
                mute_sounds=self.settings.mute_sounds,
                show_boats=self.settings.show_boats,
                game_ending=self.settings.game_ending,
            ),
            last_update=self.channel.last_update if self.channel is not None else 0,
        )

    def _commit(self) -> None:
        if self.channel is not None:
            self.channel.publish(self.to_snapshot())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _new_grid(self, team_id: TeamId) -> Grid:
        return Grid(owner=team_id.value, allow_contact=self.settings.allow_contact)

    def _regenerate_grids(self) -> dict[TeamId, PlacementReport]:
        reports: dict[TeamId, PlacementReport] = {}
        for team in self.teams:
            grid = self._new_grid(team.id)
            self.grids[team.id] = grid
            reports[team.id] = place_random_fleet(grid, self._rng, self.config.placement_attempts)
            if not reports[team.id].complete:
                logger.error(
                    "fleet_incomplete",
                    extra={
                        "team": team.id.value,
                        "missing": [failure.ship_type.value for failure in reports[team.id].failures],
                    },
                )
        return reports

    @staticmethod
    def _ship_index(grid: Grid, ship_type: ShipType) -> int | None:
        for index, ship in enumerate(grid.ships):
            if ship.ship_type is ship_type:
                return index
        return None

    @staticmethod
    def _resolve(team_id: TeamId | str) -> TeamId:
        return team_id if isinstance(team_id, TeamId) else TeamId.parse(team_id)


def _grid_to_record(grid: Grid) -> GridRecord:
    return GridRecord(
        cells={
            coord.label: CellRecord(
                contains_ship=cell.contains_ship,
                already_aimed=cell.already_aimed,
                state=cell.state.value,
            )
            for coord, cell in grid.cells.items()
        },
        ships=[
            ShipRecord(
                type=ship.ship_type.value,
                size=ship.size,
                orientation=ship.orientation.value,
                positions=[coord.label for coord in ship.coordinates()],
                is_sunk=ship.is_sunk,
            )
            for ship in grid.ships
        ],
        hit_positions=[coord.label for coord in grid.hit_positions],
    )


def _grid_from_record(team_id: TeamId, record: GridRecord, allow_contact: bool) -> Grid:
    grid = Grid(owner=team_id.value, allow_contact=allow_contact)
    for label, cell_record in record.cells.items():
        cell = grid.cells[Coordinate.parse(label)]
        cell.contains_ship = cell_record.contains_ship
        cell.already_aimed = cell_record.already_aimed
        cell.state = CellState(cell_record.state)
    for ship_record in record.ships:
        positions = [Coordinate.parse(label) for label in ship_record.positions]
        ship = Ship(ShipType(ship_record.type), positions[0], Orientation(ship_record.orientation))
        if ship.coordinates() != positions:
            raise ValueError(f"ship positions {ship_record.positions} are not contiguous")
        ship.is_sunk = ship_record.is_sunk
        grid.ships.append(ship)
    grid.hit_positions = [Coordinate.parse(label) for label in record.hit_positions]
    grid.refresh_sunk()
    return grid


def _shot_to_record(record: ShotRecord) -> ShotRecordModel:
    return ShotRecordModel(
        team_id=record.team_id.value,
        coord=record.coord.label,
        results=[
            GridResultRecord(
                grid_id=result.grid_id,
                result=result.result.value,
                points=result.points,
                sunk_ship=result.sunk_ship.ship_type.value if result.sunk_ship else None,
            )
            for result in record.results
        ],
        points_gained=record.points_gained,
        timestamp=record.timestamp,
    )


def _shot_from_record(record: ShotRecordModel, grids: dict[TeamId, Grid]) -> ShotRecord:
    results: list[GridShot] = []
    for result in record.results:
        sunk_ship = None
        if result.sunk_ship is not None:
            grid = grids.get(TeamId(result.grid_id))
            ships = grid.ships if grid is not None else []
            sunk_ship = next(
                (ship for ship in ships if ship.ship_type.value == result.sunk_ship), None
            )
        results.append(
            GridShot(result.grid_id, ShotResult(result.result), result.points, sunk_ship)
        )
    return ShotRecord(
        team_id=TeamId(record.team_id),
        coord=Coordinate.parse(record.coord),
        results=tuple(results),
        points_gained=record.points_gained,
        timestamp=record.timestamp,
    )
