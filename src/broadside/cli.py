"""Operator console and passive display for Broadside, backed by a state file.

Every invocation loads the authoritative state from ``--state``, applies one
operation and writes the result back, so any number of ``watch`` displays can
follow the same file.
"""

from __future__ import annotations

import argparse
import time
from typing import Sequence

from broadside.engine.board import CellState, Grid
from broadside.engine.config import GameConfig
from broadside.engine.game import BroadsideGame, GamePhase, ShotSummary, Victory, VictoryReason
from broadside.engine.instrumented_game import InstrumentedBroadsideGame
from broadside.engine.ship import COLUMN_LABELS, GRID_SIZE, Coordinate, Orientation, Ship, ShipType
from broadside.sync import FileStateStore, SyncChannel
from broadside.telemetry import configure_console_logging, init_telemetry

SYMBOLS = {CellState.HIT: "X", CellState.WATER: "o"}


def _format_grid(grid: Grid, show_ships: bool) -> str:
    header = "    " + " ".join(f"{label:>2}" for label in COLUMN_LABELS)
    rows = [header]
    for row in range(GRID_SIZE):
        symbols = []
        for col in range(GRID_SIZE):
            cell = grid.cells[Coordinate(col, row)]
            symbol = SYMBOLS.get(cell.state)
            if symbol is None:
                symbol = "S" if show_ships and cell.contains_ship else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{row + 1:>2} |" + " ".join(symbols))
    return "\n".join(rows)


def _format_victory(game: BroadsideGame, victory: Victory) -> str:
    names = " and ".join(game.team(team_id).name for team_id in victory.winners)
    if victory.reason is VictoryReason.ELIMINATION and len(victory.winners) == 1:
        return f"Victory by elimination: {names} is the last team afloat!"
    if len(victory.winners) > 1:
        return f"Tie between {names}."
    return f"Victory on score: {names} wins!"


def render(game: BroadsideGame, show_ships: bool | None = None) -> str:
    state = game.get_state()
    reveal = state.settings.show_boats if show_ships is None else show_ships
    lines = [f"Phase: {state.phase.value}    Turn: {game.current_team_info().name}"]
    for team in state.teams:
        marker = "*" if team.id is state.current_team else " "
        lines.append(f"{marker} {team.name:<8} {team.score:>3} pts  {team.status.value}")
    for team in state.teams:
        lines.append("")
        lines.append(f"{team.name}:")
        lines.append(_format_grid(game.grid(team.id), show_ships=reveal))
    if state.history:
        last = state.history[-1]
        lines.append("")
        lines.append(f"Last shot: {game.team(last.team_id).name} -> {last.coord.label}: +{last.points_gained} pts")
    if state.victory is not None:
        lines.append("")
        lines.append(_format_victory(game, state.victory))
    return "\n".join(lines)


def _describe_shot(game: BroadsideGame, summary: ShotSummary) -> str:
    if not summary.accepted:
        return f"Shot at {summary.coord.label} refused ({summary.reason})."
    parts = []
    for result in summary.results:
        outcome = result.result.value
        if result.sunk_ship is not None:
            outcome = f"sank the {result.sunk_ship.ship_type.value}"
        parts.append(f"{game.team(result.grid_id).name}: {outcome}")
    shooter = game.team(summary.team_id).name if summary.team_id else "?"
    return f"{shooter} fired at {summary.coord.label} (+{summary.total_points}) - " + ", ".join(parts)


def _parse_coord(text: str) -> Coordinate:
    """Operator input is forgiving about case and surrounding spaces."""
    return Coordinate.parse(text.strip().upper())


def _open_game(args: argparse.Namespace) -> BroadsideGame:
    config = GameConfig.from_env(
        state_path=args.state,
        team_count=getattr(args, "teams", None),
        rng_seed=args.seed,
    )
    channel = SyncChannel(FileStateStore(config.state_path))
    if getattr(args, "fresh", False):
        return InstrumentedBroadsideGame(config=config, channel=channel)
    return InstrumentedBroadsideGame.restore(channel, config=config)


def _cmd_show(game: BroadsideGame, args: argparse.Namespace) -> int:
    print(render(game, show_ships=args.reveal or None))
    return 0


def _cmd_new(game: BroadsideGame, args: argparse.Namespace) -> int:
    reports = game.reset_game()
    incomplete = [team_id.value for team_id, report in reports.items() if not report.complete]
    print("New game prepared with random fleets.")
    if incomplete:
        print(f"Fleets incomplete for: {', '.join(incomplete)}")
        return 1
    return 0


def _cmd_randomize(game: BroadsideGame, args: argparse.Namespace) -> int:
    if game.phase is not GamePhase.PREPARATION:
        print("Fleets can only be randomized during preparation.")
        return 1
    reports = game.randomize_placement()
    incomplete = [team_id.value for team_id, report in reports.items() if not report.complete]
    if incomplete:
        print(f"Fleets incomplete for: {', '.join(incomplete)}")
        return 1
    print("Fleets randomized.")
    return 0


def _cmd_place(game: BroadsideGame, args: argparse.Namespace) -> int:
    ship = Ship(ShipType.from_tag(args.ship), _parse_coord(args.start), Orientation(args.orientation.upper()))
    if not game.place_ship(args.team, ship):
        print("Ship cannot be placed there (out of bounds, overlap or contact).")
        return 1
    print(f"{ship.ship_type.value} placed at {', '.join(c.label for c in ship.coordinates())}.")
    return 0


def _cmd_clear(game: BroadsideGame, args: argparse.Namespace) -> int:
    if not game.clear_team_grid(args.team):
        print("Grids can only be cleared during preparation.")
        return 1
    print(f"Grid cleared for {game.team(args.team).name}.")
    return 0


def _cmd_start(game: BroadsideGame, args: argparse.Namespace) -> int:
    if not game.start_game():
        missing = game.missing_fleets()
        if game.phase is not GamePhase.PREPARATION:
            print(f"Cannot start: game is {game.phase.value}.")
        else:
            print(f"Cannot start: fleets incomplete for {', '.join(t.value for t in missing)}.")
        return 1
    print("Game started.")
    return 0


def _cmd_team(game: BroadsideGame, args: argparse.Namespace) -> int:
    if not game.set_current_team(args.team):
        print(f"Team {args.team} cannot take the turn.")
        return 1
    print(f"{game.current_team_info().name} to play.")
    return 0


def _cmd_fire(game: BroadsideGame, args: argparse.Namespace) -> int:
    summary = game.shoot(_parse_coord(args.coord))
    print(_describe_shot(game, summary))
    if summary.pending is not None:
        # No sound to wait for on a terminal.
        game.finalize(summary.pending)
        victory = game.victory()
        if victory is not None:
            print(_format_victory(game, victory))
    return 0 if summary.accepted else 1


def _cmd_undo(game: BroadsideGame, args: argparse.Namespace) -> int:
    record = game.undo_last_shot()
    if record is None:
        print("Nothing to undo.")
        return 1
    print(f"Undid {game.team(record.team_id).name} -> {record.coord.label} ({record.points_gained} pts).")
    return 0


def _cmd_end(game: BroadsideGame, args: argparse.Namespace) -> int:
    victory = game.end_game()
    if victory is None:
        print("No game in progress.")
        return 1
    print(_format_victory(game, victory))
    return 0


def _cmd_settings(game: BroadsideGame, args: argparse.Namespace) -> int:
    settings = game.update_settings(
        allow_contact=args.allow_contact,
        mute_sounds=args.mute_sounds,
        show_boats=args.show_boats,
    )
    print(
        f"allow_contact={settings.allow_contact} mute_sounds={settings.mute_sounds} "
        f"show_boats={settings.show_boats}"
    )
    return 0


def _cmd_watch(game: BroadsideGame, args: argparse.Namespace) -> int:
    channel = game.channel
    if channel is None:
        print("No shared state to watch.")
        return 1
    changed = [True]
    game.follow()
    channel.subscribe(lambda: changed.__setitem__(0, True))
    remaining = args.iterations
    while remaining is None or remaining > 0:
        channel.poll()
        if changed[0]:
            changed[0] = False
            print(render(game))
            print("-" * 40, flush=True)
        if remaining is not None:
            remaining -= 1
            if remaining == 0:
                break
        time.sleep(game.config.poll_interval)
    return 0


def _on_off(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"on", "true", "yes", "1"}:
        return True
    if lowered in {"off", "false", "no", "0"}:
        return False
    raise argparse.ArgumentTypeError("expected on/off")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a Broadside operator console.")
    parser.add_argument("--state", default=None, help="Path of the shared state file.")
    parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed for placement.")
    parser.add_argument("--log-level", default="WARNING", help="Console log level.")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print scores and grids.")
    show.add_argument("--reveal", action="store_true", help="Show ship positions.")
    show.set_defaults(handler=_cmd_show)

    new = sub.add_parser("new", help="Reset to preparation with random fleets.")
    new.add_argument("--teams", type=int, default=None, choices=(2, 3, 4))
    new.set_defaults(handler=_cmd_new, fresh=True)

    sub.add_parser("randomize", help="Re-randomize every fleet.").set_defaults(handler=_cmd_randomize)

    place = sub.add_parser("place", help="Place one ship by hand.")
    place.add_argument("team")
    place.add_argument("ship", choices=[ship_type.value for ship_type in ShipType])
    place.add_argument("start", help="Anchor cell, e.g. A1.")
    place.add_argument("orientation", choices=["H", "V", "h", "v"])
    place.set_defaults(handler=_cmd_place)

    clear = sub.add_parser("clear", help="Empty one team's grid.")
    clear.add_argument("team")
    clear.set_defaults(handler=_cmd_clear)

    sub.add_parser("start", help="Leave preparation.").set_defaults(handler=_cmd_start)

    team = sub.add_parser("team", help="Hand the turn to a team.")
    team.add_argument("team")
    team.set_defaults(handler=_cmd_team)

    fire = sub.add_parser("fire", help="Fire the current team at a coordinate.")
    fire.add_argument("coord", help="Target cell, e.g. C4.")
    fire.set_defaults(handler=_cmd_fire)

    sub.add_parser("undo", help="Undo the last shot.").set_defaults(handler=_cmd_undo)
    sub.add_parser("end", help="End the game now.").set_defaults(handler=_cmd_end)

    settings = sub.add_parser("settings", help="Change game settings.")
    settings.add_argument("--allow-contact", type=_on_off, default=None)
    settings.add_argument("--mute-sounds", type=_on_off, default=None)
    settings.add_argument("--show-boats", type=_on_off, default=None)
    settings.set_defaults(handler=_cmd_settings)

    watch = sub.add_parser("watch", help="Follow the shared state as a passive display.")
    watch.add_argument("--iterations", type=int, default=None, help="Stop after N polls.")
    watch.set_defaults(handler=_cmd_watch)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_console_logging(args.log_level.upper())
    init_telemetry()
    try:
        game = _open_game(args)
        return args.handler(game, args)
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
