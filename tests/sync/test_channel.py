"""Sync between an operator instance and passive displays."""

from pathlib import Path

from conftest import DISTINCT_LAYOUT, MIRRORED_LAYOUT, SINKING_SHOTS, place_layout

from broadside.engine.config import GameConfig
from broadside.engine.game import BroadsideGame, GamePhase, VictoryReason
from broadside.engine.teams import TeamId
from broadside.sync import FileStateStore, MemoryStateStore, SyncChannel


def _view(game: BroadsideGame) -> tuple:
    state = game.get_state()
    return (
        state.phase,
        state.current_team,
        tuple((team.id, team.score, team.status) for team in state.teams),
        {team_id: (board.cells, board.ships, board.hit_positions) for team_id, board in state.boards.items()},
        tuple((record.team_id, record.coord, record.points_gained) for record in state.history),
        state.settings,
    )


def test_subscribers_are_notified_until_unsubscribed() -> None:
    channel = SyncChannel(MemoryStateStore())
    calls: list[str] = []
    subscription = channel.subscribe(lambda: calls.append("changed"))

    game = BroadsideGame(channel=channel)
    game.update_settings(mute_sounds=True)
    assert calls == ["changed"]

    channel.unsubscribe(subscription)
    game.update_settings(mute_sounds=False)
    assert calls == ["changed"]


def test_last_update_strictly_increases_with_a_frozen_clock() -> None:
    channel = SyncChannel(MemoryStateStore(), clock=lambda: 1_000)
    game = BroadsideGame(channel=channel)
    stamps = [channel.publish(game.to_snapshot()).last_update for _ in range(3)]
    assert stamps == [1_000, 1_001, 1_002]
    assert channel.last_update == 1_002


def test_follower_display_mirrors_the_operator() -> None:
    store = MemoryStateStore()
    operator = BroadsideGame(channel=SyncChannel(store), rng_seed=1)
    display = BroadsideGame(channel=SyncChannel(store))
    display.follow()

    place_layout(operator, DISTINCT_LAYOUT)
    assert operator.start_game()
    operator.shoot("E4")
    operator.set_current_team("b")
    operator.shoot("C3")

    assert _view(display) == _view(operator)
    assert display.channel.last_update == operator.channel.last_update


def test_reload_replaces_local_state_wholesale() -> None:
    store = MemoryStateStore()
    display = BroadsideGame(config=GameConfig(team_count=2), channel=SyncChannel(store))
    display.follow()
    assert display.team_count == 2

    operator = BroadsideGame(channel=SyncChannel(store), rng_seed=2)
    operator.randomize_placement()

    assert display.team_count == 4
    assert _view(display) == _view(operator)


def test_missing_or_malformed_state_falls_back_to_defaults() -> None:
    empty = BroadsideGame.restore(SyncChannel(MemoryStateStore()))
    assert empty.phase is GamePhase.PREPARATION
    assert empty.team_count == 4

    garbage = BroadsideGame.restore(SyncChannel(MemoryStateStore("{not json")))
    assert garbage.phase is GamePhase.PREPARATION
    assert all(team.score == 0 for team in garbage.teams)


def test_undecodable_state_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    channel = SyncChannel(FileStateStore(path))
    assert channel.load() is None
    game = BroadsideGame.restore(channel)
    assert game.phase is GamePhase.PREPARATION
    assert game.team_count == 4


def test_snapshot_with_broken_ship_is_not_applied(distinct_game: BroadsideGame) -> None:
    snapshot = distinct_game.to_snapshot()
    broken = snapshot.model_copy(deep=True)
    broken.grids["a"].ships[0].positions = ["A1", "C1", "D1", "E1"]
    store = MemoryStateStore(broken.to_json())

    game = BroadsideGame(channel=SyncChannel(store))
    assert not game.reload()
    assert game.phase is GamePhase.PREPARATION


def test_file_display_catches_up_by_polling(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    operator = BroadsideGame(channel=SyncChannel(FileStateStore(path)), rng_seed=4)
    display = BroadsideGame(channel=SyncChannel(FileStateStore(path)))
    display.follow()

    operator.randomize_placement()
    operator.start_game()
    assert display.phase is GamePhase.PREPARATION

    assert display.channel.poll()
    assert display.phase is GamePhase.PLAYING
    assert _view(display) == _view(operator)
    assert not display.channel.poll()


def test_restarted_operator_can_still_finalize() -> None:
    store = MemoryStateStore()
    operator = BroadsideGame(channel=SyncChannel(store), rng_seed=7)
    place_layout(operator, MIRRORED_LAYOUT)
    assert operator.start_game()
    for label in SINKING_SHOTS:
        operator.shoot(label)
    assert operator.pending_finalization is not None

    restarted = BroadsideGame.restore(SyncChannel(store))
    assert restarted.settings.game_ending
    pending = restarted.pending_finalization
    assert pending is not None
    assert not restarted.shoot("E5").accepted

    assert restarted.finalize(pending)
    victory = restarted.victory()
    assert victory is not None
    assert victory.reason is VictoryReason.ELIMINATION
    assert victory.winners == (TeamId.A,)


def test_later_write_wins() -> None:
    store = MemoryStateStore()
    first = BroadsideGame(channel=SyncChannel(store))
    second = BroadsideGame(channel=SyncChannel(store))

    first.update_settings(show_boats=True)
    second.update_settings(mute_sounds=True)

    reader = BroadsideGame.restore(SyncChannel(store))
    assert reader.settings.mute_sounds
    assert not reader.settings.show_boats
