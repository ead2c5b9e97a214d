"""Broadside game with per-match telemetry hooks."""

from __future__ import annotations

import time

from broadside.engine.game import BroadsideGame, GamePhase, ShotSummary
from broadside.engine.ship import Coordinate
from broadside.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedBroadsideGame(BroadsideGame):
    """Wraps BroadsideGame with a match-long span, game metrics and logging."""

    def __init__(self, *args, **kwargs) -> None:
        self._logger = get_logger("broadside.engine")
        self._tracer = get_tracer("broadside.engine")
        self._match_span_cm = None
        self._match_span = None
        self._match_start_time: float | None = None
        self._match_counter = 0
        super().__init__(*args, **kwargs)

    def start_game(self) -> bool:
        with self._tracer.start_as_current_span("broadside.engine.start_game") as span:
            started = super().start_game()
            span.set_attribute("started", started)
            if not started:
                record_game_metric(
                    "broadside_game_start_rejected_total",
                    1,
                    {"missing_fleets": len(self.missing_fleets())},
                )
                return False
        self._open_match_span()
        record_game_metric("broadside_game_started_total", 1, {"teams": self.team_count})
        self._logger.info("Match %d started with %d teams", self._match_counter, self.team_count)
        return True

    def shoot(self, target: Coordinate | str) -> ShotSummary:
        with self._tracer.start_as_current_span("broadside.engine.shoot") as span:
            span.set_attribute("match.id", self._match_counter)
            summary = super().shoot(target)
            span.set_attribute("accepted", summary.accepted)
            if not summary.accepted:
                record_game_metric(
                    "broadside_shots_rejected_total", 1, {"reason": summary.reason or "unknown"}
                )
                self._logger.warning("Shot at %s rejected: %s", summary.coord.label, summary.reason)
                return summary

            team = summary.team_id.value if summary.team_id else "unknown"
            span.set_attribute("team", team)
            span.set_attribute("points", summary.total_points)
            span.set_attribute("cue", summary.cue.value if summary.cue else "none")
            record_game_metric("broadside_shots_total", 1, {"team": team})
            record_game_metric("broadside_points_total", summary.total_points, {"team": team})
            for eliminated in summary.newly_eliminated:
                record_game_metric("broadside_teams_eliminated_total", 1, {"team": eliminated.value})
            self._logger.info(
                "shot team=%s coord=%s points=%d cue=%s",
                team,
                summary.coord.label,
                summary.total_points,
                summary.cue.value if summary.cue else "none",
            )
            return summary

    def _finish(self, trigger: str) -> None:
        super()._finish(trigger)
        if self.phase is not GamePhase.FINISHED:
            return
        duration = (time.perf_counter() - self._match_start_time) if self._match_start_time else 0.0
        result = self.victory()
        reason = result.reason.value if result else "unknown"
        winners = ",".join(team.value for team in result.winners) if result else "unknown"

        record_game_metric("broadside_game_completed_total", 1, {"reason": reason, "trigger": trigger})
        record_game_metric("broadside_game_duration_seconds", duration, {"reason": reason})

        with self._tracer.start_as_current_span("broadside.engine.game_complete") as span:
            span.set_attribute("match.id", self._match_counter)
            span.set_attribute("winners", winners)
            span.set_attribute("shots", len(self.shot_history))
            span.set_attribute("duration_ms", duration * 1000)

        if self._match_span is not None:
            self._match_span.set_attribute("winners", winners)
            self._match_span.set_attribute("shots", len(self.shot_history))

        self._logger.info(
            "Match finished. Reason=%s winners=%s shots=%d duration_s=%.3f",
            reason,
            winners,
            len(self.shot_history),
            duration,
        )
        self._close_match_span()

    def reset_game(self):
        self._close_match_span()
        return super().reset_game()

    def _open_match_span(self) -> None:
        self._close_match_span()
        self._match_start_time = time.perf_counter()
        self._match_counter += 1
        self._match_span_cm = self._tracer.start_as_current_span("broadside.engine.match")
        self._match_span = self._match_span_cm.__enter__()
        self._match_span.set_attribute("match.id", self._match_counter)

    def _close_match_span(self) -> None:
        if self._match_span_cm is not None:
            self._match_span_cm.__exit__(None, None, None)
            self._match_span_cm = None
            self._match_span = None
