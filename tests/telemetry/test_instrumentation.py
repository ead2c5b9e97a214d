"""Telemetry instrumentation unit tests."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
from conftest import MIRRORED_LAYOUT, SINKING_SHOTS, place_layout

from broadside.engine.instrumented_game import InstrumentedBroadsideGame
from broadside.telemetry import config as telemetry_config_module
from broadside.telemetry import logger as logger_module
from broadside.telemetry import metrics as metrics_module
from broadside.telemetry import tracer as tracer_module
from broadside.telemetry.config import TelemetryConfig


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, *_):
        pass


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


def reset_singletons() -> None:
    tracer_module._TRACER = None
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}
    logger_module._LOGGER = None


@pytest.fixture
def instrumented(monkeypatch: pytest.MonkeyPatch):
    tracer = DummyTracer()
    metrics_calls: list[tuple[str, float, dict | None]] = []
    logger = MagicMock()

    monkeypatch.setattr("broadside.engine.instrumented_game.get_tracer", lambda *_: tracer)
    monkeypatch.setattr("broadside.engine.instrumented_game.get_logger", lambda *_: logger)
    monkeypatch.setattr(
        "broadside.engine.instrumented_game.record_game_metric",
        lambda name, value, attrs=None: metrics_calls.append((name, value, attrs)),
    )
    return tracer, metrics_calls, logger


def test_lazy_init_tracer(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    assert tracer_module.get_tracer() is tracer_module.get_tracer()

    provider_instance = MagicMock()
    provider_instance.get_tracer.return_value = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert tracer_module._TRACER is provider_instance.get_tracer.return_value

    meter_provider = MagicMock()
    meter_provider.get_meter.return_value = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(TelemetryConfig(enable_metrics=True))
    assert metrics_module._METER is meter_provider.get_meter.return_value
    assert metrics_module.MeterProvider.call_args.kwargs["metric_readers"] == []
    reset_singletons()


def test_record_game_metric_reuses_counters(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "get_meter", lambda *_: meter)

    metrics_module.record_game_metric("broadside_shots_total", 1, {"team": "a"})
    metrics_module.record_game_metric("broadside_shots_total", 1, {"team": "b"})
    meter.create_counter.assert_called_once_with("broadside_shots_total")
    assert meter.create_counter.return_value.add.call_count == 2
    reset_singletons()


def test_logging_init_noop() -> None:
    reset_singletons()
    logger = logger_module.get_logger("test")
    assert logger_module.init_logging(TelemetryConfig()) is logger


def test_console_logging_adds_trace_placeholders() -> None:
    logger_module.configure_console_logging(logging.INFO)
    record = logging.LogRecord("broadside", logging.INFO, __file__, 1, "msg", None, None)
    assert logger_module._OtelContextFilter().filter(record)
    assert record.otelTraceID == "-"
    assert record.otelSpanID == "-"


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    config = TelemetryConfig(enable_tracing=True, enable_logging=True)
    telemetry_config_module.init_telemetry(config)
    assert calls == ["tr", "lo"]


def test_config_from_env_enables_exporters_with_endpoints(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "deployment=hall,room = 2")
    monkeypatch.setenv("BROADSIDE_METRICS_EXPORT_INTERVAL_MS", "250")
    config = TelemetryConfig.from_env()
    assert config.enable_tracing and config.enable_metrics and config.enable_logging
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.metrics_export_interval_ms == 250
    assert config.resource_dict() == {
        "service.name": "broadside",
        "service.namespace": "operator-console",
        "deployment": "hall",
        "room": "2",
    }


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(**overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(
        telemetry_config_module.TelemetryConfig,
        "from_env",
        classmethod(lambda cls, **overrides: fake_from_env(**overrides)),
    )

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_instrumented_game_emits_spans(instrumented) -> None:
    tracer, metrics_calls, _ = instrumented

    game = InstrumentedBroadsideGame(rng_seed=0)
    assert not game.start_game()
    assert "broadside.engine.start_game" in tracer.span_names
    assert metrics_calls[-1][0] == "broadside_game_start_rejected_total"

    place_layout(game, MIRRORED_LAYOUT)
    tracer.span_names.clear()
    metrics_calls.clear()
    assert game.start_game()
    assert "broadside.engine.match" in tracer.span_names
    assert "broadside_game_started_total" in {name for name, _, _ in metrics_calls}

    metrics_calls.clear()
    summaries = [game.shoot(label) for label in SINKING_SHOTS]
    assert "broadside.engine.shoot" in tracer.span_names
    metric_names = [name for name, _, _ in metrics_calls]
    assert metric_names.count("broadside_shots_total") == len(SINKING_SHOTS)
    assert metric_names.count("broadside_teams_eliminated_total") == 3
    points = sum(value for name, value, _ in metrics_calls if name == "broadside_points_total")
    assert points == 18

    metrics_calls.clear()
    assert game.finalize(summaries[-1].pending)
    assert "broadside.engine.game_complete" in tracer.span_names
    completed = [attrs for name, _, attrs in metrics_calls if name == "broadside_game_completed_total"]
    assert completed == [{"reason": "elimination", "trigger": "elimination"}]
    assert game._match_span is None


def test_instrumented_game_counts_rejected_shots(instrumented) -> None:
    _, metrics_calls, logger = instrumented

    game = InstrumentedBroadsideGame()
    summary = game.shoot("C3")
    assert not summary.accepted
    assert metrics_calls == [("broadside_shots_rejected_total", 1, {"reason": "not_playing"})]
    logger.warning.assert_called_once()
