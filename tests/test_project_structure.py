"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import broadside  # noqa: F401  (import used to ensure availability)

    assert broadside is not None


def test_submodules_exist() -> None:
    """All primary submodules should be importable."""
    modules = [
        "broadside.engine",
        "broadside.engine.game",
        "broadside.engine.instrumented_game",
        "broadside.sync",
        "broadside.telemetry",
        "broadside.cli",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None
