"""Runtime configuration for a game session."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, Field

from broadside.telemetry.config import env_flag

from .placement import DEFAULT_MAX_ATTEMPTS


class GameConfig(BaseModel):
    """Session settings for the operator console and display instances."""

    team_count: int = Field(default=4, ge=2, le=4)
    placement_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    allow_contact: bool = True
    state_path: str = "broadside_state.json"
    poll_interval: float = Field(default=1.0, gt=0)
    rng_seed: int | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `BROADSIDE_*` env vars; overrides win."""

        data: Dict[str, Any] = {}
        numeric_fields = {
            "team_count": ("BROADSIDE_TEAM_COUNT", int),
            "placement_attempts": ("BROADSIDE_PLACEMENT_ATTEMPTS", int),
            "poll_interval": ("BROADSIDE_POLL_INTERVAL", float),
            "rng_seed": ("BROADSIDE_RNG_SEED", int),
        }
        for field, (env_name, cast) in numeric_fields.items():
            raw = os.getenv(env_name)
            if raw is not None and raw.strip():
                data[field] = cast(raw.strip())

        allow_contact = env_flag("BROADSIDE_ALLOW_CONTACT")
        if allow_contact is not None:
            data["allow_contact"] = allow_contact

        state_path = os.getenv("BROADSIDE_STATE_PATH")
        if state_path:
            data["state_path"] = state_path

        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
