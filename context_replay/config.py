"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from .types import (
    DEFAULT_END_MARKER,
    DEFAULT_INTRO_BANNER,
    ContextReplayConfig,
    OutputConfig,
    ReplaySettings,
)

CONFIG_FILENAMES = [
    "context-replay.yaml",
    "context-replay.yml",
    "context-replay.json",
    "contextreplay.yaml",
    "contextreplay.yml",
    "contextreplay.json",
]


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return the *name* sub-mapping; missing or null means empty."""
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping (got {type(value).__name__})")
    return value


def _build_config(raw: dict[str, Any]) -> ContextReplayConfig:
    """Build a ContextReplayConfig from a raw dict."""
    if not isinstance(raw, dict):
        raise ValueError(f"config must be a mapping (got {type(raw).__name__})")
    replay_raw = _section(raw, "replay")
    replay = ReplaySettings(
        max_tokens_per_chunk=replay_raw.get("max_tokens_per_chunk", 2000),
        max_tokens_per_send=replay_raw.get("max_tokens_per_send", 1800),
        auto_advance=replay_raw.get("auto_advance", True),
        tick_interval_ms=replay_raw.get("tick_interval_ms", 250),
        intro_banner=replay_raw.get("intro_banner", DEFAULT_INTRO_BANNER),
        end_marker=replay_raw.get("end_marker", DEFAULT_END_MARKER),
        hide_seed_messages=replay_raw.get("hide_seed_messages", True),
    )

    output_raw = _section(raw, "output")
    output = OutputConfig(directory=output_raw.get("directory", "."))

    return ContextReplayConfig(
        version=str(raw.get("version", "0.1")),
        token_counter=raw.get("token_counter", "estimate"),
        replay=replay,
        output=output,
    )


def validate_config(config: ContextReplayConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []
    replay = config.replay

    for name in ("max_tokens_per_chunk", "max_tokens_per_send", "tick_interval_ms"):
        value = getattr(replay, name)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            errors.append(f"replay.{name} must be an integer >= 1 (got {value!r})")

    if not str(replay.intro_banner).strip():
        errors.append("replay.intro_banner must not be empty")
    if not str(replay.end_marker).strip():
        errors.append("replay.end_marker must not be empty")

    mode = config.token_counter
    if not isinstance(mode, str):
        errors.append(f"token_counter must be a string (got {mode!r})")
    elif mode != "estimate":
        parts = mode[len("callable:"):].rsplit(":", 1) if mode.startswith("callable:") else []
        if len(parts) != 2 or not all(parts):
            errors.append(
                f"token_counter must be 'estimate' or 'callable:<module>:<func>' (got {mode!r})"
            )

    return errors


def config_to_dict(config: ContextReplayConfig) -> dict[str, Any]:
    """Plain-dict form suitable for ``yaml.safe_dump``."""
    return asdict(config)


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> ContextReplayConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)
    if raw is None:
        raw = {}

    return _build_config(raw)
