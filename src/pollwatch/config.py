"""Configuration loading utilities for the file watcher."""
from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml # type: ignore


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1


class ConfigError(Exception):
    """Raised when the configuration file or command line is invalid."""


@dataclass
class WatchConfig:
    """Options describing what to watch and what to run."""

    command: List[str]
    pattern: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    verbose: bool = False
    paths: List[Path] = field(default_factory=list)


def load_config(path: Path) -> Dict[str, Any]:
    """Load the ``watch`` section of a YAML file as validated defaults."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    raw = data.get("watch", {})
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("'watch' section must be a mapping")

    defaults: Dict[str, Any] = {}
    if "pattern" in raw:
        pattern = raw["pattern"]
        if not isinstance(pattern, str) or not pattern:
            raise ConfigError("watch.pattern must be a non-empty string")
        defaults["pattern"] = pattern
    if "command" in raw:
        defaults["command"] = _parse_command(raw["command"], "watch.command")
    if "poll_interval" in raw:
        defaults["poll_interval"] = parse_poll_interval(raw["poll_interval"], "watch.poll_interval")
    if "verbose" in raw:
        if not isinstance(raw["verbose"], bool):
            raise ConfigError("watch.verbose must be a boolean")
        defaults["verbose"] = raw["verbose"]

    unknown = sorted(set(raw) - {"pattern", "command", "poll_interval", "verbose"})
    if unknown:
        logger.warning("Ignoring unknown watch options in %s: %s", path, ", ".join(unknown))
    return defaults


def merge_cli(
    defaults: Dict[str, Any],
    *,
    pattern: Optional[str],
    command: List[str],
    poll_interval: Optional[Any],
    verbose: bool,
) -> WatchConfig:
    """Build the final config; command line values win over file defaults."""

    resolved_command = command or defaults.get("command") or []
    if not resolved_command:
        raise ConfigError("a command to run is required")

    if poll_interval is None:
        interval = defaults.get("poll_interval", DEFAULT_POLL_INTERVAL)
    else:
        interval = parse_poll_interval(poll_interval, "-d")

    return WatchConfig(
        command=list(resolved_command),
        pattern=pattern if pattern is not None else defaults.get("pattern"),
        poll_interval=interval,
        verbose=verbose or bool(defaults.get("verbose", False)),
    )


def parse_poll_interval(value: Any, field_name: str) -> int:
    """Poll intervals are whole, positive seconds."""

    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a positive integer")
    try:
        seconds = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a positive integer") from exc
    if seconds != value and str(seconds) != str(value).strip():
        raise ConfigError(f"{field_name} must be a positive integer")
    if seconds <= 0:
        raise ConfigError(f"{field_name} must be a positive integer")
    return seconds


def _parse_command(value: Any, field_name: str) -> List[str]:
    if isinstance(value, str):
        try:
            items = shlex.split(value)
        except ValueError as exc:
            raise ConfigError(f"{field_name} could not be parsed: {exc}") from exc
    elif isinstance(value, list):
        items = []
        for elem in value:
            if not isinstance(elem, (str, int, float)) or isinstance(elem, bool):
                raise ConfigError(f"{field_name} must contain only strings")
            items.append(str(elem))
    else:
        raise ConfigError(f"{field_name} must be a string or a list of strings")
    if not items:
        raise ConfigError(f"{field_name} must not be empty")
    return items
