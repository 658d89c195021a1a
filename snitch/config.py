"""
snitch.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for the **soft** settings: which guild to watch,
which voice channels to track, and where to post in Telegram.  Secrets
(``DISCORD_TOKEN``, ``TELEGRAM_TOKEN``) never live here — they come from
the environment / ``.env`` and are read by :mod:`snitch.bot.__main__`.

Usage::

    from snitch.config import load_config

    cfg = load_config()                  # reads ./config.yaml by default
    print(cfg.guild_id)                  # 1468816181854081229
    print(cfg.tracked_channel_ids)       # (1468816182000000001, ...)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"
DEFAULT_TELEGRAM_TIMEOUT = 10.0


class ConfigError(ValueError):
    """Raised when ``config.yaml`` is present but malformed."""


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SnitchConfig:
    """Immutable configuration loaded from ``config.yaml``.

    ``tracked_channel_ids`` keeps the order from the file; the initial
    roster broadcast after READY walks channels in that order.
    """

    # Discord
    guild_id: int  # The one guild we watch
    tracked_channel_ids: tuple[int, ...]

    # Telegram
    telegram_chat_id: int

    # Optional
    ignore_bots: bool = False
    announce_on_ready: bool = True
    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE
    telegram_timeout: float = DEFAULT_TELEGRAM_TIMEOUT
    reserved_tags: Mapping[str, str] = field(default_factory=dict)

    # Status API, disabled when listener_port is None
    listener_host: str = "127.0.0.1"
    listener_port: int | None = None

    @property
    def listener_enabled(self) -> bool:
        return self.listener_port is not None


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------
def _section(raw: dict, name: str, *, required: bool = True) -> dict:
    value = raw.get(name)
    if value is None:
        if required:
            raise ConfigError(f"Missing required section: '{name}'")
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _snowflake(value: Any, key: str) -> int:
    """Coerce a Discord/Telegram id.  Strings are accepted (YAML quoting)."""
    if isinstance(value, bool):
        raise ConfigError(f"'{key}' must be an integer id, got {value!r}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be an integer id, got {value!r}") from None


def _channel_list(value: Any) -> tuple[int, ...]:
    """Parse ``tracked_channels`` from a YAML list or a comma-separated string."""
    key = "discord.tracked_channels"
    if isinstance(value, str):
        items: list[Any] = [v for v in (p.strip() for p in value.split(",")) if v]
    elif isinstance(value, list):
        items = value
    else:
        raise ConfigError(f"'{key}' must be a list of channel ids")

    ids: list[int] = []
    for item in items:
        channel_id = _snowflake(item, key)
        if channel_id not in ids:
            ids.append(channel_id)
    if not ids:
        raise ConfigError(f"'{key}' must contain at least one channel id")
    return tuple(ids)


def _flag(section: dict, name: str, key: str, default: bool) -> bool:
    """Read a YAML boolean.  Quoted strings such as ``"false"`` are rejected."""
    value = section.get(name, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _reserved_tags(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("'roster.reserved_tags' must be a mapping of username → tag")
    return {str(k): str(v) for k, v in value.items()}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_config(raw: dict) -> SnitchConfig:
    """Build a :class:`SnitchConfig` from an already-parsed YAML mapping."""
    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping")

    discord_raw = _section(raw, "discord")
    telegram_raw = _section(raw, "telegram")
    roster_raw = _section(raw, "roster", required=False)
    listener_raw = _section(raw, "listener", required=False)

    if "target_guild_id" not in discord_raw:
        raise ConfigError("Missing required key: 'discord.target_guild_id'")
    if "tracked_channels" not in discord_raw:
        raise ConfigError("Missing required key: 'discord.tracked_channels'")
    if "chat_id" not in telegram_raw:
        raise ConfigError("Missing required key: 'telegram.chat_id'")

    listener_port = None
    if listener_raw.get("port") is not None:
        listener_port = _snowflake(listener_raw["port"], "listener.port")
        if not 0 < listener_port < 65536:
            raise ConfigError(f"'listener.port' out of range: {listener_port}")

    try:
        timeout = float(telegram_raw.get("timeout", DEFAULT_TELEGRAM_TIMEOUT))
    except (TypeError, ValueError):
        raise ConfigError("'telegram.timeout' must be a number of seconds") from None

    return SnitchConfig(
        guild_id=_snowflake(discord_raw["target_guild_id"], "discord.target_guild_id"),
        tracked_channel_ids=_channel_list(discord_raw["tracked_channels"]),
        telegram_chat_id=_snowflake(telegram_raw["chat_id"], "telegram.chat_id"),
        ignore_bots=_flag(discord_raw, "ignore_bots", "discord.ignore_bots", False),
        announce_on_ready=_flag(
            discord_raw, "announce_on_ready", "discord.announce_on_ready", True
        ),
        telegram_api_base=str(
            telegram_raw.get("api_base") or DEFAULT_TELEGRAM_API_BASE
        ).rstrip("/"),
        telegram_timeout=timeout,
        reserved_tags=_reserved_tags(roster_raw.get("reserved_tags")),
        listener_host=str(listener_raw.get("host") or "127.0.0.1"),
        listener_port=listener_port,
    )


def load_config(path: str | Path = "config.yaml") -> SnitchConfig:
    """Read *path* and return a :class:`SnitchConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ConfigError
        If a required key is missing or a value is malformed.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    return parse_config(raw)
