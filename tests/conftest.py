"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest

from snitch.config import SnitchConfig
from snitch.engine.notifications import NotificationCache
from snitch.engine.presence import PresenceStore

GUILD_ID = 111222333
OTHER_GUILD_ID = 999888777

TRACKED_A = 1001
TRACKED_B = 1002
UNTRACKED = 2001

CHAT_ID = -100555


def make_config(**overrides) -> SnitchConfig:
    """Create a SnitchConfig for tests.  Usable as both a fixture and a factory."""
    values = {
        "guild_id": GUILD_ID,
        "tracked_channel_ids": (TRACKED_A, TRACKED_B),
        "telegram_chat_id": CHAT_ID,
    }
    values.update(overrides)
    return SnitchConfig(**values)


@pytest.fixture
def cfg() -> SnitchConfig:
    return make_config()


@pytest.fixture
def store() -> PresenceStore:
    """A fresh, empty presence store per test."""
    return PresenceStore()


@pytest.fixture
def notifications() -> NotificationCache:
    return NotificationCache()
