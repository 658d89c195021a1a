"""
tests/test_discord_resolver.py — Discord Name Resolver Tests
=============================================================
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from conftest import GUILD_ID, TRACKED_A

from snitch.services.discord_resolver import DiscordNameResolver
from snitch.services.roster import DisplayName


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def _not_found() -> discord.NotFound:
    return discord.NotFound(MagicMock(status=404, reason="Not Found"), "Unknown Member")


def _client(user=None, member=None, guild_present=True):
    client = MagicMock()
    client.get_user.return_value = user
    client.fetch_user = AsyncMock(return_value=SimpleNamespace(name="fetched"))

    guild = MagicMock()
    guild.get_member.return_value = member
    guild.fetch_member = AsyncMock(side_effect=_not_found())
    client.get_guild.return_value = guild if guild_present else None
    return client, guild


class TestResolveDisplayName:
    def test_cached_user_and_member(self):
        client, guild = _client(
            user=SimpleNamespace(name="alice"), member=SimpleNamespace(nick="Ally")
        )
        name = run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 1))

        assert name == DisplayName(username="alice", nickname="Ally")
        client.fetch_user.assert_not_awaited()
        guild.fetch_member.assert_not_awaited()
        client.get_guild.assert_called_once_with(GUILD_ID)

    def test_fetches_user_when_not_cached(self):
        client, _ = _client(user=None, member=SimpleNamespace(nick=None))
        name = run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 1))

        assert name == DisplayName(username="fetched")
        client.fetch_user.assert_awaited_once_with(1)

    def test_fetches_member_when_not_cached(self):
        client, guild = _client(user=SimpleNamespace(name="bob"))
        guild.fetch_member = AsyncMock(return_value=SimpleNamespace(nick="Bobby"))

        name = run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 2))
        assert name == DisplayName(username="bob", nickname="Bobby")

    def test_non_member_falls_back_to_username(self):
        client, _ = _client(user=SimpleNamespace(name="carol"))
        name = run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 3))
        assert name == DisplayName(username="carol")

    def test_missing_guild_uses_username(self):
        client, _ = _client(user=SimpleNamespace(name="dave"), guild_present=False)
        name = run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 4))
        assert name == DisplayName(username="dave")

    def test_user_lookup_failure_propagates(self):
        client, _ = _client(user=None)
        client.fetch_user = AsyncMock(side_effect=_not_found())
        with pytest.raises(discord.NotFound):
            run_async(DiscordNameResolver(client).resolve_display_name(GUILD_ID, 5))


class TestResolveChannelName:
    def test_cached_channel(self):
        client = MagicMock()
        client.get_channel.return_value = SimpleNamespace(name="General")
        client.fetch_channel = AsyncMock()

        assert run_async(DiscordNameResolver(client).resolve_channel_name(TRACKED_A)) == "General"
        client.fetch_channel.assert_not_awaited()

    def test_fetched_channel(self):
        client = MagicMock()
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(return_value=SimpleNamespace(name="Gaming"))

        assert run_async(DiscordNameResolver(client).resolve_channel_name(TRACKED_A)) == "Gaming"
        client.fetch_channel.assert_awaited_once_with(TRACKED_A)

    def test_failure_propagates(self):
        client = MagicMock()
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(side_effect=_not_found())

        with pytest.raises(discord.NotFound):
            run_async(DiscordNameResolver(client).resolve_channel_name(TRACKED_A))
