"""
snitch.services.discord_resolver — Discord name lookups
========================================================

Resolves user ids and channel ids to display text for the roster.
Cache first (``get_*``), REST fallback (``fetch_*``) second — the same
order the bot uses everywhere else.  Failures propagate as
:class:`discord.HTTPException` subclasses; the broadcast coordinator
owns the fallback behaviour.
"""

from __future__ import annotations

import logging

import discord

from snitch.services.roster import DisplayName

logger = logging.getLogger(__name__)


class DiscordNameResolver:
    """Name lookups backed by a connected :class:`discord.Client`."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def resolve_display_name(self, guild_id: int, participant_id: int) -> DisplayName:
        user = self.client.get_user(participant_id)
        if user is None:
            user = await self.client.fetch_user(participant_id)

        nickname: str | None = None
        guild = self.client.get_guild(guild_id)
        if guild is not None:
            member = guild.get_member(participant_id)
            if member is None:
                try:
                    member = await guild.fetch_member(participant_id)
                except discord.HTTPException:
                    # Not a member any more; the username alone will do.
                    member = None
            if member is not None:
                nickname = member.nick

        return DisplayName(username=user.name, nickname=nickname)

    async def resolve_channel_name(self, channel_id: int) -> str:
        channel = self.client.get_channel(channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(channel_id)
        return channel.name
