"""
snitch.bot.cogs.voice — Voice presence → Telegram rosters
==========================================================

Two listeners:

* ``on_ready`` — (re)seeds the :class:`PresenceStore` from the target
  guild's voice states and, if enabled, posts a roster for every tracked
  channel that has people in it or still shows an older roster.  Fires
  again after every reconnect; seeding bypasses the classifier, so
  resyncs never look like joins.
* ``on_voice_state_update`` — classifies the update into joined/left
  transitions and rebroadcasts the affected channels' rosters.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from snitch.engine.presence import PresenceRecord
from snitch.engine.transitions import VoiceStateChange, apply_change

if TYPE_CHECKING:
    from snitch.bot.core import SnitchBot

logger = logging.getLogger(__name__)


def snapshot_records(guild: discord.Guild, *, ignore_bots: bool = False) -> list[PresenceRecord]:
    """Build presence records from every voice/stage channel in *guild*."""
    records: list[PresenceRecord] = []
    for channel in [*guild.voice_channels, *guild.stage_channels]:
        for user_id in channel.voice_states:
            if ignore_bots:
                member = guild.get_member(user_id)
                if member is not None and member.bot:
                    continue
            records.append(
                PresenceRecord(participant_id=user_id, channel_id=channel.id, guild_id=guild.id)
            )
    return records


class Voice(commands.Cog, name="Voice"):
    """Keeps presence state current and drives roster broadcasts."""

    def __init__(self, bot: SnitchBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # READY / resync
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_ready(self) -> None:
        try:
            await self.bootstrap()
        except Exception:
            logger.exception("Voice snapshot bootstrap failed")

    async def bootstrap(self) -> None:
        cfg = self.bot.cfg
        guild = self.bot.get_guild(cfg.guild_id)
        if guild is None:
            logger.warning("Guild %d not found — presence snapshot skipped", cfg.guild_id)
            return

        records = snapshot_records(guild, ignore_bots=cfg.ignore_bots)
        self.bot.presence.bulk_load(guild.id, records)
        for rec in records:
            logger.debug("Cached voice state: user %d in channel %d", rec.participant_id, rec.channel_id)

        if cfg.announce_on_ready:
            await self.bot.broadcaster.announce_all(cfg.tracked_channel_ids)

    # -------------------------------------------------------------------
    # Voice state updates
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        before_ch = getattr(before.channel, "name", "None")
        after_ch = getattr(after.channel, "name", "None")
        logger.debug(
            "Gateway event: VOICE_STATE %s (%s → %s, bot=%s)",
            member.name, before_ch, after_ch, member.bot,
        )
        try:
            await self._handle_voice_update(member, before, after)
        except Exception:
            logger.exception("Error processing voice state update for user %s", member.id)

    async def _handle_voice_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        cfg = self.bot.cfg
        if cfg.ignore_bots and member.bot:
            return

        before_id = before.channel.id if before.channel is not None else None
        after_id = after.channel.id if after.channel is not None else None
        if before_id is not None and before_id == after_id:
            # Mute or deafen toggle, placement unchanged.
            return

        change = VoiceStateChange(
            participant_id=member.id,
            guild_id=member.guild.id,
            channel_id=after_id,
        )
        transitions = apply_change(
            self.bot.presence, change, cfg.tracked_channel_ids, cfg.guild_id,
        )
        for transition in transitions:
            await self.bot.broadcaster.broadcast(transition.channel_id, transition)


async def setup(bot: SnitchBot) -> None:
    await bot.add_cog(Voice(bot))
