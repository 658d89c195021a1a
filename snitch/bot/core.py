"""
snitch.bot.core — Bot Instance & Cog Loader
============================================

Defines :class:`SnitchBot`, a ``commands.Bot`` subclass that owns every
piece of runtime state:

1. ``bot.cfg`` — the parsed :class:`SnitchConfig`.
2. ``bot.presence`` — the :class:`PresenceStore` (who is where).
3. ``bot.notifications`` — the :class:`NotificationCache` (last roster
   message per channel).
4. ``bot.broadcaster`` — the :class:`BroadcastCoordinator` wired to
   Discord name lookups and the Telegram chat.

Nothing here is a module global, so tests can build as many isolated
bots as they like.
"""

from __future__ import annotations

import logging
import random

import discord
from discord.ext import commands

from snitch.config import SnitchConfig
from snitch.engine.notifications import NotificationCache
from snitch.engine.presence import PresenceStore
from snitch.services.broadcast_service import BroadcastCoordinator
from snitch.services.discord_resolver import DiscordNameResolver
from snitch.services.telegram_service import TelegramClient, TelegramMessenger

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "snitch.bot.cogs.voice",
]


class SnitchBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`SnitchConfig` from ``config.yaml``.
    telegram:
        A :class:`TelegramClient`; closed together with the bot.
    rng:
        Optional randomness source for roster tags.
    """

    def __init__(
        self,
        cfg: SnitchConfig,
        telegram: TelegramClient,
        *,
        rng: random.Random | None = None,
    ) -> None:
        # Only guild + voice-state events are needed.  GUILD_MEMBERS is
        # privileged and left off: nicknames are fetched on demand.
        intents = discord.Intents.none()
        intents.guilds = True
        intents.voice_states = True

        super().__init__(command_prefix=commands.when_mentioned, intents=intents)

        self.cfg = cfg
        self.telegram = telegram
        self.presence = PresenceStore()
        self.notifications = NotificationCache()
        self.broadcaster = BroadcastCoordinator(
            self.presence,
            self.notifications,
            DiscordNameResolver(self),
            TelegramMessenger(telegram, cfg.telegram_chat_id),
            guild_id=cfg.guild_id,
            rng=rng,
            reserved_tags=cfg.reserved_tags,
        )

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load every extension before connecting.

        A broken extension is logged, not fatal.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info(
            "Discord bot ready: %s (ID: %s), %d guild(s)",
            self.user.name, self.user.id, len(self.guilds),
        )
        if self.get_guild(self.cfg.guild_id) is None:
            logger.warning(
                "Target guild %d not visible to the bot — no rosters will be sent",
                self.cfg.guild_id,
            )

    async def close(self) -> None:
        """Graceful shutdown — stop broadcasting, then close HTTP clients."""
        logger.info("Bot shutting down…")
        self.broadcaster.close()
        try:
            await super().close()
        finally:
            await self.telegram.aclose()
