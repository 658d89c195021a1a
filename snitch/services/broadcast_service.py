"""
snitch.services.broadcast_service — Live roster broadcaster
============================================================

Owns the "one roster message per channel" rule.  For every transition
(and once per occupied channel after READY) it:

1. resolves the channel name — failure skips the broadcast;
2. snapshots the channel's occupants from the :class:`PresenceStore`
   and resolves their names — each failure becomes ``Unknown User``;
3. renders the roster;
4. deletes the previous roster message, if any (best effort);
5. sends the new one and remembers its message id.

Broadcasts for the same channel are serialized by a per-channel
:class:`asyncio.Lock`, so their delete/send pairs never interleave.
Different channels proceed concurrently.  No store lock is ever held
across an ``await``.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Protocol

from snitch.constants import RESERVED_TAGS
from snitch.engine.notifications import NotificationCache
from snitch.engine.presence import PresenceStore
from snitch.engine.transitions import Transition
from snitch.services.roster import DisplayName, RosterAction, render_roster

logger = logging.getLogger(__name__)


class NameResolver(Protocol):
    async def resolve_display_name(self, guild_id: int, participant_id: int) -> DisplayName: ...

    async def resolve_channel_name(self, channel_id: int) -> str: ...


class Messenger(Protocol):
    async def send_notification(self, text: str) -> int: ...

    async def delete_notification(self, handle: int) -> None: ...


class BroadcastCoordinator:
    """Render → delete previous → send → record, one channel at a time.

    Parameters
    ----------
    store / notifications:
        Shared runtime state, owned by the bot.
    resolver / messenger:
        Discord name lookups and Telegram delivery.
    guild_id:
        The target guild; occupants are read from it.
    rng:
        Source of tag randomness.  Tests pass a seeded instance.
    reserved_tags:
        Extra username → tag overrides layered on top of the defaults.
    """

    def __init__(
        self,
        store: PresenceStore,
        notifications: NotificationCache,
        resolver: NameResolver,
        messenger: Messenger,
        *,
        guild_id: int,
        rng: random.Random | None = None,
        reserved_tags: Mapping[str, str] | None = None,
    ) -> None:
        self.store = store
        self.notifications = notifications
        self.resolver = resolver
        self.messenger = messenger
        self.guild_id = guild_id
        self.rng = rng or random.Random()
        self.reserved_tags = {**RESERVED_TAGS, **(reserved_tags or {})}
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Refuse new broadcasts.  In-flight ones are left to finish."""
        self._closed = True

    # -------------------------------------------------------------------
    # Name resolution (never raises)
    # -------------------------------------------------------------------
    async def _display_name(self, participant_id: int) -> DisplayName:
        try:
            return await self.resolver.resolve_display_name(self.guild_id, participant_id)
        except Exception:
            logger.warning(
                "Could not resolve user %d in guild %d — using fallback label",
                participant_id, self.guild_id, exc_info=True,
            )
            return DisplayName.unknown()

    async def _occupants(self, channel_id: int) -> list[DisplayName]:
        participant_ids = sorted(self.store.snapshot(self.guild_id, channel_id))
        return list(
            await asyncio.gather(*(self._display_name(pid) for pid in participant_ids))
        )

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def broadcast(
        self, channel_id: int, transition: Transition | None = None
    ) -> int | None:
        """Replace *channel_id*'s roster message.  Returns the new message id.

        Never raises for collaborator failures; returns ``None`` when
        nothing was sent.
        """
        if self._closed:
            logger.debug("Broadcaster closed — dropping roster for channel %d", channel_id)
            return None

        async with self._locks[channel_id]:
            return await self._broadcast_locked(channel_id, transition)

    async def _broadcast_locked(
        self, channel_id: int, transition: Transition | None
    ) -> int | None:
        try:
            channel_name = await self.resolver.resolve_channel_name(channel_id)
        except Exception:
            logger.exception("Failed to get channel %d — skipping roster", channel_id)
            return None

        occupants = await self._occupants(channel_id)
        action = None
        if transition is not None:
            action = RosterAction(
                kind=transition.kind,
                actor=await self._display_name(transition.participant_id),
            )

        text = render_roster(
            channel_name, occupants, action, rng=self.rng, reserved=self.reserved_tags,
        )

        previous = self.notifications.get(channel_id)
        if previous is not None:
            try:
                await self.messenger.delete_notification(previous)
            except Exception:
                logger.warning(
                    "Failed to delete previous roster message %d for channel %d",
                    previous, channel_id, exc_info=True,
                )

        try:
            handle = await self.messenger.send_notification(text)
        except Exception as exc:
            retry_after = getattr(exc, "retry_after", None)
            if retry_after:
                logger.error(
                    "Failed to send roster for channel %d (rate limited, retry after %ds)",
                    channel_id, retry_after, exc_info=True,
                )
            else:
                logger.exception("Failed to send roster for channel %d", channel_id)
            return None

        self.notifications.set(channel_id, handle)
        logger.info(
            "Roster for #%s (%d) sent: %d member(s), message %d",
            channel_name, channel_id, len(occupants), handle,
        )
        return handle

    async def announce_all(self, channel_ids: Iterable[int]) -> None:
        """Post a plain roster for every channel in *channel_ids* that needs one.

        That is every occupied channel, plus every channel that still has a
        live roster message: a channel that emptied while disconnected gets
        its stale roster replaced by an empty one.
        """
        for channel_id in channel_ids:
            occupied = bool(self.store.snapshot(self.guild_id, channel_id))
            if occupied or self.notifications.get(channel_id) is not None:
                await self.broadcast(channel_id)
