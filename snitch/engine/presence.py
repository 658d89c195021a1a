"""
snitch.engine.presence — In-Memory Voice Presence Store
========================================================

The single source of truth for "who is in which voice channel right now"
in the target guild.  Every placement is recorded, not only tracked
channels, so that a later leave or switch out of an untracked channel is
still classified correctly.

State is runtime-only: it is seeded from the READY snapshot on every
(re)connect via :meth:`PresenceStore.bulk_load` and kept current by
:func:`snitch.engine.transitions.apply_change`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PresenceRecord:
    """A participant's last known voice placement."""

    participant_id: int
    channel_id: int
    guild_id: int


class PresenceStore:
    """Thread-safe mapping of participant id → :class:`PresenceRecord`.

    All reads and writes take the same lock, so a reader never observes a
    half-applied update.  Reads return copies; callers may hold on to them
    across ``await`` points without blocking writers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, PresenceRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, participant_id: int) -> PresenceRecord | None:
        with self._lock:
            return self._records.get(participant_id)

    def snapshot(self, guild_id: int, channel_id: int) -> set[int]:
        """Return the participant ids currently recorded in *channel_id*."""
        with self._lock:
            return {
                rec.participant_id
                for rec in self._records.values()
                if rec.guild_id == guild_id and rec.channel_id == channel_id
            }

    def occupancy(self, guild_id: int) -> dict[int, set[int]]:
        """Return ``{channel_id: {participant_id, ...}}`` for every occupied channel."""
        result: dict[int, set[int]] = {}
        with self._lock:
            for rec in self._records.values():
                if rec.guild_id == guild_id:
                    result.setdefault(rec.channel_id, set()).add(rec.participant_id)
        return result

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def upsert(self, record: PresenceRecord) -> None:
        with self._lock:
            self._records[record.participant_id] = record

    def remove(self, participant_id: int) -> PresenceRecord | None:
        """Delete and return the participant's record (``None`` if unknown)."""
        with self._lock:
            return self._records.pop(participant_id, None)

    def bulk_load(self, guild_id: int, records: Iterable[PresenceRecord]) -> int:
        """Replace all state for *guild_id* with *records*.

        Records for other guilds or without a channel are ignored.
        Returns the number loaded.
        No transitions are produced: a resync after reconnect must never
        look like a wave of joins.
        """
        fresh = {
            r.participant_id: r
            for r in records
            if r.guild_id == guild_id and r.channel_id is not None
        }
        with self._lock:
            self._records = {
                pid: rec
                for pid, rec in self._records.items()
                if rec.guild_id != guild_id
            }
            self._records.update(fresh)
        logger.info("Presence snapshot loaded for guild %d: %d records", guild_id, len(fresh))
        return len(fresh)
