"""
snitch.engine.transitions — Voice Update → Joined/Left Transitions
===================================================================

Every raw Discord voice-state update is normalized into a
:class:`VoiceStateChange` and classified against the participant's
previous :class:`~snitch.engine.presence.PresenceRecord`:

* leave  (channel → none)          → ``LEFT(old)``   if old is tracked
* join   (none → channel)          → ``JOINED(new)`` if new is tracked
* switch (channel A → channel B)   → ``LEFT(A)``, ``JOINED(B)``, each filtered
* same channel reported again      → ``JOINED(new)`` if tracked

Pure mute/deafen/stream toggles never reach this module: the voice cog
drops updates whose channel did not change.  Updates for any guild other
than the target guild produce nothing and leave the store untouched.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Collection
from dataclasses import dataclass

from snitch.engine.presence import PresenceRecord, PresenceStore

__all__ = [
    "TransitionKind",
    "Transition",
    "VoiceStateChange",
    "classify",
    "apply_change",
]

logger = logging.getLogger(__name__)


class TransitionKind(str, enum.Enum):
    JOINED = "joined"
    LEFT = "left"


@dataclass(frozen=True, slots=True)
class Transition:
    kind: TransitionKind
    channel_id: int
    participant_id: int


@dataclass(frozen=True, slots=True)
class VoiceStateChange:
    """A participant's new voice placement as reported by Discord.

    ``channel_id`` is ``None`` when the participant disconnected from voice.
    """

    participant_id: int
    guild_id: int
    channel_id: int | None


def classify(
    previous: PresenceRecord | None,
    change: VoiceStateChange,
    tracked_channel_ids: Collection[int],
    target_guild_id: int,
) -> list[Transition]:
    """Return the ordered transitions implied by *change*.  Pure."""
    if change.guild_id != target_guild_id:
        return []

    old_channel = previous.channel_id if previous is not None else None
    new_channel = change.channel_id

    transitions: list[Transition] = []
    if (
        old_channel is not None
        and old_channel != new_channel
        and old_channel in tracked_channel_ids
    ):
        transitions.append(
            Transition(TransitionKind.LEFT, old_channel, change.participant_id)
        )
    if new_channel is not None and new_channel in tracked_channel_ids:
        transitions.append(
            Transition(TransitionKind.JOINED, new_channel, change.participant_id)
        )
    return transitions


def apply_change(
    store: PresenceStore,
    change: VoiceStateChange,
    tracked_channel_ids: Collection[int],
    target_guild_id: int,
) -> list[Transition]:
    """Classify *change* against *store*, then apply it to the store.

    The store is updated before the caller acts on the returned
    transitions, so a roster rendered for any of them already reflects
    this change.
    """
    if change.guild_id != target_guild_id:
        return []

    previous = store.get(change.participant_id)
    transitions = classify(previous, change, tracked_channel_ids, target_guild_id)

    if change.channel_id is None:
        store.remove(change.participant_id)
    else:
        store.upsert(
            PresenceRecord(
                participant_id=change.participant_id,
                channel_id=change.channel_id,
                guild_id=change.guild_id,
            )
        )

    for t in transitions:
        logger.info(
            "Transition: user %d %s channel %d",
            t.participant_id, t.kind.value, t.channel_id,
        )
    return transitions
