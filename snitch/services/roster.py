"""
snitch.services.roster — Telegram roster message rendering
===========================================================

All message layout lives here so the broadcast coordinator only needs to
supply data.  Output is Telegram HTML (``parse_mode=HTML``); every piece
of user-controlled text is escaped.

Example (two members, someone just joined)::

    ➡️ <b>🦄 alice</b> just joined

    📍 <b>Channel: General</b>
    🎤 <b>Active Members (2):</b>
      • 🦄 alice
      • 🎲 Bobby (bob) 🎲

Tags are cosmetic and **intentionally random**: a fresh one is drawn on
every render (not cached per user).  Pass a seeded :class:`random.Random`
to get reproducible output.
"""

from __future__ import annotations

import html
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from snitch.constants import (
    BULLET,
    CHANNEL_MARKER,
    EMPTY_MARKER,
    JACKPOT_CHANCE,
    JACKPOT_TAG,
    JOINED_MARKER,
    LEFT_MARKER,
    MEMBERS_MARKER,
    OVERFLOW_MARKER,
    RESERVED_TAGS,
    TAG_PALETTE,
    TELEGRAM_MESSAGE_LIMIT,
    UNKNOWN_USER_LABEL,
)
from snitch.engine.transitions import TransitionKind


@dataclass(frozen=True, slots=True)
class DisplayName:
    """A participant's names as resolved from Discord."""

    username: str
    nickname: str | None = None
    resolved: bool = True

    @classmethod
    def unknown(cls) -> DisplayName:
        """Fallback used when the user could not be looked up."""
        return cls(username=UNKNOWN_USER_LABEL, resolved=False)


@dataclass(frozen=True, slots=True)
class RosterAction:
    """The "X just joined / just left" line at the top of a roster."""

    kind: TransitionKind
    actor: DisplayName


def pick_tag(
    username: str,
    rng: random.Random | None = None,
    reserved: Mapping[str, str] | None = None,
) -> str:
    """Return the tag for *username*.

    Reserved usernames always get their fixed tag.  Everyone else gets
    :data:`JACKPOT_TAG` with probability :data:`JACKPOT_CHANCE`, otherwise a
    uniform pick from :data:`TAG_PALETTE`.
    """
    table = RESERVED_TAGS if reserved is None else reserved
    if username in table:
        return table[username]
    rng = rng or random
    if rng.random() < JACKPOT_CHANCE:
        return JACKPOT_TAG
    return rng.choice(TAG_PALETTE)


def format_display_name(
    name: DisplayName,
    rng: random.Random | None = None,
    reserved: Mapping[str, str] | None = None,
) -> str:
    """Decorate *name* with a tag.  Unresolved names get the bare label."""
    if not name.resolved:
        return html.escape(name.username)

    tag = pick_tag(name.username, rng, reserved)
    username = html.escape(name.username)
    if not name.nickname:
        return f"{tag} {username}"
    return f"{tag} {html.escape(name.nickname)} ({username}) {tag}"


def render_action_line(
    action: RosterAction,
    rng: random.Random | None = None,
    reserved: Mapping[str, str] | None = None,
) -> str:
    actor = format_display_name(action.actor, rng, reserved)
    if action.kind is TransitionKind.JOINED:
        return f"{JOINED_MARKER} <b>{actor}</b> just joined\n\n"
    return f"{LEFT_MARKER} <b>{actor}</b> just left\n\n"


def render_roster(
    channel_name: str,
    occupants: Sequence[DisplayName],
    action: RosterAction | None = None,
    rng: random.Random | None = None,
    reserved: Mapping[str, str] | None = None,
) -> str:
    """Build the full roster message for one voice channel.

    *occupants* are listed in the order given.  When the list would push
    the message past Telegram's length limit, the tail is replaced by an
    "…and N more" line; the member count in the heading stays exact.
    """
    action_line = render_action_line(action, rng, reserved) if action else ""
    header = f"{CHANNEL_MARKER} <b>Channel: {html.escape(channel_name)}</b>\n"

    if not occupants:
        return f"{action_line}{header}{EMPTY_MARKER} Voice channel is now empty"

    head = (
        f"{action_line}{header}"
        f"{MEMBERS_MARKER} <b>Active Members ({len(occupants)}):</b>\n"
    )
    lines = [f"  {BULLET} {format_display_name(o, rng, reserved)}\n" for o in occupants]
    return head + _fit_members(lines, TELEGRAM_MESSAGE_LIMIT - _utf16_len(head))


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _overflow_line(hidden: int) -> str:
    return f"  {OVERFLOW_MARKER}and {hidden} more\n"


def _fit_members(lines: list[str], budget: int) -> str:
    """Join *lines*, cutting the tail to stay within *budget*."""
    if sum(_utf16_len(line) for line in lines) <= budget:
        return "".join(lines)

    # Room for the widest possible overflow line.
    budget -= _utf16_len(_overflow_line(len(lines)))
    kept: list[str] = []
    used = 0
    for line in lines:
        size = _utf16_len(line)
        if used + size > budget:
            break
        kept.append(line)
        used += size
    return "".join(kept) + _overflow_line(len(lines) - len(kept))
