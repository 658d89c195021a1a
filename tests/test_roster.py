"""
tests/test_roster.py — Roster Renderer Unit Tests
==================================================

The renderer is pure apart from the per-user tag, which is drawn at
random on every render.  Exact-string tests therefore use usernames with
a reserved tag (deterministic) or unresolved names (no tag); random tags
are only ever asserted to come from the palette.
"""

from __future__ import annotations

import random

import pytest

from snitch.constants import (
    JACKPOT_TAG,
    OVERFLOW_MARKER,
    RESERVED_TAGS,
    TAG_PALETTE,
    TELEGRAM_MESSAGE_LIMIT,
    UNKNOWN_USER_LABEL,
)
from snitch.engine.transitions import TransitionKind
from snitch.services.roster import (
    DisplayName,
    RosterAction,
    format_display_name,
    pick_tag,
    render_roster,
)

# Deterministic tags for exact-output tests
RESERVED = {"alice": "🦄", "bob": "🎲"}

ALICE = DisplayName(username="alice")
BOB = DisplayName(username="bob", nickname="Bobby")


class TestPickTag:
    def test_reserved_username_always_wins(self):
        rng = random.Random(0)
        assert all(pick_tag("alice", rng, RESERVED) == "🦄" for _ in range(50))

    def test_builtin_reserved_mapping(self):
        username, tag = next(iter(RESERVED_TAGS.items()))
        assert pick_tag(username, random.Random(1)) == tag

    @pytest.mark.parametrize("seed", range(20))
    def test_random_tag_comes_from_palette(self, seed):
        assert pick_tag("someone", random.Random(seed)) in TAG_PALETTE

    def test_jackpot_drawn_when_roll_is_low(self):
        class _LowRoll(random.Random):
            def random(self):
                return 0.0

        assert pick_tag("someone", _LowRoll()) == JACKPOT_TAG

    def test_uniform_pick_when_roll_is_high(self):
        class _HighRoll(random.Random):
            def random(self):
                return 0.99

            def choice(self, seq):
                return seq[0]

        assert pick_tag("someone", _HighRoll()) == TAG_PALETTE[0]

    def test_not_cached_per_user(self):
        rng = random.Random(3)
        tags = {pick_tag("someone", rng) for _ in range(200)}
        assert len(tags) > 1


class TestFormatDisplayName:
    def test_username_only(self):
        assert format_display_name(ALICE, reserved=RESERVED) == "🦄 alice"

    def test_with_nickname(self):
        assert format_display_name(BOB, reserved=RESERVED) == "🎲 Bobby (bob) 🎲"

    def test_unknown_user_has_no_tag(self):
        assert format_display_name(DisplayName.unknown()) == UNKNOWN_USER_LABEL

    def test_random_tag_prefix_in_palette(self):
        text = format_display_name(DisplayName(username="carol"), random.Random(5))
        tag, name = text.split(" ", 1)
        assert tag in TAG_PALETTE
        assert name == "carol"

    def test_nickname_uses_same_tag_twice(self):
        text = format_display_name(DisplayName("dave", "D"), random.Random(9))
        parts = text.split(" ")
        assert parts[0] == parts[-1]
        assert parts[0] in TAG_PALETTE

    def test_html_is_escaped(self):
        name = DisplayName(username="<b>x</b>", nickname="a & b")
        text = format_display_name(name, reserved={"<b>x</b>": "T"})
        assert text == "T a &amp; b (&lt;b&gt;x&lt;/b&gt;) T"


class TestRenderRoster:
    def test_empty_channel(self):
        assert render_roster("General", []) == (
            "\U0001f4cd <b>Channel: General</b>\n"
            "\U0001f507 Voice channel is now empty"
        )

    def test_two_members(self):
        text = render_roster("General", [ALICE, BOB], reserved=RESERVED)
        assert text == (
            "\U0001f4cd <b>Channel: General</b>\n"
            "\U0001f3a4 <b>Active Members (2):</b>\n"
            "  • 🦄 alice\n"
            "  • 🎲 Bobby (bob) 🎲\n"
        )

    def test_order_is_preserved(self):
        text = render_roster("General", [BOB, ALICE], reserved=RESERVED)
        assert text.index("Bobby") < text.index("alice")

    def test_joined_action_line(self):
        action = RosterAction(kind=TransitionKind.JOINED, actor=ALICE)
        text = render_roster("General", [ALICE], action, reserved=RESERVED)
        assert text == (
            "\u27a1\ufe0f <b>🦄 alice</b> just joined\n\n"
            "\U0001f4cd <b>Channel: General</b>\n"
            "\U0001f3a4 <b>Active Members (1):</b>\n"
            "  • 🦄 alice\n"
        )

    def test_left_action_line_on_empty_channel(self):
        action = RosterAction(kind=TransitionKind.LEFT, actor=BOB)
        text = render_roster("General", [], action, reserved=RESERVED)
        assert text == (
            "\u2b05\ufe0f <b>🎲 Bobby (bob) 🎲</b> just left\n\n"
            "\U0001f4cd <b>Channel: General</b>\n"
            "\U0001f507 Voice channel is now empty"
        )

    def test_unknown_members_are_listed(self):
        text = render_roster("General", [DisplayName.unknown(), DisplayName.unknown()])
        assert "Active Members (2)" in text
        assert text.count(UNKNOWN_USER_LABEL) == 2

    def test_channel_name_is_escaped(self):
        assert "Channel: R&amp;D &lt;3</b>" in render_roster("R&D <3", [])

    def test_pure_for_same_input(self):
        args = ("General", [ALICE, BOB], RosterAction(TransitionKind.JOINED, BOB))
        assert render_roster(*args, reserved=RESERVED) == render_roster(*args, reserved=RESERVED)
        assert (
            render_roster(*args, rng=random.Random(11))
            == render_roster(*args, rng=random.Random(11))
        )

    @pytest.mark.parametrize("seed", range(10))
    def test_random_tags_always_from_palette(self, seed):
        text = render_roster("General", [DisplayName("carol"), DisplayName("erin")], rng=random.Random(seed))
        for line in text.splitlines()[2:]:
            tag = line.strip().split(" ")[1]
            assert tag in TAG_PALETTE


class TestMessageLimit:
    def _crowd(self, count):
        return [
            DisplayName(username=f"user{i:04d}", nickname="N" * 60) for i in range(count)
        ]

    @staticmethod
    def _units(text):
        return len(text.encode("utf-16-le")) // 2

    def test_large_channel_is_trimmed_under_limit(self):
        crowd = self._crowd(300)
        text = render_roster("General", crowd, RosterAction(TransitionKind.JOINED, crowd[0]), rng=random.Random(2))

        assert self._units(text) <= TELEGRAM_MESSAGE_LIMIT
        assert "Active Members (300):" in text
        listed = text.count(" • ")
        assert 0 < listed < 300
        assert text.endswith(f"  {OVERFLOW_MARKER}and {300 - listed} more\n")

    def test_small_channel_is_not_trimmed(self):
        text = render_roster("General", self._crowd(5), rng=random.Random(2))
        assert OVERFLOW_MARKER not in text
        assert text.count(" • ") == 5
