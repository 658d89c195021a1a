"""
snitch.constants — Shared Constants
====================================

Single source of truth for roster presentation: the tag palette, the
reserved-user overrides, and the fixed labels used in Telegram messages.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Telegram message markers (roster.py)
# ---------------------------------------------------------------------------
JOINED_MARKER = "\u27a1\ufe0f"     # ➡️
LEFT_MARKER = "\u2b05\ufe0f"       # ⬅️
CHANNEL_MARKER = "\U0001f4cd"      # 📍
EMPTY_MARKER = "\U0001f507"        # 🔇
MEMBERS_MARKER = "\U0001f3a4"      # 🎤
BULLET = "\u2022"                  # •

UNKNOWN_USER_LABEL = "Unknown User"

# Bot API cap on message text, counted in UTF-16 code units.
TELEGRAM_MESSAGE_LIMIT = 4096
OVERFLOW_MARKER = "\u2026"         # …

# ---------------------------------------------------------------------------
# Per-user tags
# ---------------------------------------------------------------------------
# Drawn with probability JACKPOT_CHANCE on every render, otherwise a
# uniform pick from TAG_PALETTE.
JACKPOT_TAG = "💩"
JACKPOT_CHANCE = 0.15

# username → tag; always wins over the random pick.
RESERVED_TAGS: dict[str, str] = {
    "rilein1": JACKPOT_TAG,
}

TAG_PALETTE: tuple[str, ...] = (
    # Gaming & entertainment
    "🎮", "🎯", "🎪", "🎨", "🎭", "🎰", "🎲", "🎸", "🎺", "🎻", "🎹", "🥁",
    "🎧", "🎤", "🎬", "🎳", "🎱", "🕹️", "🧩", "🧸",
    # Animals
    "🦄", "🦋", "🐉", "🦅", "🦉", "🦜", "🦩", "🦚", "🐆", "🦓", "🦒", "🦔",
    "🦦", "🦥", "🦨", "🦡", "🐿️", "🦫", "🐻", "🐨", "🐼", "🦘", "🦙", "🐪",
    "🦏", "🦛", "🐘", "🦣", "🐊", "🦖", "🦕", "🐙", "🦑", "🦐", "🦞", "🦀",
    "🐠", "🐟", "🐡", "🦈", "🦭", "🐝", "🐞", "🐢", "🦎", "🐌", "🐛", "🐵",
    "🦍", "🐶", "🐺", "🦊", "🦝", "🐱", "🦁", "🐯", "🐴", "🦌",
    # Nature & space
    "🌟", "⭐", "🔥", "💫", "✨", "☄️", "🌠", "🌌", "🌊", "🌋", "🗻", "🏔️",
    "🌳", "🌲", "🌴", "🌵", "🌺", "🌻", "🌷", "🌹", "🍀", "🍄", "🌸", "🌼",
    "🌈", "🌀", "❄️", "☃️", "⚡",
    # Characters & expressions
    "🥳", "🤖", "😎", "🤠", "🥷", "👻", "👽", "👾", "🤡", "🎃", "😈", "👹",
    "👺", "🤯", "🤩", "🥸", "🧙", "🧚", "🧛", "🧜", "🧞", "🧟", "🦸", "🦹",
    "🗿", "😂", "🤣", "😇", "🙃", "😉", "😋", "🤪", "🤨",
    # Sports
    "🤺", "🏂", "🏄", "🚣", "🏊", "🚴", "🤸", "🤹", "🧘", "⚽", "🏀", "🏈",
    "⚾", "🎾", "🏐", "🏓", "🏸", "🏒", "⛳", "🎣", "🎿", "🛷", "🥌",
    # Food
    "🍕", "🍔", "🍟", "🌮", "🌯", "🥙", "🧀", "🥨", "🥐", "🥯", "🧇", "🥞",
    "🍩", "🍪", "🎂", "🧁", "🍭", "🍫", "🍿", "🧋", "🍉", "🍋", "🍌", "🍍",
    "🥭", "🍎",
    # Objects & places
    "💎", "💰", "🏆", "🥇", "🏅", "🎁", "🎈", "🎊", "🎉", "🧨", "🎆", "🔮",
    "🪄", "🛸", "🚀", "💥", "🏰", "🏯", "🗽", "🗼", "⚓", "⛵", "🚁", "🛰️",
    "⏰", "💻", "💾", "📡", "📺", "📻", "📷", "🔦", "💡", "📚",
    # Hearts
    "❤️", "🧡", "💛", "💚", "💙", "💜", "🖤", "🤍", "🤎", "💖", "💘",
    # The jackpot is part of the palette too
    JACKPOT_TAG,
)
