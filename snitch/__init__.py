"""
Snitch — Discord voice presence, mirrored into a Telegram chat
===============================================================
Watches a set of voice channels in one Discord guild and keeps a single
live roster message per channel in a Telegram chat, announcing who just
joined or left.

Package layout::

    snitch/
    ├── config.py          # YAML + env → typed Python config
    ├── constants.py       # Roster tags, labels, message markers
    ├── engine/
    │   ├── presence.py    # PresenceStore: who is in which channel
    │   ├── transitions.py # Voice update → joined/left transitions
    │   └── notifications.py # channel → last Telegram message id
    ├── services/
    │   ├── roster.py            # Telegram HTML roster rendering
    │   ├── broadcast_service.py # delete-previous / send-new coordinator
    │   ├── telegram_service.py  # Telegram Bot API client (httpx)
    │   └── discord_resolver.py  # user / channel name lookups
    ├── bot/
    │   ├── core.py        # Bot subclass, wiring, cog loader
    │   ├── __main__.py    # python -m snitch.bot
    │   └── cogs/
    │       └── voice.py   # READY snapshot + voice state updates
    └── api/
        ├── main.py        # FastAPI status app + in-process server
        └── routes/        # health, rosters, presence
"""

__version__ = "0.1.0"
