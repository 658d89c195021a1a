"""
snitch.bot.__main__ — Entry point for ``python -m snitch.bot``
==============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the Telegram client and the SnitchBot.
4. Optionally start the status API on the same event loop.
5. Run until SIGINT/SIGTERM, then shut everything down.

Run with::

    python -m snitch.bot
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys

from dotenv import load_dotenv

from snitch.api.main import build_server, create_app
from snitch.bot.core import SnitchBot
from snitch.config import ConfigError, SnitchConfig, load_config
from snitch.services.telegram_service import TelegramClient

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def parse_log_level(value: str | None) -> int | None:
    """Map a level name such as ``"debug"`` to its number; ``None`` if unknown."""
    if not value:
        return logging.INFO
    return logging.getLevelNamesMapping().get(value.strip().upper())


_level_name = os.getenv("LOG_LEVEL")
_level = parse_log_level(_level_name)
logging.basicConfig(
    level=_level if _level is not None else logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("snitch")
if _level is None:
    logger.warning("Unknown LOG_LEVEL %r, falling back to INFO", _level_name)


async def serve(cfg: SnitchConfig, discord_token: str, telegram_token: str) -> None:
    """Run the bot (and the status API, if enabled) until told to stop."""
    telegram = TelegramClient(
        telegram_token,
        api_base=cfg.telegram_api_base,
        timeout=cfg.telegram_timeout,
    )
    bot = SnitchBot(cfg, telegram)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    tasks = [asyncio.create_task(bot.start(discord_token), name="discord")]

    server = None
    if cfg.listener_enabled:
        app = create_app(cfg, bot.presence, bot.notifications)
        server = build_server(app, cfg.listener_host, cfg.listener_port)
        tasks.append(asyncio.create_task(server.serve(), name="status-api"))
        logger.info("Status API listening on %s:%d", cfg.listener_host, cfg.listener_port)

    stopper = asyncio.create_task(stop.wait(), name="stop-signal")
    done, _ = await asyncio.wait([*tasks, stopper], return_when=asyncio.FIRST_COMPLETED)
    if stopper in done:
        logger.info("Received signal to stop")
    else:
        logger.warning("A service stopped on its own — shutting down")

    if server is not None:
        server.should_exit = True
    await bot.close()
    stopper.cancel()

    for task, result in zip(tasks, await asyncio.gather(*tasks, return_exceptions=True)):
        if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
            logger.error("Service %s exited with an error", task.get_name(), exc_info=result)


def main() -> None:
    """Bootstrap and run the Snitch bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    discord_token = os.getenv("DISCORD_TOKEN")
    telegram_token = os.getenv("TELEGRAM_TOKEN")
    missing = [
        name
        for name, value in (("DISCORD_TOKEN", discord_token), ("TELEGRAM_TOKEN", telegram_token))
        if not value
    ]
    if missing:
        logger.critical(
            "Missing required environment variables: %s.  "
            "Copy .env.example → .env and fill them in.",
            ", ".join(missing),
        )
        sys.exit(1)

    # 2. Soft configuration.
    try:
        cfg = load_config(os.getenv("SNITCH_CONFIG", "config.yaml"))
    except (FileNotFoundError, ConfigError) as exc:
        logger.critical("Invalid configuration: %s", exc)
        sys.exit(1)
    logger.info(
        "Config loaded — guild %d, %d tracked channel(s), Telegram chat %d",
        cfg.guild_id, len(cfg.tracked_channel_ids), cfg.telegram_chat_id,
    )

    # 3. Run (blocks until SIGINT/SIGTERM).
    logger.info("Starting Snitch bot…")
    try:
        asyncio.run(serve(cfg, discord_token, telegram_token))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
