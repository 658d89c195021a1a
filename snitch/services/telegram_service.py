"""
snitch.services.telegram_service — Telegram Bot API client
===========================================================

Two Bot API methods are all we need: ``sendMessage`` and
``deleteMessage``.  Calls go through a single long-lived
:class:`httpx.AsyncClient` with an explicit timeout and one transport
retry.

Every Bot API response is ``{"ok": bool, ...}``; anything other than
``ok: true`` is raised as :class:`TelegramError` so callers decide what
is fatal.  For the roster broadcaster nothing is.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from snitch.config import DEFAULT_TELEGRAM_API_BASE, DEFAULT_TELEGRAM_TIMEOUT

logger = logging.getLogger(__name__)

PARSE_MODE_HTML = "HTML"


class TelegramError(RuntimeError):
    """A Bot API call failed (transport error or ``ok: false``)."""

    def __init__(
        self,
        method: str,
        description: str,
        *,
        error_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(f"Telegram {method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code
        self.retry_after = retry_after


class TelegramClient:
    """Minimal async Telegram Bot API client.

    Parameters
    ----------
    token:
        Bot token from @BotFather.  Never logged.
    api_base:
        Bot API root, overridable for a self-hosted Bot API server.
    transport:
        Optional custom transport (tests pass :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_TELEGRAM_API_BASE,
        timeout: float = DEFAULT_TELEGRAM_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=1),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        url = f"{self._api_base}/bot{self._token}/{method}"
        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise TelegramError(method, f"{type(exc).__name__}: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            raise TelegramError(
                method,
                f"non-JSON response (HTTP {resp.status_code})",
                error_code=resp.status_code,
            ) from None

        if not isinstance(body, dict) or not body.get("ok"):
            body = body if isinstance(body, dict) else {}
            params = body.get("parameters") or {}
            raise TelegramError(
                method,
                str(body.get("description") or f"HTTP {resp.status_code}"),
                error_code=body.get("error_code", resp.status_code),
                retry_after=params.get("retry_after"),
            )
        return body.get("result")

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = PARSE_MODE_HTML,
        disable_notification: bool = False,
    ) -> int:
        """Send *text* to *chat_id* and return the new ``message_id``."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if disable_notification:
            payload["disable_notification"] = True

        result = await self._call("sendMessage", payload)
        try:
            message_id = int(result["message_id"])
        except (TypeError, KeyError, ValueError):
            raise TelegramError("sendMessage", "response has no message_id") from None

        logger.info("Telegram message %d sent to chat %d", message_id, chat_id)
        return message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self._call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})
        logger.info("Telegram message %d deleted from chat %d", message_id, chat_id)


class TelegramMessenger:
    """Binds a :class:`TelegramClient` to one chat for the broadcaster."""

    def __init__(self, client: TelegramClient, chat_id: int) -> None:
        self.client = client
        self.chat_id = chat_id

    async def send_notification(self, text: str) -> int:
        return await self.client.send_message(self.chat_id, text)

    async def delete_notification(self, handle: int) -> None:
        await self.client.delete_message(self.chat_id, handle)
