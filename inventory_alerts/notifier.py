"""Telegram bot notifier.

Sends an inventory digest to one chat via the Bot API `sendMessage`
call, formatted as MarkdownV2 so vendor names link to product pages.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import requests

from .config import HTTP_TIMEOUT_SECONDS, TELEGRAM_API_BASE
from .store import InventoryItem
from .utils import get_http_session

logger = logging.getLogger(__name__)

BOOT_HEADER = "Boot"
CHANGED_HEADER = "State Changed"


class NotifyError(Exception):
    """Raised when Telegram rejects or never receives a message."""


def escape_markdown(text: str) -> str:
    return text.replace("-", "\\-")


def format_inventory(header: str, items: Iterable[InventoryItem]) -> str:
    lines = [header]
    for item in items:
        lines.append(f"{item.product} - [{item.vendor}]({item.url}) - {item.status}")
    return escape_markdown("\n".join(lines))


def send_message(
    session: requests.Session,
    token: str,
    chat_id: int,
    text: str,
    *,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> None:
    url = f"{TELEGRAM_API_BASE}/bot{token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text, "parse_mode": "MarkdownV2"}
    try:
        resp = session.post(url, json=payload, timeout=timeout)
    except requests.RequestException as e:
        raise NotifyError(f"sendMessage request failed: {e}") from e

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    if resp.status_code >= 400 or not data.get("ok", False):
        desc = data.get("description") or resp.text[:200]
        raise NotifyError(f"sendMessage returned HTTP {resp.status_code}: {desc}")


def send_inventory(
    header: str,
    items: Iterable[InventoryItem],
    *,
    chat_id: int,
    token: str,
    session: Optional[requests.Session] = None,
) -> bool:
    """Send one digest message.  Failures are logged, never raised."""
    text = format_inventory(header, items)

    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    logger.info("Sending: %s", text)
    try:
        send_message(session, token, chat_id, text)
    except NotifyError as e:
        logger.error("Failed to send inventory to bot: %s", e)
        return False
    finally:
        if close_session:
            session.close()

    logger.debug("Successfully sent inventory to bot")
    return True


__all__ = [
    "BOOT_HEADER",
    "CHANGED_HEADER",
    "NotifyError",
    "escape_markdown",
    "format_inventory",
    "send_message",
    "send_inventory",
]
