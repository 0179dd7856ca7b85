from __future__ import annotations

import dataclasses
import logging
from typing import List, NamedTuple, Optional, Sequence

import requests

from .config import HTTP_TIMEOUT_SECONDS
from .matcher import evaluate_all
from .store import InventoryItem
from .utils import NetworkError, checked_request, get_http_session

logger = logging.getLogger(__name__)


class PollResult(NamedTuple):
    changed: bool
    items: List[InventoryItem]


@checked_request
def _get(session: requests.Session, url: str, **kwargs) -> requests.Response:
    """Thin wrapper around session.get that raises NetworkError on failure."""
    return session.get(url, **kwargs)


def fetch_body(
    session: requests.Session,
    url: str,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> str:
    """GET ``url`` and return the full response body as text."""
    resp = _get(session, url, timeout=timeout)
    try:
        return resp.text
    except (requests.RequestException, UnicodeDecodeError) as e:
        raise NetworkError(f"Failed to read body from {url}: {e}") from e


def poll_all(
    items: Sequence[InventoryItem],
    session: Optional[requests.Session] = None,
    *,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    isolate_failures: bool = False,
) -> PollResult:
    """
    Fetch every item's page in order and re-evaluate its match rules.

    Returns a new list of items; ``items`` itself is never modified.
    By default the first NetworkError aborts the whole poll and propagates,
    discarding anything evaluated earlier in the same cycle.  With
    ``isolate_failures`` a failing item keeps its previous state and the
    remaining items are still polled.
    """
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    updated: List[InventoryItem] = []
    changed = False
    try:
        for item in items:
            logger.debug("Fetching %s (%s)", item.product, item.url)
            try:
                body = fetch_body(session, item.url, timeout=timeout)
            except NetworkError:
                if not isolate_failures:
                    raise
                logger.exception("Skipping %s this cycle", item.product)
                updated.append(dataclasses.replace(item))
                continue

            new_item = dataclasses.replace(item, in_stock=evaluate_all(item.matches, body))
            if new_item.in_stock != item.in_stock:
                logger.info(
                    "%s [%s] changed: %s -> %s",
                    item.product, item.vendor, item.status, new_item.status,
                )
                changed = True
            updated.append(new_item)
    finally:
        if close_session:
            session.close()

    return PollResult(changed, updated)


__all__ = ["PollResult", "fetch_body", "poll_all"]
