"""Helper utilities.

This module centralises common helper functions such as creating a
configured HTTP session and turning failed requests into `NetworkError`.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

import requests
from requests import Response

from .config import USER_AGENT


logger = logging.getLogger(__name__)


def get_http_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Return a new HTTP session with the fixed User-Agent.

    Caller is responsible for closing the session or letting it be
    garbage collected.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    # Respect environment proxies if configured (requests does this by default)
    return session


class NetworkError(Exception):
    """Raised when a fetch fails: transport error, HTTP error status or unreadable body."""


def _raise_for_status(resp: Response) -> None:
    try:
        resp.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e


def checked_request(method: Callable[..., Response]) -> Callable[..., Response]:
    """Decorator for HTTP calls that must either succeed or raise `NetworkError`.

    The decorated function must accept a `requests.Session` as its first
    argument, followed by URL and optional kwargs, and return a
    `requests.Response`.  No retries are attempted: a failed request is
    reported to the caller, which tries again on the next tick.
    """

    @functools.wraps(method)
    def wrapper(session: requests.Session, url: str, **kwargs: Any) -> Response:
        try:
            response = method(session, url, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e
        _raise_for_status(response)
        return response

    return wrapper


__all__ = ["get_http_session", "checked_request", "NetworkError"]
