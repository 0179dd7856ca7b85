"""Shared fakes for HTTP and Telegram so tests never touch the network."""

import json
from typing import Dict, List, Optional, Union

import pytest
import requests

from inventory_alerts.matcher import MatchKind, MatchRule
from inventory_alerts.store import InventoryItem


def make_response(url: str, status: int = 200, text: str = "", payload: Optional[dict] = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.encoding = "utf-8"
    body = json.dumps(payload) if payload is not None else text
    resp._content = body.encode("utf-8")
    return resp


class FakeSession:
    """
    Stand-in for requests.Session.

    ``pages`` maps URL to a body string, an int status code, or an
    exception instance to raise.  Telegram posts are recorded in ``posts``.
    """

    def __init__(self, pages: Optional[Dict[str, Union[str, int, Exception]]] = None,
                 post_payload: Optional[dict] = None, post_status: int = 200,
                 post_error: Optional[Exception] = None):
        self.pages = pages or {}
        self.post_payload = {"ok": True, "result": {}} if post_payload is None else post_payload
        self.post_status = post_status
        self.post_error = post_error
        self.gets: List[str] = []
        self.posts: List[dict] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.gets.append(url)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        if isinstance(page, int):
            return make_response(url, status=page, text="error")
        return make_response(url, text=page)

    def post(self, url, **kwargs):
        self.posts.append({"url": url, **kwargs})
        if self.post_error is not None:
            raise self.post_error
        return make_response(url, status=self.post_status, payload=self.post_payload)

    def close(self):
        self.closed = True


@pytest.fixture
def widget():
    return InventoryItem(
        product="Widget",
        vendor="Acme",
        url="https://shop.example/widget",
        in_stock=False,
        matches=[MatchRule(MatchKind.CONTAINS, "Add to Cart")],
    )


@pytest.fixture
def gadget():
    return InventoryItem(
        product="Gadget",
        vendor="Globex",
        url="https://globex.example/gadget",
        in_stock=True,
        matches=[MatchRule(MatchKind.NOT_REGEX, r"(?i)sold\s+out")],
    )
