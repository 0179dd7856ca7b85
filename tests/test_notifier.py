import requests

from inventory_alerts import notifier
from inventory_alerts.notifier import format_inventory, send_inventory

from tests.conftest import FakeSession


def test_format_lists_each_item_and_escapes_hyphens(widget, gadget):
    text = format_inventory("State Changed", [widget, gadget])

    assert text.splitlines() == [
        "State Changed",
        "Widget \\- [Acme](https://shop.example/widget) \\- Out of Stock",
        "Gadget \\- [Globex](https://globex.example/gadget) \\- In Stock",
    ]


def test_hyphens_inside_fields_are_escaped(widget):
    widget.product = "X-Wing"
    widget.url = "https://shop.example/x-wing"
    text = format_inventory("Boot", [widget])
    assert "X\\-Wing" in text
    assert "(https://shop.example/x\\-wing)" in text
    assert "-" not in text.replace("\\-", "")


def test_header_only_when_no_items():
    assert format_inventory("Boot", []) == "Boot"


def test_send_inventory_posts_markdown_message(widget):
    session = FakeSession()

    ok = send_inventory("Boot", [widget], chat_id=-100123, token="T0KEN", session=session)

    assert ok is True
    assert len(session.posts) == 1
    post = session.posts[0]
    assert post["url"] == f"{notifier.TELEGRAM_API_BASE}/botT0KEN/sendMessage"
    assert post["json"]["chat_id"] == -100123
    assert post["json"]["parse_mode"] == "MarkdownV2"
    assert post["json"]["text"].startswith("Boot\nWidget \\- [Acme]")


def test_telegram_rejection_is_logged_and_swallowed(caplog, widget):
    session = FakeSession(post_status=400, post_payload={"ok": False, "description": "Bad Request: can't parse entities"})

    ok = send_inventory("Boot", [widget], chat_id=1, token="t", session=session)

    assert ok is False
    assert "can't parse entities" in caplog.text


def test_transport_failure_is_swallowed(widget):
    session = FakeSession(post_error=requests.ConnectionError("down"))
    assert send_inventory("Boot", [widget], chat_id=1, token="t", session=session) is False
    assert len(session.posts) == 1


def test_ok_false_with_200_is_a_failure(widget):
    session = FakeSession(post_payload={"ok": False})
    assert send_inventory("Boot", [widget], chat_id=1, token="t", session=session) is False
