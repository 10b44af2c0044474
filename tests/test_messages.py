"""Tests for broadcast messages."""

import json

from liveserve.live.messages import BroadcastMessage


class TestBroadcastMessage:
    """Tests for BroadcastMessage serialization."""

    def test__connected__has_only_action(self) -> None:
        assert json.loads(BroadcastMessage.connected().to_json()) == {"action": "connected"}

    def test__hot__carries_dom_and_file_name(self) -> None:
        message = BroadcastMessage(action="hot", file_name="/a.html", dom="<p>x</p>")

        assert json.loads(message.to_json()) == {
            "data": {"dom": "<p>x</p>", "fileName": "/a.html"},
            "action": "hot",
        }

    def test__missing_dom__is_omitted(self) -> None:
        message = BroadcastMessage(action="refreshcss", file_name="/a.css")

        assert json.loads(message.to_json()) == {
            "data": {"fileName": "/a.css"},
            "action": "refreshcss",
        }
