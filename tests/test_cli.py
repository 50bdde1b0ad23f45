"""Tests for the command-line entry point and MCP tools."""

from __future__ import annotations

import json
import os

import pytest

import seldrive
import seldrive.mcp.server as mcp_server
import seldrive.platforms.cdp as cdp
from seldrive.__main__ import main
from seldrive._base import Client, ElementHandle


class _Element(ElementHandle):
    def __init__(self, calls):
        self.calls = calls

    def click(self):
        self.calls.append("click")

    def clear(self):
        self.calls.append("clear")

    def set_value(self, text):
        self.calls.append(f"set_value:{text}")

    def submit(self):
        self.calls.append("submit")

    def get_attribute(self, name):
        return None

    def is_selected(self):
        return False

    def find_elements(self, selector):
        return []


class _FakeCDPClient(Client):
    """Stands in for CDPClient; matches any selector except '.none'."""

    instances: list = []

    def __init__(self, *args, **kwargs):
        self.calls = []
        self.closed = False
        _FakeCDPClient.instances.append(self)

    def connect(self):
        pass

    def close(self):
        self.closed = True

    def find_elements(self, selector):
        if selector.value == ".none":
            return []
        return [_Element(self.calls)]

    def move_to(self, element, offset=None):
        self.calls.append("move_to")

    def double_click(self):
        self.calls.append("double_click")


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    _FakeCDPClient.instances = []
    monkeypatch.setattr(cdp, "CDPClient", _FakeCDPClient)
    monkeypatch.delenv("SELDRIVE_CDP_PORT", raising=False)
    monkeypatch.delenv("SELDRIVE_CDP_HOST", raising=False)
    return _FakeCDPClient


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestCLI:
    def test_click(self, capsys):
        assert main(["click", "a.nav"]) == 0
        out = capsys.readouterr().out
        assert "Clicked CSS: a.nav" in out
        client = _FakeCDPClient.instances[0]
        assert client.calls == ["click"]
        assert client.closed is True

    def test_fill_with_value(self):
        assert main(["fill", "#q", "--value", "hello"]) == 0
        assert _FakeCDPClient.instances[0].calls == ["clear", "set_value:hello"]

    def test_failure_exits_nonzero(self, capsys):
        assert main(["check", "#q"]) == 1
        err = capsys.readouterr().err
        assert "does not refer to a checkbox" in err

    def test_missing_value(self, capsys):
        assert main(["select", "#color"]) == 1
        assert "requires a 'value'" in capsys.readouterr().err

    def test_verbose(self, capsys):
        assert main(["submit", "form", "--verbose"]) == 0
        out = capsys.readouterr().out
        assert "Selection: CSS: form" in out
        assert "Matches: 1" in out

    def test_cdp_port_sets_env(self, monkeypatch):
        monkeypatch.setenv("SELDRIVE_CDP_PORT", "9222")
        main(["click", "a", "--cdp-port", "9333"])
        assert os.environ["SELDRIVE_CDP_PORT"] == "9333"

    def test_rejects_unknown_action(self):
        with pytest.raises(SystemExit):
            main(["explode", "a"])


# ---------------------------------------------------------------------------
# MCP tools
# ---------------------------------------------------------------------------


class TestMCPTools:
    @pytest.fixture
    def server(self, monkeypatch):
        monkeypatch.setattr(mcp_server, "_page", seldrive.Page(_FakeCDPClient()))
        return mcp_server

    def test_action(self, server):
        payload = json.loads(server.action("click", "a"))
        assert payload == {"success": True, "message": "Clicked CSS: a", "error": None}

    def test_action_error(self, server):
        payload = json.loads(server.action("uncheck", "a"))
        assert payload["success"] is False
        assert "does not refer to a checkbox" in payload["error"]

    def test_count(self, server):
        assert json.loads(server.count("a"))["count"] == 1
        assert json.loads(server.count(".none"))["count"] == 0

    def test_count_bad_selector_type(self, server):
        payload = json.loads(server.count("a", using="id"))
        assert payload["success"] is False

    def test_batch(self, server):
        payload = json.loads(
            server.batch(
                [
                    {"selector": "#q", "action": "fill", "value": "x"},
                    {"selector": "#q", "action": "check"},
                    {"selector": "form", "action": "submit"},
                ]
            )
        )
        assert [p["success"] for p in payload] == [True, False]
