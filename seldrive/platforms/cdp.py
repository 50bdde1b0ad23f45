"""
Chrome DevTools Protocol (CDP) backend for seldrive.

Connects to a Chromium browser running with --remote-debugging-port and
implements the Client/ElementHandle contracts with Runtime.callFunctionOn
against remote object ids.

Usage:
    # Launch Chrome with debugging enabled:
    chrome --remote-debugging-port=9222

    # Then:
    from seldrive.platforms.cdp import CDPClient

    with CDPClient() as client:
        seldrive.Page(client).all("a.nav").click()

Dependencies:
    pip install websocket-client
"""

from __future__ import annotations

import http.client
import itertools
import json
import os
import threading
from typing import Any

import websocket  # websocket-client

from seldrive._base import Client, ElementHandle
from seldrive.errors import SeldriveError
from seldrive.selector import Selector


class CDPError(SeldriveError, RuntimeError):
    """A CDP command failed or the page raised while running it."""


# ---------------------------------------------------------------------------
# CDP Transport
# ---------------------------------------------------------------------------

_msg_id_lock = threading.Lock()
_msg_id_counter = itertools.count(1)


def _cdp_get_targets(host: str, port: int) -> list[dict]:
    """Fetch the list of CDP targets (browser tabs) via HTTP."""
    conn = http.client.HTTPConnection(host, port, timeout=5)
    try:
        conn.request("GET", "/json")
        resp = conn.getresponse()
        data = resp.read().decode("utf-8")
        return json.loads(data)
    finally:
        conn.close()


def _cdp_connect(ws_url: str, host: str | None = None) -> websocket.WebSocket:
    """Open a synchronous websocket connection to a CDP target.

    If *host* is given, the hostname in *ws_url* is replaced so that
    we always connect via the same address used for target discovery.
    """
    if host:
        from urllib.parse import urlparse, urlunparse

        parts = urlparse(ws_url)
        ws_url = urlunparse(parts._replace(netloc=f"{host}:{parts.port}"))
    ws = websocket.WebSocket()
    ws.settimeout(30)
    ws.connect(ws_url)
    return ws


def _cdp_send(
    ws: websocket.WebSocket,
    method: str,
    params: dict | None = None,
    timeout: float = 30.0,
) -> dict:
    """Send a CDP command and wait for the matching response.

    Discards interleaved CDP event messages while waiting.  Protocol
    errors and JavaScript exceptions reported by Runtime methods are
    raised as CDPError.
    """
    with _msg_id_lock:
        msg_id = next(_msg_id_counter)

    message: dict[str, Any] = {"id": msg_id, "method": method}
    if params:
        message["params"] = params

    old_timeout = ws.gettimeout()
    ws.settimeout(timeout)
    try:
        ws.send(json.dumps(message))
        while True:
            raw = ws.recv()
            resp = json.loads(raw)
            if resp.get("id") != msg_id:
                continue  # event notification
            if "error" in resp:
                err = resp["error"]
                raise CDPError(f"CDP error {err.get('code')}: {err.get('message')}")
            details = resp.get("result", {}).get("exceptionDetails")
            if details:
                raise CDPError(_exception_text(details))
            return resp
    finally:
        ws.settimeout(old_timeout)


def _cdp_close(ws: websocket.WebSocket) -> None:
    """Close a CDP websocket connection."""
    try:
        ws.close()
    except Exception:
        pass


def _exception_text(details: dict) -> str:
    exc = details.get("exception") or {}
    return exc.get("description") or details.get("text") or "JavaScript exception"


# Remote objects handed out as element handles live in this group.
_OBJECT_GROUP = "seldrive"


# ---------------------------------------------------------------------------
# In-page functions
# ---------------------------------------------------------------------------

# Called with `this` bound to the search root (document or an element).
_FIND_JS = """function(using, value) {
    var root = (this && this.nodeType) ? this : document;
    if (using === 'css') {
        return Array.prototype.slice.call(root.querySelectorAll(value));
    }
    var snapshot = document.evaluate(
        value, root, null, XPathResult.ORDERED_NODE_SNAPSHOT_TYPE, null);
    var found = [];
    for (var i = 0; i < snapshot.snapshotLength; i++) {
        found.push(snapshot.snapshotItem(i));
    }
    return found;
}"""

# Options in a closed dropdown cannot be clicked; select them directly and
# fire the events a user's choice would.
_CLICK_JS = """function() {
    if (this.tagName === 'OPTION') {
        var parent = this.closest('select') || this.parentElement;
        this.selected = true;
        if (parent) {
            parent.dispatchEvent(new Event('input', {bubbles: true}));
            parent.dispatchEvent(new Event('change', {bubbles: true}));
        }
        return;
    }
    this.scrollIntoView({block: 'center', inline: 'center'});
    this.click();
}"""

_SET_VALUE_JS = """function(v) {
    this.focus();
    this.value = v;
    this.dispatchEvent(new Event('input', {bubbles: true}));
    this.dispatchEvent(new Event('change', {bubbles: true}));
}"""

_GET_ATTRIBUTE_JS = "function(name) { return this.getAttribute(name); }"

_IS_SELECTED_JS = """function() {
    if (this.tagName === 'OPTION') { return this.selected; }
    return !!this.checked;
}"""

_SUBMIT_JS = """function() {
    var form = this.tagName === 'FORM' ? this : this.form;
    if (!form) { throw new Error('element is not in a form'); }
    if (form.requestSubmit) { form.requestSubmit(); } else { form.submit(); }
}"""


def _get_center(box_model: dict) -> tuple[float, float]:
    """Compute the center point of a DOM.getBoxModel result.

    The content quad is [x1,y1, x2,y2, x3,y3, x4,y4]; the four corners
    are averaged.  Falls back to the border quad.
    """
    model = box_model.get("model", {})
    for quad_name in ("content", "border"):
        quad = model.get(quad_name, [])
        if len(quad) >= 8:
            xs = [quad[i] for i in range(0, 8, 2)]
            ys = [quad[i] for i in range(1, 8, 2)]
            return sum(xs) / 4, sum(ys) / 4
    raise CDPError("Cannot determine element position from box model")


def _get_origin(box_model: dict) -> tuple[float, float]:
    """Top-left corner of the border quad."""
    border = box_model.get("model", {}).get("border", [])
    if len(border) >= 8:
        return min(border[0:8:2]), min(border[1:8:2])
    raise CDPError("Cannot determine element position from box model")


# ---------------------------------------------------------------------------
# CDPElement
# ---------------------------------------------------------------------------


class CDPElement(ElementHandle):
    """Element handle backed by a Runtime remote object id."""

    def __init__(self, client: CDPClient, object_id: str) -> None:
        self._client = client
        self.object_id = object_id

    def __repr__(self) -> str:
        return f"CDPElement({self.object_id!r})"

    def _call(self, function: str, *args: Any) -> Any:
        resp = self._client.send(
            "Runtime.callFunctionOn",
            {
                "objectId": self.object_id,
                "functionDeclaration": function,
                "arguments": [{"value": a} for a in args],
                "returnByValue": True,
            },
        )
        return resp.get("result", {}).get("result", {}).get("value")

    def click(self) -> None:
        self._call(_CLICK_JS)

    def clear(self) -> None:
        self._call(_SET_VALUE_JS, "")

    def set_value(self, text: str) -> None:
        self._call(_SET_VALUE_JS, text)

    def submit(self) -> None:
        self._call(_SUBMIT_JS)

    def get_attribute(self, name: str) -> str | None:
        return self._call(_GET_ATTRIBUTE_JS, name)

    def is_selected(self) -> bool:
        return bool(self._call(_IS_SELECTED_JS))

    def find_elements(self, selector: Selector) -> list[ElementHandle]:
        using, value = selector.query()
        resp = self._client.send(
            "Runtime.callFunctionOn",
            {
                "objectId": self.object_id,
                "functionDeclaration": _FIND_JS,
                "arguments": [{"value": using}, {"value": value}],
                "objectGroup": _OBJECT_GROUP,
            },
        )
        return self._client._elements_from(resp)


# ---------------------------------------------------------------------------
# CDPClient
# ---------------------------------------------------------------------------


class CDPClient(Client):
    """Client for one browser tab over a single CDP websocket.

    Element handles are remote object ids.  A document-level lookup
    releases every handle issued by earlier lookups, so a handle is only
    valid until the next selection is resolved on this client.  A dropped
    connection is discarded and reopened by the next command.

    Args:
        cdp_host: CDP host (default: $SELDRIVE_CDP_HOST or 127.0.0.1).
        cdp_port: CDP port (default: $SELDRIVE_CDP_PORT or 9222).
        ws_url: Connect to this target directly instead of the first tab.
    """

    def __init__(
        self,
        cdp_host: str | None = None,
        cdp_port: int | None = None,
        *,
        ws_url: str | None = None,
    ) -> None:
        self._host = cdp_host or os.environ.get("SELDRIVE_CDP_HOST", "127.0.0.1")
        self._port = int(cdp_port or os.environ.get("SELDRIVE_CDP_PORT", "9222"))
        self._ws_url = ws_url
        self._ws: Any = None
        self._pointer: tuple[float, float] | None = None
        self._pinned = False

    # -- lifecycle ---------------------------------------------------------

    def connect(self) -> None:
        if self._ws is not None:
            return
        ws_url = self._ws_url
        if ws_url is None:
            try:
                targets = _cdp_get_targets(self._host, self._port)
            except Exception as exc:
                raise CDPError(
                    f"Cannot connect to CDP at {self._host}:{self._port}. "
                    f"Launch Chrome with: chrome --remote-debugging-port={self._port}\n"
                    f"  Error: {exc}"
                ) from exc
            page_targets = [t for t in targets if t.get("type") == "page"]
            if not page_targets:
                raise CDPError(
                    f"CDP endpoint at {self._host}:{self._port} has no page targets. "
                    f"Open at least one tab in the browser."
                )
            ws_url = page_targets[0]["webSocketDebuggerUrl"]
        self._ws = _cdp_connect(ws_url, self._host)

    def close(self) -> None:
        if self._ws is not None:
            _cdp_close(self._ws)
            self._ws = None
        self._pointer = None
        self._pinned = False

    def __enter__(self) -> CDPClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, method: str, params: dict | None = None) -> dict:
        self.connect()
        try:
            return _cdp_send(self._ws, method, params)
        except (websocket.WebSocketException, OSError) as exc:
            self.close()
            raise CDPError(f"CDP connection lost: {exc}") from exc

    # -- lookup ------------------------------------------------------------

    def find_elements(self, selector: Selector) -> list[ElementHandle]:
        using, value = selector.query()
        if self._pinned:
            self.send("Runtime.releaseObjectGroup", {"objectGroup": _OBJECT_GROUP})
            self._pinned = False
        resp = self.send(
            "Runtime.evaluate",
            {
                "expression": f"({_FIND_JS}).call(document, {json.dumps(using)}, {json.dumps(value)})",
                "objectGroup": _OBJECT_GROUP,
            },
        )
        return self._elements_from(resp)

    def _elements_from(self, resp: dict) -> list[ElementHandle]:
        """Split a remote array of nodes into element handles, in index order."""
        array_id = resp.get("result", {}).get("result", {}).get("objectId")
        if not array_id:
            return []
        props = self.send(
            "Runtime.getProperties",
            {"objectId": array_id, "ownProperties": True},
        )
        indexed: list[tuple[int, str]] = []
        for prop in props.get("result", {}).get("result", []):
            name = prop.get("name", "")
            object_id = prop.get("value", {}).get("objectId")
            if name.isdigit() and object_id:
                indexed.append((int(name), object_id))
        # The handles stay pinned by the group; the array is not needed.
        self.send("Runtime.releaseObject", {"objectId": array_id})
        self._pinned = True
        indexed.sort()
        return [CDPElement(self, object_id) for _, object_id in indexed]

    # -- pointer -----------------------------------------------------------

    def move_to(
        self,
        element: ElementHandle,
        offset: tuple[float, float] | None = None,
    ) -> None:
        if not isinstance(element, CDPElement):
            raise CDPError(f"Cannot move pointer to non-CDP element {element!r}")
        resp = self.send("DOM.getBoxModel", {"objectId": element.object_id})
        box_model = resp.get("result", {})
        if offset is None:
            x, y = _get_center(box_model)
        else:
            ox, oy = _get_origin(box_model)
            x, y = ox + offset[0], oy + offset[1]

        self.send("Input.dispatchMouseEvent", {"type": "mouseMoved", "x": x, "y": y})
        self._pointer = (x, y)

    def double_click(self) -> None:
        if self._pointer is None:
            raise CDPError("Pointer position unknown; move_to an element first")
        x, y = self._pointer
        for count in (1, 2):
            for event_type in ("mousePressed", "mouseReleased"):
                self.send(
                    "Input.dispatchMouseEvent",
                    {
                        "type": event_type,
                        "x": x,
                        "y": y,
                        "button": "left",
                        "clickCount": count,
                    },
                )
