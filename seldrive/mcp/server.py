"""seldrive MCP Server - selection actions for AI agents.

Exposes tools that resolve a selector against the active browser tab
and apply an action to every matching element.
"""

from __future__ import annotations

import json
from typing import Any

from mcp.server.fastmcp import FastMCP

import seldrive
from seldrive.actions import ActionResult
from seldrive.platforms.cdp import CDPClient

mcp = FastMCP(
    name="seldrive",
    instructions=(
        "seldrive acts on elements of the active browser tab, selected by "
        "CSS selector, XPath, link text or name attribute.\n\n"
        "Every action applies to ALL matching elements, in document order, "
        "and stops at the first failure. Elements handled before a failure "
        "keep their effects.\n\n"
        "TOOLS:\n"
        "- count(selector) - how many elements a selector matches right now\n"
        "- action(action, selector, ...) - click, doubleclick, fill, check, "
        "uncheck, select, submit\n"
        "- batch(actions) - several actions in order, stopping on first failure\n\n"
        "Use count() before acting when a selector might be too broad."
    ),
)

# ---------------------------------------------------------------------------
# Client state (one per MCP server process)
# ---------------------------------------------------------------------------

_page: seldrive.Page | None = None


def _get_page() -> seldrive.Page:
    global _page
    if _page is None:
        _page = seldrive.Page(CDPClient())
    return _page


def _result_json(result: ActionResult) -> str:
    return json.dumps(
        {
            "success": result.success,
            "message": result.message,
            "error": result.error,
        }
    )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def count(selector: str, using: str = "css") -> str:
    """Count the elements a selector currently matches.

    Args:
        selector: The selector expression.
        using: Selector type: css, xpath, link (anchor text) or name.
    """
    page = _get_page()
    try:
        selection = page.query(selector, using)
        n = selection.count()
    except (ValueError, seldrive.SeldriveError) as exc:
        return _result_json(ActionResult(success=False, message="", error=str(exc)))
    return json.dumps({"success": True, "message": f"{n} match(es) for {selection}", "count": n})


@mcp.tool()
def action(
    action: str,
    selector: str,
    using: str = "css",
    value: str | None = None,
) -> str:
    """Perform an action on every element matching a selector.

    Actions:
        click       - Click each element
        doubleclick - Move the pointer to each element and double-click
        fill        - Clear each element and enter text (pass text in 'value')
        check       - Check each checkbox (no-op if already checked)
        uncheck     - Uncheck each checkbox (no-op if already unchecked)
        select      - In each <select>, click every option whose visible
                      text equals 'value' (fails if a select has none)
        submit      - Submit the form of each element

    Args:
        action: The action to perform.
        selector: The selector expression.
        using: Selector type: css, xpath, link (anchor text) or name.
        value: Text for 'fill' or 'select'.
    """
    params: dict[str, Any] = {}
    if value is not None:
        params["value"] = value
    result = _get_page().execute(selector, action, using=using, **params)
    return _result_json(result)


@mcp.tool()
def batch(actions: list[dict[str, Any]]) -> str:
    """Run several actions in order, stopping at the first failure.

    Each item is a dict with 'selector', 'action' and optionally 'using'
    and 'value', e.g.::

        [{"selector": "#q", "action": "fill", "value": "weather"},
         {"selector": "form", "action": "submit"}]

    Returns one result per executed action.
    """
    results = _get_page().batch_execute(actions)
    return json.dumps(
        [{"success": r.success, "message": r.message, "error": r.error} for r in results]
    )


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
