"""Action executor: runs named actions on selections and reports results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from seldrive.errors import SeldriveError
from seldrive.selection import Selection
from seldrive.selector import SELECTOR_KINDS, Selector

if TYPE_CHECKING:
    from seldrive._base import Client
    from seldrive.resolver import Resolver


VALID_ACTIONS = frozenset(
    {
        "check",
        "click",
        "doubleclick",
        "fill",
        "select",
        "submit",
        "uncheck",
    }
)

# Actions that take a 'value' parameter
_VALUE_ACTIONS = frozenset({"fill", "select"})

_DONE_MESSAGES: dict[str, str] = {
    "check": "Checked",
    "click": "Clicked",
    "doubleclick": "Double-clicked",
    "fill": "Filled",
    "select": "Selected",
    "submit": "Submitted",
    "uncheck": "Unchecked",
}


@dataclass
class ActionResult:
    """Result of an action execution."""

    success: bool
    message: str
    error: str | None = None


class ActionExecutor:
    """Runs actions by name against selections built on one client.

    Usage::

        executor = ActionExecutor(client)
        result = executor.execute("#email", "fill", {"value": "a@b.c"})
        result = executor.execute("//a[@rel='next']", "click", using="xpath")
    """

    def __init__(self, client: Client, *, resolver: Resolver | None = None) -> None:
        self._client = client
        self._resolver = resolver

    def selection(self, selector: str | Selection, using: str = "css") -> Selection:
        """Build a multi-match selection from a selector string."""
        if isinstance(selector, Selection):
            return selector
        if using not in SELECTOR_KINDS:
            raise ValueError(f"Unknown selector type '{using}'. Valid: {sorted(SELECTOR_KINDS)}")
        return Selection(self._client, (Selector(using, selector),), resolver=self._resolver)

    def execute(
        self,
        selector: str | Selection,
        action: str,
        params: dict[str, Any] | None = None,
        *,
        using: str = "css",
    ) -> ActionResult:
        """Execute an action on every element the selector matches.

        Args:
            selector: Selector string, or a prebuilt Selection.
            action: One of VALID_ACTIONS.
            params: Action parameters ('value' for fill and select).
            using: Selector type for string selectors (css, xpath, link, name).
        """
        if action not in VALID_ACTIONS:
            return ActionResult(
                success=False,
                message="",
                error=f"Unknown action '{action}'. Valid: {sorted(VALID_ACTIONS)}",
            )

        params = params or {}
        if action in _VALUE_ACTIONS and "value" not in params:
            return ActionResult(
                success=False,
                message="",
                error=f"Action '{action}' requires a 'value' parameter",
            )

        try:
            selection = self.selection(selector, using)
        except ValueError as exc:
            return ActionResult(success=False, message="", error=str(exc))

        try:
            self._dispatch(selection, action, params)
        except SeldriveError as exc:
            return ActionResult(success=False, message="", error=str(exc))
        return ActionResult(success=True, message=f"{_DONE_MESSAGES[action]} {selection}")

    def _dispatch(self, selection: Selection, action: str, params: dict[str, Any]) -> None:
        if action == "click":
            selection.click()
        elif action == "doubleclick":
            selection.double_click()
        elif action == "fill":
            selection.fill(str(params["value"]))
        elif action == "check":
            selection.check()
        elif action == "uncheck":
            selection.uncheck()
        elif action == "select":
            selection.select(str(params["value"]))
        elif action == "submit":
            selection.submit()

    def batch_execute(self, actions: list[dict[str, Any]]) -> list[ActionResult]:
        """Execute a sequence of actions, stopping on first failure.

        Each action spec is a dict like::

            {"selector": "#q", "action": "fill", "value": "seldrive"}
            {"selector": "//form", "using": "xpath", "action": "submit"}

        Returns:
            One ActionResult per executed action.  If an action fails, the
            list stops at that failure.
        """
        results: list[ActionResult] = []
        for spec in actions:
            action = spec.get("action", "")
            selector = spec.get("selector", "")
            if not selector:
                results.append(
                    ActionResult(
                        success=False,
                        message="",
                        error=f"Action '{action}' requires a 'selector' parameter",
                    )
                )
                break
            params = {
                k: v for k, v in spec.items() if k not in ("selector", "action", "using")
            }
            result = self.execute(selector, action, params, using=spec.get("using", "css"))
            results.append(result)
            if not result.success:
                break
        return results
