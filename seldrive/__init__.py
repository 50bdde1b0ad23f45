"""
seldrive -- selection action dispatch for remote browsers.

Resolves multi-match element selections against a remote document and
applies semantic actions (click, double-click, fill, check, uncheck,
select, submit) to every match, in order, stopping at the first failure.

Quick start::

    import seldrive
    from seldrive.platforms.cdp import CDPClient

    with CDPClient() as client:
        page = seldrive.Page(client)
        page.find("#email").fill("me@example.com")
        page.all("input.terms").check()
        page.find("#country").select("Norway")
        page.find("form#signup").submit()

        # Result records instead of exceptions
        result = page.execute("a.next", "click")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from seldrive._base import Client, ElementHandle
from seldrive.errors import (
    ActionError,
    NoMatchError,
    ResolutionError,
    SeldriveError,
    SelectionResolutionError,
    ValidationError,
)
from seldrive.resolver import resolve
from seldrive.selection import Selection
from seldrive.selector import Selector, describe_chain, xpath_literal
from seldrive.actions import ActionExecutor, ActionResult

if TYPE_CHECKING:
    from seldrive.resolver import Resolver

__all__ = [
    "Page",
    "Selection",
    "Selector",
    "ActionResult",
    # Errors
    "SeldriveError",
    "ResolutionError",
    "SelectionResolutionError",
    "ValidationError",
    "ActionError",
    "NoMatchError",
    # Advanced / building blocks
    "Client",
    "ElementHandle",
    "ActionExecutor",
    "resolve",
    "describe_chain",
    "xpath_literal",
]


class Page(Selection):
    """The root of every selection on one client.

    A Page is the empty selection: refine it with ``find``/``all``/...
    to get selections that can be acted on.  It also exposes the
    result-returning executor API.

    Example::

        page = seldrive.Page(client)
        page.all("li.todo input").uncheck()
        results = page.batch_execute([
            {"selector": "#q", "action": "fill", "value": "seldrive"},
            {"selector": "form", "action": "submit"},
        ])
    """

    __slots__ = ("_executor",)

    def __init__(self, client: Client, *, resolver: Resolver | None = None) -> None:
        super().__init__(client, (), resolver=resolver)
        self._executor = ActionExecutor(client, resolver=resolver)

    def __repr__(self) -> str:
        return f"Page({self.client!r})"

    def query(self, selector: str, using: str = "css") -> Selection:
        """Build a multi-match selection from a selector string of type *using*."""
        return self._executor.selection(selector, using)

    def execute(
        self,
        selector: str | Selection,
        action: str,
        *,
        using: str = "css",
        **params: Any,
    ) -> ActionResult:
        """Execute an action on every element matching *selector*.

        Args:
            selector: Selector string or Selection.
            action: click, doubleclick, fill, check, uncheck, select, submit.
            using: Selector type for string selectors (css, xpath, link, name).
            **params: Action parameters (value for fill and select).
        """
        return self._executor.execute(selector, action, params, using=using)

    def batch_execute(self, actions: list[dict[str, Any]]) -> list[ActionResult]:
        """Execute a sequence of actions, stopping on first failure."""
        return self._executor.batch_execute(actions)
