"""Selections: re-resolvable element queries with semantic actions.

A Selection never holds resolved elements.  Every action resolves the
selector chain afresh, then applies one per-element function to each
match in document order, stopping at the first failure.  Elements
handled before the failure keep their effects; nothing is rolled back.

Usage::

    page = seldrive.Page(client)
    page.all("input[type=checkbox]").check()
    page.find("#country").select("Norway")
    page.find("form").submit()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from seldrive.errors import (
    ActionError,
    NoMatchError,
    SelectionResolutionError,
    ValidationError,
)
from seldrive.resolver import resolve
from seldrive.selector import Selector, describe_chain, option_xpath

if TYPE_CHECKING:
    from seldrive._base import Client, ElementHandle
    from seldrive.resolver import Resolver

ElementAction = Callable[["ElementHandle"], None]


class Selection:
    """An immutable description of zero or more remote elements.

    Refinement methods (``find``, ``all``, ``at``, ...) return new
    selections; the receiver is never modified.
    """

    __slots__ = ("_client", "_selectors", "_resolver")

    def __init__(
        self,
        client: Client,
        selectors: tuple[Selector, ...] = (),
        *,
        resolver: Resolver | None = None,
    ) -> None:
        self._client = client
        self._selectors = tuple(selectors)
        self._resolver = resolver or resolve

    @property
    def client(self) -> Client:
        return self._client

    @property
    def selectors(self) -> tuple[Selector, ...]:
        return self._selectors

    def __str__(self) -> str:
        return describe_chain(self._selectors)

    def __repr__(self) -> str:
        return f"Selection({str(self)!r})"

    # -- refinement --------------------------------------------------------

    def _append(self, selector: Selector) -> Selection:
        return Selection(
            self._client,
            self._selectors + (selector,),
            resolver=self._resolver,
        )

    def find(self, css: str) -> Selection:
        """Exactly one element matching *css*."""
        return self._append(Selector.css(css).as_single())

    def first(self, css: str) -> Selection:
        return self._append(Selector.css(css).at(0))

    def all(self, css: str) -> Selection:
        return self._append(Selector.css(css))

    def find_by_xpath(self, xpath: str) -> Selection:
        return self._append(Selector.xpath(xpath).as_single())

    def first_by_xpath(self, xpath: str) -> Selection:
        return self._append(Selector.xpath(xpath).at(0))

    def all_by_xpath(self, xpath: str) -> Selection:
        return self._append(Selector.xpath(xpath))

    def find_by_link(self, text: str) -> Selection:
        return self._append(Selector.link(text).as_single())

    def all_by_link(self, text: str) -> Selection:
        return self._append(Selector.link(text))

    def find_by_name(self, name: str) -> Selection:
        return self._append(Selector.name(name).as_single())

    def all_by_name(self, name: str) -> Selection:
        return self._append(Selector.name(name))

    def at(self, index: int) -> Selection:
        """Narrow the last selector of the chain to the element at *index*."""
        if not self._selectors:
            raise ValueError("cannot index an empty selection")
        last = self._selectors[-1].at(index)
        return Selection(
            self._client,
            self._selectors[:-1] + (last,),
            resolver=self._resolver,
        )

    # -- resolution --------------------------------------------------------

    def elements(self) -> list[ElementHandle]:
        """Resolve the selection now and return the matched handles."""
        try:
            return self._resolver(self._client, self._selectors)
        except Exception as exc:
            raise SelectionResolutionError(self, exc) from exc

    def count(self) -> int:
        return len(self.elements())

    def _for_each_element(self, action: ElementAction) -> None:
        # Action errors already carry the selection description.
        for element in self.elements():
            action(element)

    # -- semantic actions --------------------------------------------------

    def click(self) -> None:
        """Click every matched element."""

        def _click(element: ElementHandle) -> None:
            try:
                element.click()
            except Exception as exc:
                raise ActionError("click", str(self), exc) from exc

        self._for_each_element(_click)

    def double_click(self) -> None:
        """Double-click every matched element.

        Moves the client's pointer onto each element, then double-clicks at
        the pointer position.  Pointer state belongs to the client, so this
        must not interleave with pointer actions issued elsewhere on the
        same client.
        """

        def _double_click(element: ElementHandle) -> None:
            try:
                self._client.move_to(element)
            except Exception as exc:
                raise ActionError("move", str(self), exc) from exc
            try:
                self._client.double_click()
            except Exception as exc:
                raise ActionError("double_click", str(self), exc) from exc

        self._for_each_element(_double_click)

    def fill(self, text: str) -> None:
        """Clear every matched element and enter *text*.

        If entering the text fails after the clear succeeded, the element is
        left empty.
        """

        def _fill(element: ElementHandle) -> None:
            try:
                element.clear()
            except Exception as exc:
                raise ActionError("clear", str(self), exc) from exc
            try:
                element.set_value(text)
            except Exception as exc:
                raise ActionError("fill", str(self), exc) from exc

        self._for_each_element(_fill)

    def check(self) -> None:
        """Check every matched checkbox.  Already-checked boxes are not clicked."""
        self._set_checked(True)

    def uncheck(self) -> None:
        """Uncheck every matched checkbox.  Unchecked boxes are not clicked."""
        self._set_checked(False)

    def _set_checked(self, checked: bool) -> None:
        # The state read and the toggling click are separate remote calls.
        # If the page changes the box in between, the click inverts the wrong
        # state; the protocol offers no compare-and-set to close that gap.

        def _set(element: ElementHandle) -> None:
            try:
                element_type = element.get_attribute("type")
            except Exception as exc:
                raise ActionError("read_type", str(self), exc) from exc

            if element_type != "checkbox":
                raise ValidationError(str(self))

            try:
                selected = element.is_selected()
            except Exception as exc:
                raise ActionError("read_state", str(self), exc) from exc

            if selected != checked:
                try:
                    element.click()
                except Exception as exc:
                    raise ActionError("click", str(self), exc) from exc

        self._for_each_element(_set)

    def select(self, text: str) -> None:
        """Select options by visible text in every matched <select>.

        Every direct <option> child whose whitespace-normalized text equals
        *text* is clicked, so a multi-select with duplicate labels gets all
        of them.  A matched parent without such an option raises
        NoMatchError; a selection matching no parents does nothing.
        """
        option_selector = Selector.xpath(option_xpath(text))

        def _select(element: ElementHandle) -> None:
            try:
                options = element.find_elements(option_selector)
            except Exception as exc:
                raise ActionError("find_options", str(self), exc) from exc

            if not options:
                raise NoMatchError(text, str(self))

            for option in options:
                try:
                    option.click()
                except Exception as exc:
                    raise ActionError("click_option", str(self), exc, text=text) from exc

        self._for_each_element(_select)

    def submit(self) -> None:
        """Submit the form of every matched element."""

        def _submit(element: ElementHandle) -> None:
            try:
                element.submit()
            except Exception as exc:
                raise ActionError("submit", str(self), exc) from exc

        self._for_each_element(_submit)
