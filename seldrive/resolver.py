"""Default selector-chain resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence

from seldrive.errors import ResolutionError

if TYPE_CHECKING:
    from seldrive._base import Client, ElementHandle
    from seldrive.selector import Selector

Resolver = Callable[["Client", Sequence["Selector"]], "list[ElementHandle]"]


def _narrow(elements: list[ElementHandle], selector: Selector) -> list[ElementHandle]:
    if selector.single:
        if not elements:
            raise ResolutionError("element not found")
        if len(elements) > 1:
            raise ResolutionError(f"ambiguous find: {len(elements)} elements match")
        return elements
    if selector.index is not None:
        if not 0 <= selector.index < len(elements):
            raise ResolutionError(
                f"element index out of range: {selector.index} (found {len(elements)})"
            )
        return [elements[selector.index]]
    return elements


def resolve(client: Client, selectors: Sequence[Selector]) -> list[ElementHandle]:
    """Resolve a selector chain to element handles, in document order.

    The first selector is resolved against the document; every later one
    against each element of the previous step, concatenating the results.
    Index and single constraints apply to a step's combined matches.
    Backend exceptions propagate unchanged.
    """
    if not selectors:
        raise ResolutionError("empty selection")

    elements = _narrow(client.find_elements(selectors[0]), selectors[0])
    for selector in selectors[1:]:
        found: list[ElementHandle] = []
        for element in elements:
            found.extend(element.find_elements(selector))
        elements = _narrow(found, selector)
    return elements
