"""Abstract contracts for the remote document backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seldrive.selector import Selector


class ElementHandle(ABC):
    """A live reference to one remote DOM node.

    Handles are only valid for the document state they were resolved
    against.  If the page mutates the node away, primitives raise
    whatever the backend raises for a stale reference.  Any exception
    signals failure; return values are only meaningful on success.
    """

    # ---- mutation --------------------------------------------------------

    @abstractmethod
    def click(self) -> None:
        """Click the element."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Clear the element's current value."""
        ...

    @abstractmethod
    def set_value(self, text: str) -> None:
        """Enter *text* as the element's value."""
        ...

    @abstractmethod
    def submit(self) -> None:
        """Submit the form the element belongs to."""
        ...

    # ---- state -----------------------------------------------------------

    @abstractmethod
    def get_attribute(self, name: str) -> str | None:
        """Return the attribute value, or None if it is not set."""
        ...

    @abstractmethod
    def is_selected(self) -> bool:
        """Return the checked/selected state of the element."""
        ...

    # ---- relative lookup -------------------------------------------------

    @abstractmethod
    def find_elements(self, selector: Selector) -> list[ElementHandle]:
        """Resolve *selector* relative to this element, in document order."""
        ...


class Client(ABC):
    """A remote browser session.

    Holds the document-level lookup and the pointer primitives.  Pointer
    position is shared by everything using the same client, so callers
    issuing pointer actions from several threads must serialize them.
    """

    @abstractmethod
    def find_elements(self, selector: Selector) -> list[ElementHandle]:
        """Resolve *selector* against the whole document, in document order."""
        ...

    @abstractmethod
    def move_to(
        self,
        element: ElementHandle,
        offset: tuple[float, float] | None = None,
    ) -> None:
        """Move the virtual pointer onto *element*.

        Args:
            element: Target element.
            offset: (x, y) from the element's top-left corner.  When None
                    the pointer is placed at the element's center.
        """
        ...

    @abstractmethod
    def double_click(self) -> None:
        """Double-click at the current pointer position."""
        ...
