"""Exception types raised by selections and their backends."""

from __future__ import annotations

from typing import Any

# Message templates for ActionError, keyed by operation.
_OP_MESSAGES: dict[str, str] = {
    "click": "failed to click on '{target}'",
    "move": "failed to move mouse to '{target}'",
    "double_click": "failed to double-click on '{target}'",
    "clear": "failed to clear '{target}'",
    "fill": "failed to enter text into '{target}'",
    "read_type": "failed to retrieve type of '{target}'",
    "read_state": "failed to retrieve state of '{target}'",
    "find_options": "failed to select specified option for some '{target}'",
    "click_option": 'failed to click on option with text "{text}" for some \'{target}\'',
    "submit": "failed to submit '{target}'",
}


class SeldriveError(Exception):
    """Base class for every error raised by seldrive."""


class ResolutionError(SeldriveError):
    """A selection could not be resolved against the remote document."""


class SelectionResolutionError(ResolutionError):
    """Resolving the selection an action was invoked on failed."""

    def __init__(self, selection: Any, cause: BaseException) -> None:
        self.selection = selection
        self.cause = cause
        super().__init__(f"failed to select '{selection}': {cause}")


class ValidationError(SeldriveError):
    """A semantic precondition failed before anything was mutated."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"'{target}' does not refer to a checkbox")


class ActionError(SeldriveError):
    """A primitive remote operation failed.

    Attributes:
        op: Operation key (``click``, ``clear``, ``submit``, ...).
        target: Description of the selection the action ran on.
        cause: The exception raised by the backend.
    """

    def __init__(
        self,
        op: str,
        target: str,
        cause: BaseException,
        *,
        text: str | None = None,
    ) -> None:
        self.op = op
        self.target = target
        self.cause = cause
        prefix = _OP_MESSAGES[op].format(target=target, text=text)
        super().__init__(f"{prefix}: {cause}")


class NoMatchError(SeldriveError):
    """Select found no option with the requested text under a parent."""

    def __init__(self, text: str, target: str) -> None:
        self.text = text
        self.target = target
        super().__init__(f"no options with text \"{text}\" found for some '{target}'")
