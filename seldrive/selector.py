"""Selector model and XPath query construction.

A selector is one step of a selection chain.  Each step is resolved
relative to the elements matched by the previous step.
"""

from __future__ import annotations

import dataclasses
from typing import Literal

SelectorKind = Literal["css", "xpath", "link", "name"]

# Display labels used in selection descriptions
_KIND_LABELS: dict[str, str] = {
    "css": "CSS",
    "xpath": "XPath",
    "link": "Link",
    "name": "Name",
}

SELECTOR_KINDS = frozenset(_KIND_LABELS)


def xpath_literal(text: str) -> str:
    """Quote *text* as an XPath 1.0 string literal.

    XPath 1.0 has no escape sequences, so a string containing both quote
    characters is split on double quotes and rebuilt with concat(), e.g.
    ``it's "x"`` becomes ``concat("it's ", '"', "x", '"')``.
    """
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"

    parts: list[str] = []
    for i, chunk in enumerate(text.split('"')):
        if i > 0:
            parts.append("'\"'")
        if chunk:
            parts.append(f'"{chunk}"')
    return f"concat({', '.join(parts)})"


def option_xpath(text: str) -> str:
    """Relative XPath for direct <option> children whose normalized text equals *text*."""
    return f"./option[normalize-space(text())={xpath_literal(text)}]"


@dataclasses.dataclass(frozen=True)
class Selector:
    """One step of a selection chain.

    Attributes:
        kind: How ``value`` is interpreted (css, xpath, link, name).
        value: Selector expression, link text or name attribute value.
        index: Keep only the element at this position of the step's matches.
        single: Require the step to match exactly one element.
    """

    kind: SelectorKind
    value: str
    index: int | None = None
    single: bool = False

    def __post_init__(self) -> None:
        if self.kind not in SELECTOR_KINDS:
            raise ValueError(
                f"Unknown selector kind '{self.kind}'. Valid: {sorted(SELECTOR_KINDS)}"
            )

    # -- constructors ------------------------------------------------------

    @classmethod
    def css(cls, value: str) -> Selector:
        return cls("css", value)

    @classmethod
    def xpath(cls, value: str) -> Selector:
        return cls("xpath", value)

    @classmethod
    def link(cls, text: str) -> Selector:
        return cls("link", text)

    @classmethod
    def name(cls, value: str) -> Selector:
        return cls("name", value)

    def at(self, index: int) -> Selector:
        return dataclasses.replace(self, index=index, single=False)

    def as_single(self) -> Selector:
        return dataclasses.replace(self, index=None, single=True)

    # -- compilation -------------------------------------------------------

    def query(self) -> tuple[str, str]:
        """Compile to a ("css" | "xpath", expression) pair for the backend."""
        if self.kind == "css":
            return "css", self.value
        if self.kind == "xpath":
            return "xpath", self.value
        if self.kind == "link":
            return "xpath", f".//a[normalize-space()={xpath_literal(self.value)}]"
        return "xpath", f".//*[@name={xpath_literal(self.value)}]"

    def __str__(self) -> str:
        if self.single:
            suffix = " [single]"
        elif self.index is not None:
            suffix = f" [{self.index}]"
        else:
            suffix = ""
        return f"{_KIND_LABELS[self.kind]}: {self.value}{suffix}"


def describe_chain(selectors: tuple[Selector, ...] | list[Selector]) -> str:
    """Render a selector chain for error messages ("CSS: form | XPath: .//input")."""
    return " | ".join(str(s) for s in selectors)
