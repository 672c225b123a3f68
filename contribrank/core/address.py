"""Totally ordered node and edge addresses.

An address is a sequence of string parts, for example
``("github", "ISSUE", "sourcecred/sourcecred#42")``. The leading parts act as
the type tag: ``("github", "ISSUE")`` is a prefix shared by every issue node.

Addresses compare by their canonical string form, a kind marker followed by
NUL-terminated parts. Because NUL sorts below every other character, string
order agrees with part-wise order and prefix tests are plain string prefix
tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar

_SEPARATOR = "\0"


@total_ordering
@dataclass(frozen=True)
class _Address:
    KIND: ClassVar[str] = ""

    parts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.parts, tuple):
            object.__setattr__(self, "parts", tuple(self.parts))
        for part in self.parts:
            if not isinstance(part, str):
                raise TypeError(f"Address part must be a string: {part!r}")
            if _SEPARATOR in part:
                raise ValueError(f"Address part contains NUL: {part!r}")

    @classmethod
    def from_parts(cls, *parts: str):
        return cls(tuple(parts))

    @property
    def canonical(self) -> str:
        """Canonical string form used for ordering and prefix matching."""
        return self.KIND + _SEPARATOR + "".join(p + _SEPARATOR for p in self.parts)

    def to_parts(self) -> list[str]:
        return list(self.parts)

    def append(self, *parts: str):
        return type(self)(self.parts + tuple(parts))

    def has_prefix(self, prefix) -> bool:
        if type(prefix) is not type(self):
            raise TypeError(
                f"Cannot match {type(self).__name__} against {type(prefix).__name__}"
            )
        return self.canonical.startswith(prefix.canonical)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.canonical < other.canonical

    def __str__(self) -> str:
        return "/".join(self.parts)


class NodeAddress(_Address):
    """Address of a graph node."""

    KIND = "N"
    empty: ClassVar["NodeAddress"]


class EdgeAddress(_Address):
    """Address of a graph edge."""

    KIND = "E"
    empty: ClassVar["EdgeAddress"]


NodeAddress.empty = NodeAddress()
EdgeAddress.empty = EdgeAddress()


def parse_address(cls, text: str):
    """Build an address from its ``/``-joined readable form.

    An empty string yields the empty address.
    """
    if not text:
        return cls()
    return cls(tuple(text.split("/")))
