"""
Label Symbol Table and Fixup Ledger
===================================

Labels are resolved in a single sweep over the source:

- A reference to a label that is already defined resolves immediately.
- A reference to a label that is not yet defined records a *fixup*: the
  offset of the word whose address field must be rewritten later.
- Defining a label drains every fixup recorded under its name.
- Anything still in the ledger when the source ends is an unresolved
  reference.

Neither structure owns memory cells; patching is done by the caller
against the memory image.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from p16_sdk.errors import DuplicateSymbolError


@dataclass(frozen=True)
class Label:
    """
    A defined label.

    Attributes:
        name: Case-normalized label name
        position: Word offset the label stands for
        line: Source line of the definition (0 if not from source)
    """
    name: str
    position: int
    line: int = 0


class SymbolTable:
    """
    Label name -> word offset.

    Names are normalized to lowercase on every access, so lookups are
    case-insensitive regardless of how the caller spells them.
    """

    def __init__(self) -> None:
        self._labels: dict[str, Label] = {}

    def define(self, name: str, position: int, line: int = 0) -> Label:
        """
        Define a label.

        Raises:
            DuplicateSymbolError: If the label is already defined
        """
        key = name.lower()
        existing = self._labels.get(key)
        if existing is not None:
            raise DuplicateSymbolError(key, existing.position)
        label = Label(key, position, line)
        self._labels[key] = label
        return label

    def lookup(self, name: str) -> Optional[int]:
        """Return the offset of a label, or None if it is not defined."""
        label = self._labels.get(name.lower())
        return label.position if label is not None else None

    def get(self, name: str) -> Optional[Label]:
        return self._labels.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels.values())

    def as_dict(self) -> dict[str, int]:
        """Return a plain name -> offset mapping."""
        return {label.name: label.position for label in self._labels.values()}

    def by_position(self) -> dict[int, list[str]]:
        """Group label names by offset (several labels may share one)."""
        grouped: dict[int, list[str]] = {}
        for label in self._labels.values():
            grouped.setdefault(label.position, []).append(label.name)
        return grouped


class FixupLedger:
    """
    Label name -> pending word offsets awaiting that label's address.
    """

    def __init__(self) -> None:
        self._pending: dict[str, list[int]] = {}

    def record(self, name: str, offset: int) -> None:
        """Queue the word at `offset` for patching once `name` is defined."""
        self._pending.setdefault(name.lower(), []).append(offset)

    def drain(self, name: str) -> list[int]:
        """Remove and return every offset pending on `name`."""
        return self._pending.pop(name.lower(), [])

    def pending_for(self, name: str) -> list[int]:
        return list(self._pending.get(name.lower(), []))

    def unresolved(self) -> list[str]:
        """Names of every label still referenced but undefined."""
        return sorted(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._pending
