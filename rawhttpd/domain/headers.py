"""Ordered request header storage with duplicate folding."""

from typing import Iterable, Iterator, Optional

HEADER_JOINER = ", "


def fold_header_value(existing: str, new: str) -> str:
    """Combine two occurrences of the same header.

    Both values non-empty are joined with ``", "``; otherwise whichever value
    is non-empty is kept.
    """
    if existing and new:
        return f"{existing}{HEADER_JOINER}{new}"
    return existing or new


class HeaderList:
    """Request headers kept as ``(lower-cased name, value)`` pairs in arrival order."""

    def __init__(self, pairs: Optional[Iterable[tuple[str, str]]] = None) -> None:
        self._pairs: list[tuple[str, str]] = []
        for name, value in pairs or ():
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a header, normalizing the name."""
        self._pairs.append((name.strip().lower(), value.strip()))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the folded value for ``name`` or ``default`` when absent."""
        key = name.lower()
        folded: Optional[str] = None
        for pair_name, value in self._pairs:
            if pair_name != key:
                continue
            folded = value if folded is None else fold_header_value(folded, value)
        return default if folded is None else folded

    def as_dict(self) -> dict[str, str]:
        """Return a name -> folded value mapping."""
        return {name: self.get(name, "") for name, _ in self._pairs}

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return any(pair_name == key for pair_name, _ in self._pairs)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderList):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"HeaderList({self._pairs!r})"
