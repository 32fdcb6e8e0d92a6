"""
Case-insensitive, insertion-ordered HTTP header map.

Headers is a multimap: ``add`` keeps every value received for a name
(servers legitimately repeat ``Set-Cookie``), while ``set`` replaces them.
Single-value lookups comma-join repeated values; ``get_all`` returns them
individually.
"""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

HeaderPairs = Union[Mapping[str, str], Iterable[Tuple[str, str]], "Headers"]


class Headers:
    """Ordered header multimap with case-insensitive name lookup."""

    def __init__(self, headers: Optional[HeaderPairs] = None) -> None:
        self._items: List[Tuple[str, str]] = []
        if headers:
            pairs = headers.items() if isinstance(headers, (Mapping, Headers)) else headers
            for name, value in pairs:
                self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a value for ``name``, keeping any existing ones."""
        self._items.append((name, value))

    def set(self, name: str, value: str) -> None:
        """Replace every value for ``name`` with ``value``.

        The header keeps the position of its first occurrence; a new name is
        appended at the end.
        """
        key = name.lower()
        replaced = False
        items: List[Tuple[str, str]] = []
        for existing, current in self._items:
            if existing.lower() != key:
                items.append((existing, current))
            elif not replaced:
                items.append((name, value))
                replaced = True
        if not replaced:
            items.append((name, value))
        self._items = items

    def remove(self, name: str) -> None:
        key = name.lower()
        self._items = [(n, v) for n, v in self._items if n.lower() != key]

    def get_all(self, name: str) -> List[str]:
        """Return every value received for ``name``, in order."""
        key = name.lower()
        return [v for n, v in self._items if n.lower() == key]

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the values for ``name`` joined with ``", "``."""
        values = self.get_all(name)
        if not values:
            return default
        return ", ".join(values)

    def items(self) -> List[Tuple[str, str]]:
        """Return every (name, value) pair with the name's original casing."""
        return list(self._items)

    def keys(self) -> List[str]:
        """Return distinct header names, first casing seen, in order."""
        seen: Dict[str, str] = {}
        for name, _ in self._items:
            seen.setdefault(name.lower(), name)
        return list(seen.values())

    def copy(self) -> "Headers":
        return Headers(self._items)

    def __getitem__(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        if name not in self:
            raise KeyError(name)
        self.remove(name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return any(n.lower() == key for n, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return [(n.lower(), v) for n, v in self._items] == [
            (n.lower(), v) for n, v in other._items
        ]

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"
