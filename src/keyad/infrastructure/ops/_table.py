"""
Named collection of lifted operations for one output kind.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator

from ...domain._value import OutputKind


class FunctionTable:
    """
    Attribute- and key-addressable table of operations.

    ``table.sin(x)`` and ``table["sin"](x)`` are equivalent. Besides lifted
    operations the scalar table also carries re-exported math constants.

    Parameters
    ----------
    kind : OutputKind
        Output kind shared by the table's arithmetic and math operations.
    """

    def __init__(self, kind: OutputKind) -> None:
        self.kind = kind
        self._entries: Dict[str, Any] = {}

    def register(self, name: str, entry: Any) -> Any:
        if name in self._entries:
            raise ValueError(f"{self.kind.value}.{name} is already defined")
        self._entries[name] = entry
        return entry

    def __getattr__(self, name: str) -> Any:
        # only reached when normal attribute lookup fails
        entries = self.__dict__.get("_entries", {})
        try:
            return entries[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} {self.__dict__.get('kind')!r} has no entry {name!r}"
            ) from None

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))

    def __repr__(self) -> str:
        return f"FunctionTable(kind={self.kind.value}, entries={len(self._entries)})"
