"""Deterministic allocation of declaration names."""

from typing import Dict, Hashable, Iterable, Optional, Set


class SymbolTable:
    """Assigns each declaration a unique exported name.

    Collisions get a numeric suffix (``Status``, ``Status2``, ...) in
    allocation order, so the same allocation sequence always produces
    the same names.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        self._taken: Set[str] = set(reserved)
        self._names: Dict[Hashable, str] = {}

    def allocate(self, key: Hashable, desired: str) -> str:
        if key in self._names:
            return self._names[key]
        name = desired
        suffix = 2
        while name in self._taken:
            name = f"{desired}{suffix}"
            suffix += 1
        self._taken.add(name)
        self._names[key] = name
        return name

    def get(self, key: Hashable) -> Optional[str]:
        return self._names.get(key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._names
