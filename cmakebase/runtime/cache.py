"""In-memory equivalent of the CMake cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional

logger = logging.getLogger("cmakebase.runtime.cache")


@dataclass(frozen=True)
class CacheEntry:
    value: str
    doc: str = ""


class ConfigCache:
    """Persistent-for-the-run variables with CMake `CACHE` semantics.

    `define()` behaves like `set(VAR default CACHE STRING doc)`: an entry that
    already exists keeps its value. `set()` behaves like `-DVAR=value` on the
    command line and always wins.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, CacheEntry] = {}
        for name, value in (entries or {}).items():
            self.set(name, value)

    def define(self, name: str, default: str, doc: str = "") -> str:
        """Return the cached value for name, storing default if absent."""
        entry = self._entries.get(name)
        if entry is None:
            entry = CacheEntry(str(default), doc)
            self._entries[name] = entry
            logger.debug("Cache entry %s defaulted to %r", name, entry.value)
        return entry.value

    def set(self, name: str, value: str, doc: str = "") -> None:
        self._entries[name] = CacheEntry(str(value), doc)

    def get(self, name: str) -> Optional[str]:
        entry = self._entries.get(name)
        return entry.value if entry else None

    def as_dict(self) -> Dict[str, str]:
        return {name: entry.value for name, entry in self._entries.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
