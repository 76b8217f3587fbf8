"""Fingerprint cache for diagram blocks.

Maps a block identifier to the source text last scheduled for rendering and
to the container the block owns. The source text itself is the fingerprint:
it is compared verbatim, never hashed.

Entries are created the first time an identifier shows up as a candidate and
persist until explicitly evicted or cleared. The container of an entry is
never replaced, so the host always sees the same object for the same block.

Thread Safety:
    FingerprintCache is not thread-safe. It is meant to be driven from a
    single event loop, which is how the engine uses it.

Example:
    >>> cache = FingerprintCache(("mermaid",))
    >>> entry = cache.get_or_create("d1")
    >>> entry.last_source is None
    True
    >>> cache.get_or_create("d1") is entry
    True
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from mermaidsync.container import Container


@dataclass(slots=True)
class CacheEntry:
    """Per-identifier cache state.

    Attributes:
        identifier: Block identifier this entry belongs to
        container: The block's container, stable for the entry's lifetime
        last_source: Source text last scheduled for rendering, None until
            the first schedule
        generation: Number of renders scheduled so far

    """

    identifier: str
    container: Container
    last_source: str | None = None
    generation: int = 0

    def is_current(self, source: str) -> bool:
        """Return True if ``source`` is what was last scheduled."""
        return self.last_source == source

    def mark_scheduled(self, source: str) -> int:
        """Record ``source`` as seen and return the new generation."""
        self.last_source = source
        self.generation += 1
        return self.generation


class FingerprintCache:
    """In-memory identifier -> CacheEntry map.

    Args:
        container_classes: Class names applied to every new container.

    """

    __slots__ = ("_classes", "_entries")

    def __init__(self, container_classes: Iterable[str]) -> None:
        self._classes: tuple[str, ...] = tuple(container_classes)
        self._entries: dict[str, CacheEntry] = {}

    def get_or_create(self, identifier: str) -> CacheEntry:
        """Return the entry for ``identifier``, creating it if needed.

        New entries get a fresh, empty container tagged with the configured
        classes and no recorded source.
        """
        entry = self._entries.get(identifier)
        if entry is None:
            entry = CacheEntry(
                identifier=identifier,
                container=Container.with_classes(self._classes),
            )
            self._entries[identifier] = entry
        return entry

    def peek(self, identifier: str) -> CacheEntry | None:
        """Return the entry for ``identifier`` if present, without creating it."""
        return self._entries.get(identifier)

    def evict(self, identifier: str) -> CacheEntry | None:
        """Remove and return the entry for ``identifier``."""
        return self._entries.pop(identifier, None)

    def clear(self) -> None:
        self._entries.clear()

    def identifiers(self) -> frozenset[str]:
        return frozenset(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(tuple(self._entries.values()))


__all__ = [
    "CacheEntry",
    "FingerprintCache",
]
