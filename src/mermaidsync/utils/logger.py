"""Logging helpers for mermaidsync.

Every module logs through a standard library logger under the
``mermaidsync.`` namespace. The library never installs handlers; hosts
configure logging themselves.

Messages about a single diagram block go through ``block_logger``, which tags
each record with the block identifier, both in the message text and as the
``diagram_id`` record attribute for structured handlers.

Example:
    >>> from mermaidsync.utils.logger import block_logger, get_logger
    >>> logger = get_logger(__name__)
    >>> block_logger(logger, "diagram-1").debug("Scheduled in %d ms", 300)
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

NAMESPACE = "mermaidsync"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Names outside the package namespace are prefixed with "mermaidsync.".

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> get_logger("scheduler").name
        'mermaidsync.scheduler'
    """
    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


class BlockAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[identifier]`` and sets ``diagram_id``."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        identifier = self.extra["diagram_id"] if self.extra else None
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("diagram_id", identifier)
        kwargs["extra"] = extra
        return f"[{identifier}] {msg}", kwargs


def block_logger(logger: logging.Logger, identifier: str) -> BlockAdapter:
    """Return an adapter that tags records with a diagram block identifier."""
    return BlockAdapter(logger, {"diagram_id": identifier})


__all__ = ["BlockAdapter", "NAMESPACE", "block_logger", "get_logger"]
