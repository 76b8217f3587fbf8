"""Diagram language tags recognized on code blocks.

Editors label code blocks with free-form language tags (``mermaid``,
``Mermaid``, ``mmd``, ``mindmap``...). A block is treated as diagram source
when its tag contains any recognized alias, case-insensitively, which is the
same loose match editors apply when picking a highlighter.

Example:
    >>> is_diagram_language("mermaid")
    True
    >>> is_diagram_language("MMD")
    True
    >>> is_diagram_language("javascript")
    False
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

# Canonical language name the aliases resolve to
MERMAID = "mermaid"

# Aliases registered with highlighters alongside the canonical name
MERMAID_ALIASES: tuple[str, ...] = ("mmd", "mindmap")

DEFAULT_LANGUAGES: tuple[str, ...] = (MERMAID, *MERMAID_ALIASES)


@lru_cache(maxsize=32)
def _compile(languages: tuple[str, ...]) -> re.Pattern[str] | None:
    if not languages:
        return None
    alternatives = "|".join(re.escape(lang) for lang in languages)
    return re.compile(alternatives, re.IGNORECASE)


def is_diagram_language(
    tag: object,
    languages: Iterable[str] = DEFAULT_LANGUAGES,
) -> bool:
    """Check whether a code block language tag names a diagram language.

    Args:
        tag: Value of the block's ``language`` attribute. Anything that is
            not a non-empty string never matches.
        languages: Recognized aliases.

    Returns:
        True if any alias occurs in the tag (case-insensitive).

    """
    if not isinstance(tag, str) or not tag:
        return False
    pattern = _compile(tuple(languages))
    if pattern is None:
        return False
    return pattern.search(tag) is not None


__all__ = [
    "DEFAULT_LANGUAGES",
    "MERMAID",
    "MERMAID_ALIASES",
    "is_diagram_language",
]
