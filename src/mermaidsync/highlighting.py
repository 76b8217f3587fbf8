"""Syntax highlighting registration for diagram code blocks.

Editors that highlight code blocks keep a registry of language grammars. When
an engine is given such a registry, it registers the Mermaid grammar and
makes ``mmd`` and ``mindmap`` aliases of ``mermaid`` so diagram blocks are
highlighted while they are edited. Highlighting itself is the registry's job.

Any object with ``register(grammars)`` and ``register_alias(alias, name)``
conforms to ``HighlightRegistrar``. ``LanguageRegistry`` is a minimal
in-memory implementation.

Usage:
    from mermaidsync.highlighting import LanguageRegistry, register_mermaid

    registry = LanguageRegistry()
    register_mermaid(registry)
    registry.resolve("mmd")   # "mermaid"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from mermaidsync.languages import MERMAID, MERMAID_ALIASES


@dataclass(frozen=True, slots=True)
class Grammar:
    """Declarative token grammar for a highlighter.

    Attributes:
        name: Display name
        keywords: Words highlighted as keywords
        rules: ``(scope, regex)`` pairs, tried in order

    """

    name: str
    keywords: tuple[str, ...]
    rules: tuple[tuple[str, str], ...]


MERMAID_GRAMMAR = Grammar(
    name="Mermaid",
    keywords=(
        "graph",
        "flowchart",
        "sequenceDiagram",
        "classDiagram",
        "stateDiagram",
        "stateDiagram-v2",
        "erDiagram",
        "journey",
        "gantt",
        "pie",
        "mindmap",
        "timeline",
        "gitGraph",
        "quadrantChart",
        "subgraph",
        "end",
        "participant",
        "actor",
        "loop",
        "alt",
        "else",
        "opt",
        "par",
        "note",
        "section",
        "title",
        "class",
        "classDef",
        "style",
        "linkStyle",
        "click",
        "TD",
        "TB",
        "BT",
        "LR",
        "RL",
    ),
    rules=(
        ("comment", r"%%.*$"),
        ("meta", r"^\s*---[\s\S]*?---"),
        ("string", r'"(?:[^"\\]|\\.)*"'),
        ("operator", r"<?[-=.]{2,}[>xo]?|<?-\.+->?|\|"),
        ("label", r"\[[^\]]*\]|\{[^}]*\}|\([^)]*\)"),
        ("number", r"\b\d+(?:\.\d+)?\b"),
    ),
)


@runtime_checkable
class HighlightRegistrar(Protocol):
    """Protocol for highlighter language registries."""

    def register(self, grammars: Mapping[str, Grammar]) -> None:
        """Register grammars keyed by canonical language name."""
        ...

    def register_alias(self, alias: str, name: str) -> None:
        """Make ``alias`` resolve to the registered language ``name``."""
        ...


class LanguageRegistry:
    """In-memory ``HighlightRegistrar``.

    Not thread-safe; populate it before sharing.
    """

    __slots__ = ("_aliases", "_grammars")

    def __init__(self) -> None:
        self._grammars: dict[str, Grammar] = {}
        self._aliases: dict[str, str] = {}

    def register(self, grammars: Mapping[str, Grammar]) -> None:
        self._grammars.update(grammars)

    def register_alias(self, alias: str, name: str) -> None:
        self._aliases[alias] = name

    def resolve(self, language: str) -> str | None:
        """Return the canonical name for ``language`` or an alias of it."""
        if language in self._grammars:
            return language
        name = self._aliases.get(language)
        if name is not None and name in self._grammars:
            return name
        return None

    def grammar(self, language: str) -> Grammar | None:
        name = self.resolve(language)
        return self._grammars[name] if name is not None else None

    @property
    def languages(self) -> frozenset[str]:
        return frozenset(self._grammars)

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def __contains__(self, language: str) -> bool:
        return self.resolve(language) is not None


def register_mermaid(registrar: HighlightRegistrar) -> None:
    """Register the Mermaid grammar and its aliases with ``registrar``."""
    registrar.register({MERMAID: MERMAID_GRAMMAR})
    for alias in MERMAID_ALIASES:
        registrar.register_alias(alias, MERMAID)


__all__ = [
    "Grammar",
    "HighlightRegistrar",
    "LanguageRegistry",
    "MERMAID_GRAMMAR",
    "register_mermaid",
]
