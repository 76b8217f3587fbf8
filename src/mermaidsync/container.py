"""Visual containers owned by the engine.

A container is the element the host composites into its view after a diagram
block. The engine creates exactly one per block identifier and mutates it in
place: a successful render replaces its children with the diagram, a failed
one replaces them with an error message. Because the same object is handed
out on every scan, hosts can diff placements by identity.

Containers compare by identity, never by content.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from html import escape
from typing import Any
from xml.etree import ElementTree


@dataclass(eq=False, slots=True)
class Container:
    """Mutable visual element with a class list and replaceable content.

    Attributes:
        classes: Class names, in insertion order, without duplicates
        children: Visual artifacts (usually SVG ``Element`` trees)
        text: Plain text content (used for error messages)

    """

    classes: list[str] = field(default_factory=list)
    children: list[Any] = field(default_factory=list)
    text: str = ""

    @classmethod
    def with_classes(cls, classes: Iterable[str]) -> Container:
        """Create an empty container tagged with ``classes``."""
        container = cls()
        container.add_class(*classes)
        return container

    def add_class(self, *names: str) -> None:
        for name in names:
            if name not in self.classes:
                self.classes.append(name)

    def remove_class(self, *names: str) -> None:
        self.classes[:] = [c for c in self.classes if c not in names]

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def clear(self) -> None:
        """Remove all children and text."""
        self.children.clear()
        self.text = ""

    def append(self, artifact: Any) -> None:
        self.children.append(artifact)

    def set_text(self, value: str) -> None:
        """Replace all content with plain text."""
        self.clear()
        self.text = value

    @property
    def is_empty(self) -> bool:
        return not self.children and not self.text

    def to_html(self, tag: str = "div") -> str:
        """Serialize the container for HTML-based compositors.

        Text is escaped; ``ElementTree`` children are serialized as markup,
        other artifacts with ``str()``.
        """
        parts: list[str] = []
        if self.text:
            parts.append(escape(self.text))
        for child in self.children:
            if isinstance(child, ElementTree.Element):
                parts.append(ElementTree.tostring(child, encoding="unicode"))
            else:
                parts.append(str(child))
        class_attr = f' class="{escape(" ".join(self.classes))}"' if self.classes else ""
        return f"<{tag}{class_attr}>{''.join(parts)}</{tag}>"


__all__ = ["Container"]
