"""Read-only host tree snapshots.

The engine never owns the editor's document. It reads a snapshot through the
``HostNode`` protocol, which mirrors the shape of ProseMirror nodes: a type
name, an attribute bag, children, text content and a size used for position
addressing.

Positions follow ProseMirror's scheme:
- The first child of the root sits at position 0.
- Entering a non-text node costs one position (its opening token), leaving it
  costs another (its closing token).
- Text nodes are as large as their text; leaf nodes (e.g. a hard break) are 1.

So a code block holding ``"abc"`` at position 0 has ``node_size == 5`` and its
trailing edge, the last position inside the block, is ``0 + 5 - 1 == 4``.

``Node`` is a concrete frozen implementation for hosts that do not already
have a tree type, and for tests:

    doc = document(
        paragraph("Intro"),
        code_block("graph TD\\nA --> B", language="mermaid", id="d1"),
    )
    for node, pos in walk(doc):
        ...

Thread Safety:
    ``Node`` is frozen and safe to share. ``walk`` is a pure generator.

"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HostNode(Protocol):
    """Protocol for host document nodes consumed by the engine."""

    @property
    def type_name(self) -> str: ...

    @property
    def attrs(self) -> Mapping[str, Any]: ...

    @property
    def children(self) -> Sequence["HostNode"]: ...

    @property
    def text_content(self) -> str: ...

    @property
    def node_size(self) -> int: ...


_EMPTY_ATTRS: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Node:
    """Immutable tree node implementing ``HostNode``.

    Attributes:
        type_name: Node type (e.g., "doc", "paragraph", "codeBlock", "text")
        attrs: Attribute bag (e.g., ``language``, ``id``)
        children: Child nodes, in document order
        text: Text payload for text nodes, None otherwise
        leaf: True for non-text atoms without content (size 1)

    """

    type_name: str
    attrs: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_ATTRS)
    children: tuple["Node", ...] = ()
    text: str | None = None
    leaf: bool = False

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def content_size(self) -> int:
        """Total size of this node's children."""
        return sum(child.node_size for child in self.children)

    @property
    def node_size(self) -> int:
        if self.text is not None:
            return len(self.text)
        if self.leaf:
            return 1
        return 2 + self.content_size

    @property
    def text_content(self) -> str:
        if self.text is not None:
            return self.text
        return "".join(child.text_content for child in self.children)


def walk(root: HostNode) -> Iterator[tuple[HostNode, int]]:
    """Yield every descendant of ``root`` with its position.

    Pre-order, depth-first, document order. The root itself is not yielded;
    its first child is at position 0.

    Args:
        root: Document (or any subtree) to traverse.

    Yields:
        ``(node, pos)`` pairs.

    """
    yield from _walk_children(root, 0)


def _walk_children(node: HostNode, start: int) -> Iterator[tuple[HostNode, int]]:
    pos = start
    for child in node.children:
        yield child, pos
        if child.children:
            yield from _walk_children(child, pos + 1)
        pos += child.node_size


# -- Builders -----------------------------------------------------------------


def text(content: str) -> Node:
    """Create a text node."""
    return Node(type_name="text", text=content)


def document(*children: Node) -> Node:
    """Create a root ``doc`` node."""
    return Node(type_name="doc", children=tuple(children))


def paragraph(content: str = "") -> Node:
    """Create a paragraph holding a single text node (or nothing)."""
    return Node(
        type_name="paragraph",
        children=(text(content),) if content else (),
    )


def code_block(
    content: str,
    *,
    type_name: str = "codeBlock",
    **attrs: Any,
) -> Node:
    """Create a code block node.

    Attributes with a None value are dropped, so ``id=None`` produces a
    block without an identifier.

    Example:
        >>> block = code_block("graph TD", language="mermaid", id="d1")
        >>> block.node_size
        10

    """
    return Node(
        type_name=type_name,
        attrs=MappingProxyType({k: v for k, v in attrs.items() if v is not None}),
        children=(text(content),) if content else (),
    )


__all__ = [
    "HostNode",
    "Node",
    "code_block",
    "document",
    "paragraph",
    "text",
    "walk",
]
