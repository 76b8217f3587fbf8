"""Benchmark fixtures and configuration."""

from __future__ import annotations

import pytest

from mermaidsync import Node, RenderResult, code_block, document, paragraph

SVG = '<svg xmlns="http://www.w3.org/2000/svg"/>'


class NullRenderer:
    """Renderer that returns immediately, so benchmarks measure the engine."""

    async def render(self, identifier: str, source: str) -> RenderResult:
        return RenderResult(svg=SVG)


def build_document(sections: int = 100, *, revision: int = 0) -> Node:
    """Build a document with one Mermaid block per section.

    ``revision`` is appended to the first diagram only, to simulate a
    single-block edit.
    """
    children: list[Node] = []
    for i in range(sections):
        children.append(paragraph(f"Section {i} introduces the flow below."))
        source = f"graph TD\nA{i} --> B{i}\nB{i} --> C{i}"
        if i == 0 and revision:
            source += f"\nC{i} --> R{revision}"
        children.append(code_block(source, language="mermaid", id=f"diagram-{i}"))
        children.append(code_block(f"print({i})", language="python", id=f"code-{i}"))
        children.append(
            Node(type_name="blockquote", children=(paragraph(f"Note for section {i}."),))
        )
    return document(*children)


@pytest.fixture
def renderer() -> NullRenderer:
    return NullRenderer()


@pytest.fixture
def large_document() -> Node:
    """A 100-section document with 100 diagram blocks."""
    return build_document(100)


@pytest.fixture
def document_builder():
    """Factory for documents with an edited first diagram."""
    return build_document
