"""Diagram renderers for mermaidsync.

Provides:
- DiagramRenderer: protocol every renderer implements
- RenderResult: SVG output of a render
- MermaidCliRenderer: renderer backed by the Mermaid CLI (mmdc)
"""

from mermaidsync.renderers.mermaid_cli import MermaidCliRenderer
from mermaidsync.renderers.protocol import (
    DiagramRenderer,
    RenderFunction,
    RenderResult,
    initialize_renderer,
    render_with,
)

__all__ = [
    "DiagramRenderer",
    "MermaidCliRenderer",
    "RenderFunction",
    "RenderResult",
    "initialize_renderer",
    "render_with",
]
