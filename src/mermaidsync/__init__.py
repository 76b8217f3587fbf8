"""
mermaidsync: live diagram rendering for rich-text editors

Keeps rendered Mermaid diagrams in sync with the diagram code blocks of an
editor document. On every change the host passes a snapshot of its tree to
``DiagramEngine.reconcile`` and gets back the list of containers to place;
changed blocks are re-rendered after a debounce window, unchanged ones never.

Quick Start:
    >>> import asyncio
    >>> from mermaidsync import DiagramEngine, RenderResult, code_block, document
    >>>
    >>> async def render(identifier: str, source: str) -> RenderResult:
    ...     return RenderResult(svg='<svg xmlns="http://www.w3.org/2000/svg"/>')
    >>>
    >>> async def main() -> None:
    ...     engine = DiagramEngine(render, container_classes="mermaid", debounce_ms=0)
    ...     doc = document(code_block("graph TD\\nA --> B", language="mermaid", id="d1"))
    ...     placements = engine.reconcile(doc)
    ...     await engine.wait_idle()
    ...     print(placements[0].anchor, placements[0].container.to_html()[:32])
    >>> asyncio.run(main())
    17 <div class="mermaid"><svg xmlns=

Installation:
    pip install mermaidsync          # Engine, zero runtime dependencies
    npm install -g @mermaid-js/mermaid-cli   # For MermaidCliRenderer
"""

from mermaidsync.cache import CacheEntry, FingerprintCache
from mermaidsync.config import EngineConfig
from mermaidsync.container import Container
from mermaidsync.engine import DiagramEngine, Placement
from mermaidsync.errors import ConfigError, MermaidSyncError, RenderError
from mermaidsync.highlighting import (
    MERMAID_GRAMMAR,
    Grammar,
    HighlightRegistrar,
    LanguageRegistry,
    register_mermaid,
)
from mermaidsync.languages import DEFAULT_LANGUAGES, is_diagram_language
from mermaidsync.pipeline import RenderPipeline
from mermaidsync.renderers import (
    DiagramRenderer,
    MermaidCliRenderer,
    RenderFunction,
    RenderResult,
)
from mermaidsync.scheduler import DebounceScheduler
from mermaidsync.stats import EngineStats
from mermaidsync.svg import parse_svg, strip_fixed_size
from mermaidsync.tree import HostNode, Node, code_block, document, paragraph, text, walk

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_LANGUAGES",
    "MERMAID_GRAMMAR",
    "CacheEntry",
    "ConfigError",
    "Container",
    "DebounceScheduler",
    "DiagramEngine",
    "DiagramRenderer",
    "EngineConfig",
    "EngineStats",
    "FingerprintCache",
    "Grammar",
    "HighlightRegistrar",
    "HostNode",
    "LanguageRegistry",
    "MermaidCliRenderer",
    "MermaidSyncError",
    "Node",
    "Placement",
    "RenderError",
    "RenderFunction",
    "RenderPipeline",
    "RenderResult",
    "__version__",
    "code_block",
    "document",
    "is_diagram_language",
    "paragraph",
    "parse_svg",
    "strip_fixed_size",
    "text",
    "walk",
]
