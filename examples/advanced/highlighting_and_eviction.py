"""Register the Mermaid grammar and evict blocks deleted from the document."""

import asyncio

from mermaidsync import (
    DiagramEngine,
    EngineConfig,
    LanguageRegistry,
    RenderResult,
    code_block,
    document,
)


async def render(identifier: str, source: str) -> RenderResult:
    return RenderResult(svg='<svg xmlns="http://www.w3.org/2000/svg"/>')


async def main() -> None:
    registry = LanguageRegistry()
    config = EngineConfig(
        container_classes=("mermaid",),
        debounce_ms=0,
        highlight_registrar=registry,
        evict_missing=True,
        discard_stale_renders=True,
    )
    engine = DiagramEngine(render, config)
    print("mindmap highlights as:", registry.resolve("mindmap"))

    engine.reconcile(
        document(
            code_block("mindmap\n  root", language="mindmap", id="ideas"),
            code_block("pie\n\"a\" : 1", language="mermaid", id="chart"),
        )
    )
    await engine.wait_idle()
    print("cached:", sorted(engine.cache.identifiers()))

    # The pie chart was deleted
    engine.reconcile(document(code_block("mindmap\n  root", language="mindmap", id="ideas")))
    print("cached:", sorted(engine.cache.identifiers()), "evicted:", engine.stats.evicted)
    await engine.aclose()


asyncio.run(main())
