"""Simulate an editor session: typing inside a diagram renders once."""

import asyncio

from mermaidsync import DiagramEngine, RenderResult, code_block, document, paragraph


async def render(identifier: str, source: str) -> RenderResult:
    print(f"  render {identifier!r}: {source.splitlines()[-1]}")
    return RenderResult(svg='<svg xmlns="http://www.w3.org/2000/svg"/>')


async def main() -> None:
    engine = DiagramEngine(render, container_classes="mermaid", debounce_ms=150)

    # Each keystroke produces a new snapshot; the engine rescans every time
    typed = "graph TD\nA --> B"
    for end in range(len("graph TD\nA"), len(typed) + 1):
        doc = document(
            paragraph("Architecture"),
            code_block(typed[:end], language="mermaid", id="arch"),
        )
        placements = engine.reconcile(doc)
        await asyncio.sleep(0.02)

    await engine.wait_idle()
    print("Placed at", placements[0].anchor, "->", placements[0].container.to_html()[:40])
    print(engine.stats.summary())


asyncio.run(main())
