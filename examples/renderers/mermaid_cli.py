"""Render with the real Mermaid CLI (npm install -g @mermaid-js/mermaid-cli)."""

import asyncio
import logging

from mermaidsync import DiagramEngine, MermaidCliRenderer, code_block, document, strip_fixed_size

logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")


async def main() -> None:
    async with DiagramEngine(
        MermaidCliRenderer(theme="neutral", timeout=30),
        classList=["mermaid"],
        debounce=0,
        mermaidConfig={"flowchart": {"curve": "basis"}},
        post_processors=[strip_fixed_size],
    ) as engine:
        good, bad = engine.reconcile(
            document(
                code_block("graph LR\nEditor --> Engine --> mmdc", language="mermaid", id="ok"),
                code_block("graph LR\nEditor -->", language="mmd", id="broken"),
            )
        )
        await engine.wait_idle()

    print(good.container.to_html()[:80], "...")
    print(bad.container.to_html())


asyncio.run(main())
