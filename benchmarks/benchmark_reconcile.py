"""Benchmark reconcile scans on a large document.

Compares an unchanged rescan (the common case: every keystroke outside a
diagram) against a rescan where one diagram changed.

Run with:
    pytest benchmarks/benchmark_reconcile.py -v --benchmark-only
"""

import asyncio
import itertools

import pytest

from mermaidsync import DiagramEngine


@pytest.mark.benchmark(group="reconcile")
def test_benchmark_unchanged_rescan(benchmark, renderer, large_document):
    """Rescan with every diagram already scheduled: no timers touched."""
    engine = DiagramEngine(renderer, container_classes="mermaid", debounce_ms=0)

    async def prime() -> None:
        engine.reconcile(large_document)
        await engine.wait_idle()

    asyncio.run(prime())

    placements = benchmark(engine.reconcile, large_document)
    assert len(placements) == 100


@pytest.mark.benchmark(group="reconcile")
def test_benchmark_single_block_edit(benchmark, renderer, large_document, document_builder):
    """Rescan where one diagram changed: one timer re-armed per scan."""
    loop = asyncio.new_event_loop()
    engine = DiagramEngine(renderer, container_classes="mermaid", debounce_ms=300)
    revisions = itertools.count(1)
    edited = [document_builder(100, revision=n) for n in range(1, 6)]

    async def scan(doc):
        return engine.reconcile(doc)

    loop.run_until_complete(scan(large_document))

    def edit_and_scan():
        return loop.run_until_complete(scan(edited[next(revisions) % len(edited)]))

    try:
        placements = benchmark(edit_and_scan)
    finally:
        engine.close()
        loop.close()
    assert len(placements) == 100


@pytest.mark.benchmark(group="walk")
def test_benchmark_walk(benchmark, large_document):
    """Baseline: traversal alone."""
    from mermaidsync.tree import walk

    def traverse():
        return sum(1 for _ in walk(large_document))

    assert benchmark(traverse) > 400
