"""Shared test doubles for mermaidsync tests."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest

from mermaidsync import DiagramEngine, EngineConfig, RenderResult

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="120" height="80"><rect width="100" height="50"/></svg>'


class RecordingRenderer:
    """Renderer double that records calls and can fail or stall per block.

    Attributes:
        calls: ``(identifier, source)`` per render call, in call order
        completed: ``(identifier, source)`` per render that returned
        initialized: Options received through ``initialize``
        failures: identifier -> exception to raise
        delays: source -> seconds to sleep before returning

    """

    def __init__(self, svg: str = SVG) -> None:
        self.svg = svg
        self.calls: list[tuple[str, str]] = []
        self.completed: list[tuple[str, str]] = []
        self.initialized: list[dict[str, Any]] = []
        self.failures: dict[str, BaseException] = {}
        self.delays: dict[str, float] = {}

    def initialize(self, options: Mapping[str, Any]) -> None:
        self.initialized.append(dict(options))

    async def render(self, identifier: str, source: str) -> RenderResult:
        self.calls.append((identifier, source))
        delay = self.delays.get(source, 0.0)
        if delay:
            await asyncio.sleep(delay)
        failure = self.failures.get(identifier)
        if failure is not None:
            raise failure
        self.completed.append((identifier, source))
        return RenderResult(svg=self.svg)

    def calls_for(self, identifier: str) -> list[str]:
        return [source for ident, source in self.calls if ident == identifier]


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def make_engine(renderer: RecordingRenderer):
    """Build engines around the shared renderer with a short debounce."""

    def factory(**options: Any) -> DiagramEngine:
        options.setdefault("container_classes", ("mermaid",))
        options.setdefault("debounce_ms", 10)
        return DiagramEngine(renderer, EngineConfig(**options))

    return factory
