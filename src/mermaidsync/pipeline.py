"""Render pipeline: one renderer call, applied to one container.

``render_into`` is what a fired debounce timer runs. It awaits the external
renderer, then updates the block's container in place:

- success: the container's content is replaced by the parsed SVG element,
  post-processors run on that element, and the error class is removed;
- failure: the container shows ``"Mermaid render error: <message>"`` and
  gets the error class.

Failures are logged and reported on the container only. Nothing raised by a
renderer, by SVG parsing or by a post-processor escapes ``render_into``, so a
broken diagram never affects other blocks or the scan that scheduled it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from mermaidsync.container import Container
from mermaidsync.renderers.protocol import (
    DiagramRenderer,
    RenderFunction,
    RenderResult,
    render_with,
)
from mermaidsync.stats import EngineStats
from mermaidsync.svg import parse_svg
from mermaidsync.utils.logger import block_logger, get_logger

logger = get_logger(__name__)

ERROR_PREFIX = "Mermaid render error: "

# (identifier, generation) -> True when a newer render has been scheduled
StaleCheck = Callable[[str, int], bool]


def error_message(exc: BaseException) -> str:
    """Human-readable text for a render failure."""
    text = str(exc).strip()
    return text or type(exc).__name__


class RenderPipeline:
    """Runs renders and applies their outcome to containers.

    Args:
        renderer: ``DiagramRenderer`` or bare async render function.
        post_processors: Callables applied to each parsed SVG element.
        error_class: Class added to a container whose render failed.
        stats: Counters to update (optional).
        is_stale: When given, completed renders for which it returns True
            are discarded without touching the container.

    """

    __slots__ = ("_error_class", "_is_stale", "_post_processors", "_renderer", "_stats")

    def __init__(
        self,
        renderer: DiagramRenderer | RenderFunction,
        *,
        post_processors: Sequence[Callable[[Any], None]] = (),
        error_class: str = "error",
        stats: EngineStats | None = None,
        is_stale: StaleCheck | None = None,
    ) -> None:
        self._renderer = renderer
        self._post_processors = tuple(post_processors)
        self._error_class = error_class
        self._stats = stats
        self._is_stale = is_stale

    @property
    def renderer(self) -> DiagramRenderer | RenderFunction:
        return self._renderer

    async def render_into(
        self,
        container: Container,
        identifier: str,
        source: str,
        *,
        generation: int | None = None,
    ) -> bool:
        """Render ``source`` and update ``container`` with the outcome.

        Args:
            container: Container owned by the block.
            identifier: Block identifier, also the renderer's cache key.
            source: Diagram source text.
            generation: Schedule generation, checked against ``is_stale``.

        Returns:
            True if the container now shows the new diagram.

        """
        if self._stats is not None:
            self._stats.renders_started += 1

        try:
            result = await render_with(self._renderer, identifier, source)
            markup = result.svg if isinstance(result, RenderResult) else result
            svg = parse_svg(markup)
            for processor in self._post_processors:
                processor(svg)
        except Exception as exc:
            if self._discard(identifier, generation):
                return False
            block_logger(logger, identifier).error("Render failed", exc_info=True)
            container.set_text(ERROR_PREFIX + error_message(exc))
            container.add_class(self._error_class)
            if self._stats is not None:
                self._stats.renders_failed += 1
            return False

        if self._discard(identifier, generation):
            return False
        container.clear()
        container.append(svg)
        container.remove_class(self._error_class)
        if self._stats is not None:
            self._stats.renders_succeeded += 1
        return True

    def _discard(self, identifier: str, generation: int | None) -> bool:
        if self._is_stale is None or generation is None:
            return False
        if not self._is_stale(identifier, generation):
            return False
        block_logger(logger, identifier).debug("Discarding stale render %d", generation)
        if self._stats is not None:
            self._stats.renders_discarded += 1
        return True


__all__ = [
    "ERROR_PREFIX",
    "RenderPipeline",
    "StaleCheck",
    "error_message",
]
