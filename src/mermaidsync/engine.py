"""DiagramEngine: incremental reconciliation of diagram blocks.

The host calls ``reconcile`` with a snapshot of its document every time the
document changes. One scan:

1. walks the snapshot in document order and picks out candidate blocks
   (matching node type, diagram language tag, non-blank text, an ``id``);
2. looks up or creates each candidate's cache entry and container;
3. emits a ``Placement`` anchored at the block's trailing edge;
4. when the block's text differs from what was last scheduled, records the
   new text and (re)arms a debounced render for that identifier.

The scan is synchronous and returns the full placement list. Renders run
later on the event loop and mutate containers that are already placed.

Example:
    engine = DiagramEngine(MermaidCliRenderer(), EngineConfig(container_classes="mermaid"))

    async def on_change(doc: HostNode) -> None:
        decorations = engine.reconcile(doc)
        view.set_widgets((p.anchor, p.container) for p in decorations)

Thread Safety:
    An engine belongs to one event loop. ``reconcile``, fired renders and
    ``close`` interleave only at the renderer's await point, so no locks are
    needed. Create one engine per editor.

"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any

from mermaidsync.cache import CacheEntry, FingerprintCache
from mermaidsync.config import EngineConfig
from mermaidsync.container import Container
from mermaidsync.errors import MermaidSyncError
from mermaidsync.highlighting import register_mermaid
from mermaidsync.languages import is_diagram_language
from mermaidsync.pipeline import RenderPipeline
from mermaidsync.renderers.protocol import DiagramRenderer, RenderFunction, initialize_renderer
from mermaidsync.scheduler import DebounceScheduler
from mermaidsync.stats import EngineStats
from mermaidsync.tree import HostNode, walk
from mermaidsync.utils.logger import block_logger, get_logger

logger = get_logger(__name__)

# Always forced on renderer initialization: the engine decides when to
# render and how errors are displayed.
FORCED_RENDERER_OPTIONS: dict[str, Any] = {
    "startOnLoad": False,
    "suppressErrorRendering": True,
}


@dataclass(frozen=True, slots=True)
class Placement:
    """A container to composite at a document position.

    Attributes:
        anchor: Document position of the block's trailing edge
        container: The block's container (same object on every scan)
        side: Placement bias; +1 draws after the content at ``anchor``
        identifier: Identifier of the block the container belongs to

    """

    anchor: int
    container: Container
    side: int = 1
    identifier: str = ""


class DiagramEngine:
    """Keeps rendered diagrams in sync with diagram blocks of a host tree.

    Args:
        renderer: ``DiagramRenderer`` or bare async render function.
        config: Engine configuration. When omitted, ``options`` are passed
            to ``EngineConfig.from_dict``.
        **options: Configuration options (field or editor-plugin names).

    Raises:
        ConfigError: If the configuration is invalid.

    """

    def __init__(
        self,
        renderer: DiagramRenderer | RenderFunction,
        config: EngineConfig | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = EngineConfig.from_dict(options)
        elif options:
            msg = "pass either config or keyword options, not both"
            raise TypeError(msg)

        self.config = config
        self.stats = EngineStats()
        self.cache = FingerprintCache(config.container_classes)
        self.scheduler = DebounceScheduler()
        self.pipeline = RenderPipeline(
            renderer,
            post_processors=config.post_processors,
            error_class=config.error_class,
            stats=self.stats,
            is_stale=self._is_stale if config.discard_stale_renders else None,
        )
        self._closed = False

        if config.highlight_registrar is not None:
            register_mermaid(config.highlight_registrar)
        initialize_renderer(renderer, {**config.renderer_options, **FORCED_RENDERER_OPTIONS})

    # -- Scanning ----------------------------------------------------------------

    def reconcile(self, doc: HostNode) -> list[Placement]:
        """Scan ``doc`` and return placements for every candidate block.

        Schedules a debounced render for each candidate whose text changed
        since its last scheduled render. Never awaits and never mutates
        ``doc``.

        Args:
            doc: Root of the host tree snapshot.

        Returns:
            Placements in document order.

        Raises:
            MermaidSyncError: If the engine has been closed.
            RuntimeError: If a render must be scheduled and no event loop
                is running.

        """
        if self._closed:
            raise MermaidSyncError("reconcile() called on a closed DiagramEngine")

        placements: list[Placement] = []
        seen: set[str] = set()

        for node, pos in walk(doc):
            candidate = self.candidate(node)
            if candidate is None:
                continue
            identifier, source = candidate

            entry = self.cache.get_or_create(identifier)
            placements.append(
                Placement(
                    anchor=pos + node.node_size - 1,
                    container=entry.container,
                    identifier=identifier,
                )
            )

            if identifier in seen:
                block_logger(logger, identifier).debug("Duplicate identifier; reusing its container")
                continue
            seen.add(identifier)

            if not entry.is_current(source):
                self._schedule(entry, source)

        if self.config.evict_missing:
            self._sweep(seen)

        self.stats.scans += 1
        self.stats.placements += len(placements)
        return placements

    def candidate(self, node: HostNode) -> tuple[str, str] | None:
        """Return ``(identifier, source)`` if ``node`` is a diagram block.

        The source is the block's text with surrounding whitespace removed.
        """
        if node.type_name != self.config.target_kind:
            return None
        attrs = node.attrs
        if not is_diagram_language(attrs.get("language"), self.config.languages):
            return None
        source = node.text_content.strip()
        if not source:
            return None
        identifier = attrs.get("id")
        if not identifier:
            return None
        return str(identifier), source

    # -- Cache access ------------------------------------------------------------

    def container_for(self, identifier: str) -> Container | None:
        """Return the container owned by ``identifier``, if any."""
        entry = self.cache.peek(identifier)
        return entry.container if entry is not None else None

    def evict(self, identifier: str) -> bool:
        """Forget ``identifier``: cancel its pending render and drop its entry.

        A render already in flight still completes, on a container that is
        no longer placed.

        Returns:
            True if an entry was evicted.

        """
        self.scheduler.cancel(identifier)
        return self.cache.evict(identifier) is not None

    # -- Lifecycle ---------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    async def wait_idle(self) -> None:
        """Wait until no render is pending or running."""
        await self.scheduler.wait_idle()

    def close(self) -> None:
        """Cancel pending renders and clear the cache.

        Renders already running are left to finish.
        """
        if self._closed:
            return
        cancelled = self.scheduler.cancel_all()
        self.cache.clear()
        self._closed = True
        logger.debug("Engine closed; cancelled %d pending render(s)", cancelled)

    async def aclose(self) -> None:
        """Close the engine and wait for running renders to finish."""
        self.close()
        await self.scheduler.drain()

    def __enter__(self) -> DiagramEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def __aenter__(self) -> DiagramEngine:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- Internal ----------------------------------------------------------------

    def _schedule(self, entry: CacheEntry, source: str) -> None:
        identifier = entry.identifier
        generation = entry.generation + 1
        work = functools.partial(
            self.pipeline.render_into,
            entry.container,
            identifier,
            source,
            generation=generation,
        )
        self.scheduler.schedule(identifier, work, self.config.debounce_ms)
        # Recorded only once the timer is armed
        entry.mark_scheduled(source)
        self.stats.scheduled += 1

    def _is_stale(self, identifier: str, generation: int) -> bool:
        entry = self.cache.peek(identifier)
        return entry is None or entry.generation != generation

    def _sweep(self, seen: set[str]) -> None:
        for identifier in self.cache.identifiers() - seen:
            self.evict(identifier)
            self.stats.evicted += 1
            block_logger(logger, identifier).debug("Evicted (no longer in document)")


__all__ = [
    "DiagramEngine",
    "FORCED_RENDERER_OPTIONS",
    "Placement",
]
