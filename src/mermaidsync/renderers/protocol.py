"""DiagramRenderer protocol: interface to external diagram renderers.

Any object with ``async render(identifier, source) -> RenderResult`` conforms.
A bare async function with the same signature is accepted too.

Example:
    from mermaidsync.renderers.protocol import RenderResult

    async def fake_render(identifier: str, source: str) -> RenderResult:
        return RenderResult(svg="<svg xmlns='http://www.w3.org/2000/svg'/>")

    engine = DiagramEngine(fake_render, EngineConfig(container_classes="mermaid"))

"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of one render.

    Attributes:
        svg: SVG markup of the rendered diagram.

    """

    svg: str


@runtime_checkable
class DiagramRenderer(Protocol):
    """Protocol for diagram renderers.

    Contract:
        - ``render`` MAY raise; the engine reports the failure on the
          block's container and never propagates it.
        - ``identifier`` is a stable per-block key; renderers that cache
          results should key them with it.
    """

    async def render(self, identifier: str, source: str) -> RenderResult:
        """Render diagram source.

        Args:
            identifier: Stable block identifier (de-duplication key).
            source: Diagram source text.

        Returns:
            RenderResult with SVG markup.

        """
        ...


# Simple async-function renderers
RenderFunction = Callable[[str, str], Awaitable[RenderResult]]


def render_with(
    renderer: DiagramRenderer | RenderFunction,
    identifier: str,
    source: str,
) -> Awaitable[RenderResult]:
    """Invoke a protocol renderer or a bare async function."""
    if hasattr(renderer, "render") and callable(renderer.render):
        return renderer.render(identifier, source)
    if callable(renderer):
        return renderer(identifier, source)
    msg = f"Renderer {renderer!r} is neither a DiagramRenderer nor callable"
    raise TypeError(msg)


def initialize_renderer(
    renderer: DiagramRenderer | RenderFunction,
    options: Mapping[str, Any],
) -> bool:
    """Pass initialization options to ``renderer`` if it accepts them.

    Returns:
        True if the renderer defines ``initialize`` and it was called.

    """
    initialize = getattr(renderer, "initialize", None)
    if initialize is None or not callable(initialize):
        return False
    initialize(dict(options))
    return True


__all__ = [
    "DiagramRenderer",
    "RenderFunction",
    "RenderResult",
    "initialize_renderer",
    "render_with",
]
