"""SVG markup helpers.

Renderers return SVG as markup; the pipeline parses it into an
``ElementTree.Element`` before placing it in a container so post-processors
can work on a tree instead of a string.
"""

from __future__ import annotations

from xml.etree import ElementTree

from mermaidsync.errors import RenderError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialize without ns0: prefixes
ElementTree.register_namespace("", SVG_NS)
ElementTree.register_namespace("xlink", XLINK_NS)


def parse_svg(markup: str) -> ElementTree.Element:
    """Parse SVG markup into an element tree.

    Args:
        markup: SVG document text (an XML declaration is allowed)

    Returns:
        The root ``<svg>`` element

    Raises:
        RenderError: If the markup is not well-formed XML or its root is
            not an ``svg`` element

    """
    try:
        root = ElementTree.fromstring(markup.strip())
    except ElementTree.ParseError as exc:
        raise RenderError("Invalid SVG markup", details=str(exc)) from exc

    if _local_name(root.tag) != "svg":
        raise RenderError(f"Expected <svg> root element, got <{_local_name(root.tag)}>")
    return root


def strip_fixed_size(svg: ElementTree.Element) -> None:
    """Drop fixed ``width``/``height`` so the diagram scales with its container.

    Keeps ``viewBox`` so the aspect ratio is preserved. Meant to be passed in
    ``EngineConfig.post_processors``.
    """
    for attr in ("width", "height"):
        svg.attrib.pop(attr, None)
    style = svg.get("style")
    if style:
        kept = [
            rule
            for rule in (part.strip() for part in style.split(";"))
            if rule and not rule.lower().startswith("max-width")
        ]
        if kept:
            svg.set("style", "; ".join(kept))
        else:
            del svg.attrib["style"]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


__all__ = [
    "SVG_NS",
    "XLINK_NS",
    "parse_svg",
    "strip_fixed_size",
]
