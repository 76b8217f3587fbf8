"""Exception classes for mermaidsync.

Rendering failures never escape the engine: the render pipeline catches them
and turns them into an error state on the affected container. Configuration
errors are raised eagerly when an engine is constructed.
"""

from __future__ import annotations


class MermaidSyncError(Exception):
    """Base exception for all mermaidsync errors.

    Subclass this for specific error categories.
    """

    pass


class ConfigError(MermaidSyncError):
    """Invalid engine configuration.

    Raised at construction time, before any scan runs.
    """

    def __init__(self, option: str, message: str) -> None:
        """Initialize configuration error.

        Args:
            option: Name of the offending option (e.g., "container_classes")
            message: Description of the problem
        """
        self.option = option
        super().__init__(f"Invalid option '{option}': {message}")


class RenderError(MermaidSyncError):
    """Error while turning diagram source into a visual artifact.

    Raised by bundled renderers and SVG parsing. The render pipeline
    catches it and reports it on the block's container.
    """

    def __init__(
        self,
        message: str,
        identifier: str | None = None,
        details: str | None = None,
    ) -> None:
        """Initialize render error.

        Args:
            message: Short description of the failure
            identifier: Block identifier being rendered (optional)
            details: Extra diagnostic output, e.g. renderer stderr (optional)
        """
        self.message = message
        self.identifier = identifier
        self.details = details

        text = message
        if details:
            text = f"{message}: {details}"
        super().__init__(text)
