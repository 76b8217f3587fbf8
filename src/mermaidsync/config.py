"""Engine configuration for mermaidsync.

``EngineConfig`` is an immutable dataclass validated at construction time, so
a misconfigured engine fails before it ever scans a document.

Usage:
    config = EngineConfig(container_classes=("mermaid", "diagram"), debounce_ms=150)
    engine = DiagramEngine(renderer, config)

    # From editor-plugin style options (camelCase names are accepted)
    config = EngineConfig.from_dict({"classList": "mermaid", "debounce": 500})

Thread Safety:
    Frozen dataclass. Safe to share between engines.

"""

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from mermaidsync.errors import ConfigError
from mermaidsync.highlighting import HighlightRegistrar
from mermaidsync.languages import DEFAULT_LANGUAGES

DEFAULT_TARGET_KIND = "codeBlock"
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_ERROR_CLASS = "error"

# Option names used by editor plugins, mapped to EngineConfig fields
OPTION_ALIASES: dict[str, str] = {
    "name": "target_kind",
    "targetKind": "target_kind",
    "debounce": "debounce_ms",
    "debounceDelayMs": "debounce_ms",
    "classList": "container_classes",
    "containerClasses": "container_classes",
    "mermaidConfig": "renderer_options",
    "rendererOptions": "renderer_options",
    "lowlight": "highlight_registrar",
    "highlightRegistrar": "highlight_registrar",
}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration.

    Attributes:
        container_classes: Class names applied to every container (required).
            A single string is accepted and wrapped in a tuple.
        target_kind: Host node type treated as a diagram candidate
        debounce_ms: Quiescence window before a changed block renders
        renderer_options: Passed to the renderer's ``initialize``
        highlight_registrar: Optional registry receiving the Mermaid grammar
        languages: Language aliases recognized on candidate blocks. A single
            string is accepted and wrapped in a tuple.
        error_class: Class toggled on a container whose render failed
        post_processors: Callables applied to each rendered SVG element
        evict_missing: Evict cache entries for identifiers absent from a scan
        discard_stale_renders: Drop renders superseded by a newer schedule

    """

    container_classes: tuple[str, ...] = ()
    target_kind: str = DEFAULT_TARGET_KIND
    debounce_ms: float = DEFAULT_DEBOUNCE_MS
    renderer_options: Mapping[str, Any] = field(default_factory=dict)
    highlight_registrar: HighlightRegistrar | None = None
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    error_class: str = DEFAULT_ERROR_CLASS
    post_processors: tuple[Callable[[Any], None], ...] = ()
    evict_missing: bool = False
    discard_stale_renders: bool = False

    def __post_init__(self) -> None:
        # Frozen: normalize through object.__setattr__
        classes = _class_names("container_classes", self.container_classes)
        if not classes:
            raise ConfigError("container_classes", "at least one class name is required")
        object.__setattr__(self, "container_classes", classes)

        if not isinstance(self.target_kind, str) or not self.target_kind:
            raise ConfigError("target_kind", "must be a non-empty string")

        if isinstance(self.debounce_ms, bool) or not isinstance(self.debounce_ms, int | float):
            raise ConfigError("debounce_ms", f"must be a number, got {self.debounce_ms!r}")
        if not math.isfinite(self.debounce_ms) or self.debounce_ms < 0:
            raise ConfigError(
                "debounce_ms", f"must be a finite number >= 0, got {self.debounce_ms}"
            )

        if not isinstance(self.renderer_options, Mapping):
            raise ConfigError("renderer_options", "must be a mapping")
        object.__setattr__(self, "renderer_options", MappingProxyType(dict(self.renderer_options)))

        if self.highlight_registrar is not None and not isinstance(
            self.highlight_registrar, HighlightRegistrar
        ):
            raise ConfigError(
                "highlight_registrar", "must define register() and register_alias()"
            )

        # A bare string is one alias, not a sequence of characters
        if isinstance(self.languages, str):
            languages: tuple[Any, ...] = (self.languages,)
        else:
            languages = tuple(self.languages)
        if not languages or not all(isinstance(lang, str) and lang for lang in languages):
            raise ConfigError("languages", "must contain at least one non-empty string")
        object.__setattr__(self, "languages", languages)

        error_class = _class_names("error_class", self.error_class)
        if len(error_class) != 1:
            raise ConfigError("error_class", "must be a single class name")

        processors = tuple(self.post_processors)
        for processor in processors:
            if not callable(processor):
                raise ConfigError("post_processors", f"{processor!r} is not callable")
        object.__setattr__(self, "post_processors", processors)

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "EngineConfig":
        """Create EngineConfig from a dictionary.

        Accepts field names and the camelCase option names used by editor
        plugins (``name``, ``debounce``, ``classList``, ``mermaidConfig``,
        ``lowlight``...). Unknown keys are silently ignored.

        Example:
            >>> config = EngineConfig.from_dict({
            ...     "classList": ["mermaid"],
            ...     "debounce": 500,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.debounce_ms
            500

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered: dict[str, Any] = {}
        for key, value in config_dict.items():
            name = OPTION_ALIASES.get(key, key)
            if name in valid_fields:
                filtered[name] = value
        return cls(**filtered)


def _class_names(option: str, value: str | Iterable[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        names: tuple[Any, ...] = (value,)
    elif isinstance(value, Iterable):
        names = tuple(value)
    else:
        raise ConfigError(option, f"expected a string or iterable of strings, got {value!r}")
    for name in names:
        if not isinstance(name, str) or not name or any(ch.isspace() for ch in name):
            raise ConfigError(option, f"invalid class name {name!r}")
    return tuple(dict.fromkeys(names))


__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_ERROR_CLASS",
    "DEFAULT_TARGET_KIND",
    "EngineConfig",
    "OPTION_ALIASES",
]
