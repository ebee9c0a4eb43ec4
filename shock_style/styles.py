"""Style catalog: the immutable style id to modifier mapping.

The catalog is process-wide configuration, built once and injected into the
prompt composer. Unknown ids resolve to an empty modifier.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from loguru import logger
from pydantic import TypeAdapter

from .exceptions import ConfigurationError
from .schema import StyleDefinition
from .settings import get_settings
from .shard.style_vocabulary import BUILTIN_STYLES

_STYLE_LIST = TypeAdapter(list[StyleDefinition])


class StyleCatalog(Mapping[str, str]):
    """Read-only mapping of style id to modifier text."""

    def __init__(self, definitions: Iterable[StyleDefinition]):
        styles: dict[str, StyleDefinition] = {}
        for definition in definitions:
            if definition.id in styles:
                raise ConfigurationError(f"Duplicate style id: {definition.id}")
            styles[definition.id] = definition
        self._styles = MappingProxyType(styles)

    # Mapping protocol
    def __getitem__(self, style_id: str) -> str:
        return self._styles[style_id].modifier_text

    def __iter__(self) -> Iterator[str]:
        return iter(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    def __repr__(self) -> str:
        return f"StyleCatalog({list(self._styles)})"

    def modifier_for(self, style_id: str) -> str:
        """Return the modifier for ``style_id``, or an empty string when unknown."""
        definition = self._styles.get(style_id)
        return definition.modifier_text if definition else ""

    def definition(self, style_id: str) -> StyleDefinition | None:
        return self._styles.get(style_id)

    @property
    def definitions(self) -> list[StyleDefinition]:
        return list(self._styles.values())

    @classmethod
    def from_mapping(cls, modifiers: Mapping[str, str]) -> StyleCatalog:
        return cls(StyleDefinition(id=k, modifier_text=v) for k, v in modifiers.items())

    @classmethod
    def builtin(cls) -> StyleCatalog:
        return cls(StyleDefinition(id=sid, name=name, modifier_text=modifier) for sid, name, modifier in BUILTIN_STYLES)

    @classmethod
    def from_file(cls, path: str | Path) -> StyleCatalog:
        """Load a catalog from a JSON list of ``{"id", "name", "modifier"}`` objects."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            definitions = _STYLE_LIST.validate_python(raw)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load styles from {path}: {e}") from e
        return cls(definitions)


@lru_cache
def default_style_catalog() -> StyleCatalog:
    """Return the process-wide catalog, loading ``STYLES_FILE`` when configured."""
    styles_file = get_settings().styles_file
    if styles_file:
        catalog = StyleCatalog.from_file(styles_file)
        logger.info(f"Loaded {len(catalog)} styles from {styles_file}")
        return catalog
    return StyleCatalog.builtin()


__all__ = ["StyleCatalog", "default_style_catalog"]
