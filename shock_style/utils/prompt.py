from __future__ import annotations

from collections.abc import Mapping

import jinja2

from ..shard import constants as C
from ..styles import default_style_catalog, StyleCatalog

# ---------------------------------------------------------------------------
# Jinja2 template joining the prompt fragments
# ---------------------------------------------------------------------------

# Rendered shape: "<prompt>[, <modifier>], <quality>[, <extra>]"
_COMPOSE_TEMPLATE = jinja2.Environment(
    autoescape=False,
    keep_trailing_newline=False,
).from_string("{{ prompt }}{% if modifier %}{{ sep }}{{ modifier }}{% endif %}{{ sep }}{{ quality }}{% if extra %}{{ sep }}{{ extra }}{% endif %}")


def clean_prompt(user_prompt: str) -> str:
    """Trim whitespace and drop any trailing run of commas and periods."""
    return user_prompt.strip().rstrip(C.TRAILING_PUNCTUATION)


class PromptComposer:
    """Builds the final generation prompt from user text and a style.

    Pure and deterministic: the only input besides the arguments is the
    injected style catalog, which is immutable.
    """

    def __init__(self, catalog: StyleCatalog | Mapping[str, str] | None = None, *, quality_clause: str = C.QUALITY_CLAUSE):
        if catalog is None:
            catalog = default_style_catalog()
        elif not isinstance(catalog, StyleCatalog):
            catalog = StyleCatalog.from_mapping(catalog)
        self._catalog = catalog
        self._quality_clause = quality_clause

    @property
    def catalog(self) -> StyleCatalog:
        return self._catalog

    def apply_style(self, style_id: str, user_prompt: str) -> str:
        """Return the cleaned prompt with the style modifier appended, if any."""
        cleaned = clean_prompt(user_prompt)
        modifier = self._catalog.modifier_for(style_id)
        if not modifier:
            return cleaned
        return f"{cleaned}{C.FRAGMENT_SEPARATOR}{modifier}"

    def compose(self, style_id: str, user_prompt: str, additional_instructions: str | None = None) -> str:
        """Compose the final prompt: styled prompt, quality boosters, extra instructions.

        A prompt that is empty after cleaning still yields a string, starting
        with the separator (callers validate prompts before composing).
        """
        return _COMPOSE_TEMPLATE.render(
            prompt=clean_prompt(user_prompt),
            modifier=self._catalog.modifier_for(style_id),
            quality=self._quality_clause,
            extra=additional_instructions,
            sep=C.FRAGMENT_SEPARATOR,
        )


def compose_prompt(style_id: str, user_prompt: str, additional_instructions: str | None = None) -> str:
    """Compose with the process-wide style catalog."""
    return PromptComposer().compose(style_id, user_prompt, additional_instructions)


__all__ = [
    "clean_prompt",
    "PromptComposer",
    "compose_prompt",
]
