"""Built-in style vocabulary.

Each entry maps a style id to its display name and the modifier text appended
to user prompts. Loaded once into a ``StyleCatalog``; hosts can replace the
whole table with a JSON file (see ``Settings.styles_file``).
"""

from __future__ import annotations

from typing import Final

BUILTIN_STYLES: Final[tuple[tuple[str, str, str], ...]] = (
    # (id, display name, modifier text)
    ("anime", "Anime", "in anime style, vibrant colors, exaggerated features, anime aesthetic"),
    ("meme", "Meme", "humorous, bold text overlay, simplistic art, meme format, internet culture"),
    ("a24", "A24", "dramatic lighting, cinematic composition, indie film aesthetic, A24 movie poster style"),
    ("cyberpunk", "Cyberpunk", "cyberpunk style, neon lights, dystopian future, technological, high contrast"),
    ("vaporwave", "Vaporwave", "vaporwave aesthetic, retro, pastel colors, 80s and 90s nostalgia, digital surrealism"),
)


__all__ = ["BUILTIN_STYLES"]
