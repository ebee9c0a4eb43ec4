"""Project constants for prompt composition, image acquisition and requests.

This module centralizes the fixed vocabulary and numeric bounds shared by the
composer, the acquisition pipeline and the request orchestrator. Keep these
values provider-agnostic; transport-specific details belong in the individual
generation clients.
"""

from __future__ import annotations

from typing import Final

# ----------------------------- Prompt composition ---------------------------- #

# Quality boosters appended to every composed prompt.
QUALITY_CLAUSE: Final[str] = "high quality, detailed, 4K"

# Separator used between prompt fragments (user text, modifier, boosters).
FRAGMENT_SEPARATOR: Final[str] = ", "

# Characters stripped from the end of the user prompt before composition.
TRAILING_PUNCTUATION: Final[str] = ",."

# Upper bound on raw prompt length accepted at submission time.
MAX_PROMPT_LENGTH: Final[int] = 500

# ----------------------------- Image acquisition ----------------------------- #

# Capture/selection sources are asked for a square crop at this quality.
SQUARE_ASPECT: Final[tuple[int, int]] = (1, 1)
DEFAULT_SOURCE_QUALITY: Final[float] = 0.8

# Normalization bounds applied to every acquired image before encoding.
DEFAULT_MAX_WIDTH: Final[int] = 1024
DEFAULT_COMPRESSION: Final[float] = 0.8
NORMALIZED_FORMAT: Final[str] = "JPEG"

# Normalized images are JPEG; also used when a MIME type cannot be guessed.
DEFAULT_MIME: Final[str] = "image/jpeg"

# Prefix for working directories created when none is configured.
WORKDIR_PREFIX: Final[str] = "shock_style_"

# ---------------------------------- Requests --------------------------------- #

# Default transport timeout (seconds) for HTTP generation endpoints.
DEFAULT_GENERATION_TIMEOUT: Final[float] = 120.0

# General error codes used across clients
ERROR_CODE_VALIDATION: Final[str] = "validation_error"
ERROR_CODE_PROVIDER_ERROR: Final[str] = "provider_error"
ERROR_CODE_PROVIDER_UNAVAILABLE: Final[str] = "provider_unavailable"
ERROR_CODE_NO_IMAGE: Final[str] = "no_image_generated"
