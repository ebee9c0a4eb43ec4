from __future__ import annotations

# User-facing notice texts keyed by situation. Each entry is (title, message).
# Hosts render these however they like; keep them short and actionable.
NOTICE_TEXTS: dict[str, tuple[str, str]] = {
    "missing_prompt": ("Missing Prompt", "Please enter a prompt to generate an image."),
    "missing_style": ("Missing Style", "Please select a style for your image."),
    "prompt_too_long": ("Prompt Too Long", "Please shorten your prompt to {limit} characters or fewer."),
    "camera_permission": ("Permission Required", "Please grant permission to access your camera."),
    "library_permission": ("Permission Required", "Please grant permission to access your photos."),
    "camera_failed": ("Error", "Failed to take a photo"),
    "library_failed": ("Error", "Failed to pick an image"),
    "encoding_failed": ("Error", "Failed to prepare the selected image"),
    # Message is filled with the provider's human-readable error.
    "generation_failed": ("Generation Failed", "{message}"),
}


__all__ = ["NOTICE_TEXTS"]
