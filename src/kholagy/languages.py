"""Language-code normalization shared by the resolvers."""

from __future__ import annotations

BASE_LANGUAGE = "en"
INTERFACE_LANGUAGES = ("ar", "en", "ru")


def normalize_language(code: str | None, default: str = BASE_LANGUAGE) -> str:
    """Reduce a locale tag to the interface language it belongs to.

    ``"ar-EG"`` → ``"ar"``, ``"RU"`` → ``"ru"``. Codes outside the interface
    set are lowercased and kept (``"cop"``, ``"arcop"``); empty input gives
    ``default``.
    """
    if not code or not code.strip():
        return default
    lowered = code.strip().lower().replace("_", "-")
    for language in INTERFACE_LANGUAGES:
        if lowered == language or lowered.startswith(f"{language}-"):
            return language
    return lowered


def fallback_chain(preferred: str | None, default: str = BASE_LANGUAGE) -> list[str]:
    """Return ``[preferred, default]`` without duplicates, preferred first."""
    chain = [normalize_language(preferred, default)]
    if default not in chain:
        chain.append(default)
    return chain
