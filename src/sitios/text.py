"""Text helpers for page paths and listings."""

from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

_slugify_lower = _md_slugify(case="lower", separator="-")

SUMMARY_LENGTH = 160


def slugify(text: str, max_len: int = 60, *, fallback: str = "page") -> str:
    """Turn a title into a path segment.

    Accents are transliterated to ASCII, so ``"Ação rápida"`` becomes
    ``"acao-rapida"``. Titles with nothing usable left map to ``fallback``.
    """
    ascii_text = normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = _slugify_lower(ascii_text, sep="-")[:max_len].rstrip("-")
    return slug or fallback


def summarize(text: str, limit: int = SUMMARY_LENGTH) -> str:
    """First paragraph of ``text`` on one line, cut to ``limit`` characters."""
    first = (text or "").strip().split("\n\n", 1)[0].replace("\n", " ")
    if len(first) <= limit:
        return first
    return first[: limit - 1].rstrip() + "…"


__all__ = ["slugify", "summarize"]
