"""ASCII normalization and slug helpers for drafted articles."""

import re
import unicodedata

# Applied in order, before any remaining non-ASCII is stripped.
ASCII_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("\u2018", "'"),  # left single quote
    ("\u2019", "'"),  # right single quote
    ("\u201A", "'"),  # single low-9 quote
    ("\u201B", "'"),  # single high-reversed-9 quote
    ("\u2032", "'"),  # prime
    ("\u201C", '"'),  # left double quote
    ("\u201D", '"'),  # right double quote
    ("\u201E", '"'),  # double low-9 quote
    ("\u201F", '"'),  # double high-reversed-9 quote
    ("\u2033", '"'),  # double prime
    ("\u00AB", '"'),  # left guillemet
    ("\u00BB", '"'),  # right guillemet
    ("\u2010", "-"),  # hyphen
    ("\u2011", "-"),  # non-breaking hyphen
    ("\u2012", "-"),  # figure dash
    ("\u2013", "-"),  # en dash
    ("\u2014", "-"),  # em dash
    ("\u2015", "-"),  # horizontal bar
    ("\u2212", "-"),  # minus sign
    ("\u2022", "*"),  # bullet
    ("\u2023", "*"),  # triangular bullet
    ("\u25E6", "*"),  # white bullet
    ("\u2043", "*"),  # hyphen bullet
    ("\u00B7", "*"),  # middle dot
    ("\u2026", "..."),  # ellipsis
    ("\u00A0", " "),  # no-break space
    ("\u202F", " "),  # narrow no-break space
    ("\u2007", " "),  # figure space
    ("\u2009", " "),  # thin space
    ("\u200A", " "),  # hair space
    ("\u2002", " "),  # en space
    ("\u2003", " "),  # em space
    ("\u00D7", "x"),  # multiplication sign
    ("\u00F7", "/"),  # division sign
    ("\u2122", "(TM)"),
    ("\u00AE", "(R)"),
    ("\u00A9", "(C)"),
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def to_ascii(text: str) -> str:
    """Convert text to plain ASCII.

    Known punctuation and symbols are mapped to ASCII equivalents; anything
    else outside ASCII is deleted. Newlines and tabs are kept.

    Args:
        text: Text that may contain Unicode punctuation

    Returns:
        ASCII-only text
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFC", text)
    for source, replacement in ASCII_SUBSTITUTIONS:
        text = text.replace(source, replacement)

    text = _CONTROL_CHARS.sub("", text)
    return _NON_ASCII.sub("", text)


def slugify(text: str) -> str:
    """Derive a URL-safe slug from a title."""
    slug = _SLUG_SEPARATORS.sub("-", (text or "").lower())
    return slug.strip("-")
