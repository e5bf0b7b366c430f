"""
Query normalization for full-text search.

Turns a free-text query into prefix-wildcarded FTS5 terms.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")

PREFIX_WILDCARD = "*"


def tokenize_query(raw: str | None) -> list[str]:
    """
    Split a raw query into normalized prefix tokens.

    Lower-cases the input, splits on whitespace runs, strips every character
    outside [a-z0-9] from each piece and appends a prefix wildcard to each
    non-empty result. No stopwords are removed and order is preserved.

    Args:
        raw: Raw query string from the caller

    Returns:
        Ordered list of tokens such as ["graph*", "bfs*"]; empty when the
        query holds nothing searchable.
    """
    if not raw:
        return []

    tokens = []
    for piece in raw.lower().split():
        cleaned = _NON_ALNUM.sub("", piece)
        if cleaned:
            tokens.append(f"{cleaned}{PREFIX_WILDCARD}")

    return tokens


def build_match_expression(tokens: list[str]) -> str:
    """Join tokens into an FTS5 MATCH expression (implicit AND)."""
    return " ".join(tokens)
