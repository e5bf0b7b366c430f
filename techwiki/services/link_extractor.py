"""
Internal cross-reference extraction from article Markdown.

Finds links of the form [text](/wiki/<category>/<slug>) so the graph
builder can turn them into cross edges. Extraction is best effort:
anything that does not fit the pattern is skipped, never reported.
"""

import re
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import unquote


@dataclass(frozen=True)
class InternalLink:
    """A (category, slug) pair referenced from article content."""

    category: str
    slug: str

    @property
    def key(self) -> str:
        return f"{self.category}:{self.slug}"


class LinkExtractor(Protocol):
    """Callable that pulls internal links out of Markdown."""

    def __call__(self, markdown: str | None) -> list[InternalLink]: ...


# Exactly two path segments. A fragment, query string or title may follow
# the slug and is ignored; deeper paths do not match.
_INTERNAL_LINK = re.compile(
    r"\[[^\]]*\]\(\s*/wiki/([^/)#?\s]+)/([^/)#?\s]+)(?:[#?\s][^)]*)?\)",
    re.IGNORECASE,
)


def extract_links(markdown: str | None) -> list[InternalLink]:
    """
    Extract internal article links in encounter order.

    Both segments are percent-decoded and lower-cased. Duplicates are kept;
    de-duplication is the caller's job.

    Args:
        markdown: Article body

    Returns:
        List of InternalLink, empty when nothing matches
    """
    if not markdown:
        return []

    links = []
    for match in _INTERNAL_LINK.finditer(markdown):
        category = unquote(match.group(1)).strip().lower()
        slug = unquote(match.group(2)).strip().lower()
        if category and slug:
            links.append(InternalLink(category=category, slug=slug))

    return links
