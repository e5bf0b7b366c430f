"""
Slug helpers shared by the article store and the graph builder.
"""

import re


def slugify(value: str) -> str:
    """
    Convert a topic or category into a URL slug.

    Symbols that matter for programming topics are spelled out first so
    "C++" and "C#" keep distinct slugs ("c-plus-plus", "c-sharp").
    """
    slug = value.strip().lower()
    slug = slug.replace("++", " plus plus ")
    slug = slug.replace("+", " plus ")
    slug = slug.replace("#", " sharp ")
    slug = slug.replace("&", " and ")
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def title_from_slug(slug: str) -> str:
    """Turn a slug back into a display title, e.g. "c-plus-plus" -> "C++"."""
    parts = [part for part in slug.split("-") if part]
    words: list[str] = []

    i = 0
    while i < len(parts):
        part = parts[i]

        if part == "plus":
            doubled = i + 1 < len(parts) and parts[i + 1] == "plus"
            suffix = "++" if doubled else "+"
            if words:
                words[-1] += suffix
            else:
                words.append(suffix)
            i += 2 if doubled else 1
            continue

        if part == "sharp":
            if words:
                words[-1] += "#"
            else:
                words.append("#")
            i += 1
            continue

        words.append(part[:1].upper() + part[1:])
        i += 1

    return " ".join(words)
