"""
Tests for slug helpers.
"""

import pytest

from techwiki.services.slug_utils import slugify, title_from_slug


class TestSlugify:
    """Tests for slugify()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Binary Search", "binary-search"),
            ("C++", "c-plus-plus"),
            ("C#", "c-sharp"),
            ("Q&A Systems", "q-and-a-systems"),
            ("  Graph   Neural -- Networks ", "graph-neural-networks"),
            ("Node.js", "node-js"),
        ],
    )
    def test_slugify(self, value, expected):
        """Test slug generation for common topic names."""
        assert slugify(value) == expected

    def test_symbols_only(self):
        """Test that a value with nothing sluggable gives an empty slug."""
        assert slugify("!!!") == ""


class TestTitleFromSlug:
    """Tests for title_from_slug()."""

    @pytest.mark.parametrize(
        ("slug", "expected"),
        [
            ("dsa", "Dsa"),
            ("machine-learning", "Machine Learning"),
            ("c-plus-plus", "C++"),
            ("c-sharp", "C#"),
            ("", ""),
        ],
    )
    def test_title_from_slug(self, slug, expected):
        """Test display titles derived from slugs."""
        assert title_from_slug(slug) == expected
