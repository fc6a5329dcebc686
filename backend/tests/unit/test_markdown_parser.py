"""Tests for markdown parsing (frontmatter, title, tags)."""

import pytest

from mdspace.components.indexer import is_markdown, normalize_tags, parse_markdown


class TestFrontmatter:
    """Frontmatter extraction."""

    def test_frontmatter_parsed(self):
        parsed = parse_markdown("---\ntitle: Hello\nauthor: Ann\n---\nBody text\n")

        assert parsed.metadata["title"] == "Hello"
        assert parsed.metadata["author"] == "Ann"
        assert parsed.body == "Body text\n"

    def test_no_frontmatter(self):
        parsed = parse_markdown("Just text\n")
        assert parsed.metadata == {"tags": []}
        assert parsed.body == "Just text\n"

    def test_invalid_yaml_ignored(self):
        parsed = parse_markdown("---\ntitle: [unclosed\n---\n# Heading\n")
        assert parsed.title == "Heading"
        assert parsed.body == "# Heading\n"

    def test_non_mapping_frontmatter_ignored(self):
        parsed = parse_markdown("---\n- a\n- b\n---\ntext\n")
        assert parsed.metadata == {"tags": []}

    def test_dates_are_json_safe(self):
        """YAML dates become strings so metadata fits a JSON column."""
        parsed = parse_markdown("---\ncreated: 2024-05-01\n---\n")
        assert parsed.metadata["created"] == "2024-05-01"

    def test_filetype_from_frontmatter(self):
        parsed = parse_markdown("---\ntype: blog\n---\n")
        assert parsed.filetype == "blog"


class TestTitle:
    """Title resolution."""

    def test_frontmatter_title_wins(self):
        parsed = parse_markdown("---\ntitle: From Meta\n---\n# From Heading\n")
        assert parsed.title == "From Meta"

    def test_first_heading_used(self):
        parsed = parse_markdown("intro\n\n## Sub\n# Main Title\n# Second\n")
        assert parsed.title == "Main Title"
        assert parsed.metadata["title"] == "Main Title"

    def test_readme_seed_title(self):
        parsed = parse_markdown("# Workspace for User alice\n\nWelcome!\n")
        assert parsed.title == "Workspace for User alice"

    def test_no_title(self):
        parsed = parse_markdown("plain text")
        assert parsed.title is None
        assert "title" not in parsed.metadata


class TestTags:
    """Tag normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, []),
            ("a, b ,c", ["a", "b", "c"]),
            (["x", "y", "x"], ["x", "y"]),
            (["", " z "], ["z"]),
            (2024, ["2024"]),
        ],
    )
    def test_normalize_tags(self, raw, expected):
        assert normalize_tags(raw) == expected

    def test_tags_from_frontmatter(self):
        parsed = parse_markdown("---\ntags: [python, web]\n---\n")
        assert parsed.tags == ["python", "web"]
        assert parsed.metadata["tags"] == ["python", "web"]


@pytest.mark.parametrize(
    "extension, expected",
    [("md", True), ("MD", True), ("mdx", True), ("txt", False), ("", False)],
)
def test_is_markdown(extension, expected):
    assert is_markdown(extension) is expected
