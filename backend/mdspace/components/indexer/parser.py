"""Markdown parsing for the index.

Extracts YAML frontmatter, a title and tags from a markdown document:
- title: frontmatter ``title``, otherwise the first ``# `` heading
- tags: frontmatter ``tags`` (YAML list or comma-separated string)
"""

import json
import re
from dataclasses import dataclass, field

import yaml

from mdspace.utils import get_logger

logger = get_logger(__name__)

MARKDOWN_EXTENSIONS = frozenset({"md", "mdx"})

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_HEADING_RE = re.compile(r"^#[ \t]+(.+?)[ \t#]*$", re.MULTILINE)


@dataclass
class ParsedMarkdown:
    """Result of parsing one markdown document."""

    metadata: dict = field(default_factory=dict)
    body: str = ""
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    filetype: str | None = None


def is_markdown(extension: str) -> bool:
    """Check if a file extension (without dot) is markdown."""
    return extension.lower() in MARKDOWN_EXTENSIONS


def split_frontmatter(text: str) -> tuple[dict, str]:
    """Split ``text`` into (frontmatter dict, body).

    Invalid or non-mapping frontmatter yields an empty dict; the body is
    then everything after the closing ``---``.
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring invalid frontmatter: {e}")
        return {}, body

    if not isinstance(data, dict):
        return {}, body

    # Dates and other YAML scalars must survive the JSON column
    return json.loads(json.dumps(data, default=str)), body


def normalize_tags(raw) -> list[str]:
    """Turn a frontmatter ``tags`` value into a clean, de-duplicated list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        candidates = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        candidates = [str(item) for item in raw if item is not None]
    else:
        candidates = [str(raw)]

    tags: list[str] = []
    for candidate in candidates:
        tag = candidate.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def extract_title(metadata: dict, body: str) -> str | None:
    """Frontmatter title, else the first level-1 heading."""
    title = metadata.get("title")
    if title:
        return str(title)
    match = _HEADING_RE.search(body)
    return match.group(1).strip() if match else None


def parse_markdown(text: str) -> ParsedMarkdown:
    """Parse a markdown document.

    The returned ``metadata`` always carries the resolved ``title`` and
    ``tags`` so queries can read them from one place.
    """
    metadata, body = split_frontmatter(text)
    title = extract_title(metadata, body)
    tags = normalize_tags(metadata.get("tags"))

    metadata = dict(metadata)
    if title is not None:
        metadata["title"] = title
    metadata["tags"] = tags

    filetype = metadata.get("type")
    return ParsedMarkdown(
        metadata=metadata,
        body=body,
        title=title,
        tags=tags,
        filetype=str(filetype) if filetype is not None else None,
    )
