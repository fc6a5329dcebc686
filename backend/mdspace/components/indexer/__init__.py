"""Markdown Index Module.

Indexes the markdown content of workspace folders and answers folder/tag
queries over it.

Components:
- models.py: IndexedFile query result model
- parser.py: frontmatter, title and tag extraction
- index.py: MarkdownIndex (SQLAlchemy/SQLite) and IndexerProtocol

Usage:
    from mdspace.components.indexer import MarkdownIndex

    index = MarkdownIndex("sqlite:///workspaces.db")
    index.init()
    index.index_folder(workspace_root, folder="user-alice")
    files = index.get_files(folder="user-alice", tags=["draft"])
    index.shutdown()
"""

from mdspace.components.indexer.index import (
    IndexerProtocol,
    MarkdownIndex,
    compute_url_path,
    make_file_id,
)
from mdspace.components.indexer.models import IndexedFile
from mdspace.components.indexer.parser import (
    ParsedMarkdown,
    is_markdown,
    normalize_tags,
    parse_markdown,
)

__all__ = [
    "MarkdownIndex",
    "IndexerProtocol",
    "IndexedFile",
    "ParsedMarkdown",
    "parse_markdown",
    "normalize_tags",
    "is_markdown",
    "compute_url_path",
    "make_file_id",
]
