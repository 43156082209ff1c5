"""Utility modules for frontmatter updates and CSV reports."""

from .frontmatter import (
    extract_frontmatter_tags,
    merge_tags_into_frontmatter,
)
from .tag_report import (
    DocumentTags,
    is_empty_value,
    load_existing_tags,
    write_tag_report,
)

__all__ = [
    "extract_frontmatter_tags",
    "merge_tags_into_frontmatter",
    "DocumentTags",
    "is_empty_value",
    "load_existing_tags",
    "write_tag_report",
]
