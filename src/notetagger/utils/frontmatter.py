"""
Read and merge the ``tags`` key of a Markdown note's YAML frontmatter.

Parsing and writing go through ``python-frontmatter``. The ``tags`` value may
be a YAML list, a single scalar (``tags: golang`` or ``tags: a, b``) or empty;
all of them are read as a list. Merged tags are written back as a flow-style
list (``tags: [a, b]``); other keys keep their order.
"""

from typing import Any, Iterable, List

import frontmatter


def _unique(tags: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first occurrences in order."""
    seen = set()
    result = []
    for tag in tags:
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def _as_tag_list(value: Any) -> List[str]:
    """Normalize a frontmatter ``tags`` value to a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items = value
    else:
        items = str(value).split(",")

    tags = []
    for item in items:
        if item is None:
            continue
        tag = str(item).strip()
        if tag:
            tags.append(tag)
    return tags


def extract_frontmatter_tags(content: str) -> List[str]:
    """
    Read the tags declared in the document's frontmatter.

    Returns:
        List of tags, empty if there is no frontmatter or no tags key

    Raises:
        yaml.YAMLError: The frontmatter block is not valid YAML
    """
    post = frontmatter.loads(content)
    return _unique(_as_tag_list(post.get("tags")))


def merge_tags_into_frontmatter(content: str, new_tags: Iterable[str]) -> str:
    """
    Add ``new_tags`` to the document's frontmatter.

    Existing tags come first, followed by the new ones; duplicates are
    removed. A document without frontmatter gets a new block holding only
    the tags.

    Args:
        content: Full document text
        new_tags: Tags to add

    Returns:
        Updated document text (unchanged if new_tags is empty)

    Raises:
        yaml.YAMLError: The existing frontmatter is not valid YAML
    """
    new_tags = list(new_tags)
    if not new_tags:
        return content

    post = frontmatter.loads(content)
    post["tags"] = _unique(_as_tag_list(post.get("tags")) + new_tags)

    updated = frontmatter.dumps(post, sort_keys=False, default_flow_style=None)
    if content.endswith("\n"):
        updated += "\n"
    return updated
