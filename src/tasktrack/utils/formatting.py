"""
Canonical console rendering for task lines.

This module is the single source of truth for how tags, completion markers
and tree branches are drawn in the listing view.
"""

from typing import List

# Tree glyphs
ROOT_INDENT = "│"
BRANCH_MID = "├─ "
BRANCH_LAST = "└─ "
INDENT_MID = "  │"
INDENT_LAST = "   │"

DONE_MARKER = "✓ "

# The persisted line format splits on the first '|'
FIELD_SEPARATOR = "|"
SEPARATOR_SUBSTITUTE = "¦"


def render_tags(tags: List[str]) -> str:
    """
    Render tags as a bracketed list with a trailing space.

    Args:
        tags: Tag names

    Returns:
        e.g. "[home] [urgent] ", or empty string if no tags
    """
    return "".join(f"[{tag}] " for tag in tags)


def branch_prefix(indent: str, last: bool) -> str:
    """Connector for an item drawn at ``indent``."""
    return indent[:-1] + (BRANCH_LAST if last else BRANCH_MID)


def child_indent(indent: str, last: bool) -> str:
    """Indent handed down to the children of an item drawn at ``indent``."""
    if last:
        return indent[:-1] + INDENT_LAST
    return indent + INDENT_MID


def format_tree_line(indent: str, last: bool, prefix: str, tags: List[str],
                     description: str, completed: bool = False) -> str:
    """
    Format one task line of the tree view.

    Args:
        indent: Current indent string (ends in the parent's vertical bar)
        last: True if this is the last sibling at its depth
        prefix: Display ID (possibly padded)
        tags: Tag names
        description: Task description
        completed: Adds the done marker before the description

    Returns:
        e.g. "├─ a3: [home] Buy milk"
    """
    marker = DONE_MARKER if completed else ""
    return f"{branch_prefix(indent, last)}{prefix}: {render_tags(tags)}{marker}{description}"


def clean_description(text: str) -> str:
    """
    Flatten a description into a single storable line.

    Embedded newlines are removed (lines are joined with a single space) and
    the record field separator is replaced so the line stays parseable.
    """
    parts = [line.strip() for line in text.splitlines()]
    flat = " ".join(part for part in parts if part)
    return flat.replace(FIELD_SEPARATOR, SEPARATOR_SUBSTITUTE)
