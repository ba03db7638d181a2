"""
Task ID utilities.

Derived IDs are content addressed: a SHA-1 digest over the description and
the creation timestamp. For display, every ID is shortened to the shortest
prefix that no other ID in the store starts with.
"""

import hashlib
from typing import Dict, Iterable, List, Tuple


def format_timestamp(timestamp: float) -> str:
    """Stringify a timestamp the same way every time it is hashed."""
    return repr(float(timestamp))


def derive_task_id(description: str, timestamp: float) -> str:
    """
    Derive a content-addressed task ID.

    Args:
        description: Task description
        timestamp: Creation time in seconds since the epoch

    Returns:
        Full 40 character lowercase hex digest
    """
    hasher = hashlib.sha1()
    hasher.update(description.encode("utf-8"))
    hasher.update(format_timestamp(timestamp).encode("utf-8"))
    return hasher.hexdigest()


def shortest_unique_prefix(task_id: str, others: Iterable[str]) -> str:
    """
    Find the shortest prefix of ``task_id`` that no ID in ``others`` starts with.

    Grows one character at a time. If even the full ID is a prefix of (or
    equal to) another ID, the full ID is returned.
    """
    others = list(others)
    length = 1
    while length < len(task_id):
        prefix = task_id[:length]
        if not any(other.startswith(prefix) for other in others):
            return prefix
        length += 1
    return task_id


def compute_prefixes(entries: List[Tuple[str, bool]]) -> Tuple[Dict[str, str], int]:
    """
    Compute display prefixes for a list of task IDs.

    Quadratic in the number of tasks: every candidate prefix is checked
    against every other ID.

    Args:
        entries: ``(task_id, show_full_id)`` pairs in store order

    Returns:
        Tuple of (prefixes, max_len)
        - prefixes: full ID -> display prefix
        - max_len: longest display prefix length (at least 1)
    """
    prefixes: Dict[str, str] = {}
    max_len = 1
    for pos, (task_id, show_full_id) in enumerate(entries):
        if show_full_id:
            prefix = task_id
        else:
            others = (other for pos2, (other, _) in enumerate(entries) if pos2 != pos)
            prefix = shortest_unique_prefix(task_id, others)
        max_len = max(max_len, len(prefix))
        prefixes[task_id] = prefix
    return prefixes, max_len
