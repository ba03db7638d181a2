"""
Core task data model.

A Task is a leaf entity: it knows its own identity, description, tags and
completion state, but nothing about its siblings or children. Parent/child
relationships are plain ``parent_id`` lookups resolved by the store.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from tasktrack.utils.ids import derive_task_id


class IdSource(Enum):
    """Where a task's identifier came from."""

    DERIVED = "derived"  # content hash, shortened for display
    USER = "user"        # supplied by the user, always shown in full


@dataclass
class Task:
    """
    A single tracked item.

    Use create_task() to build new tasks; the constructor is for loading
    tasks whose identity has already been fixed.
    """

    id: str
    description: str
    id_source: IdSource = IdSource.DERIVED
    parent_id: Optional[str] = None
    timestamp: float = 0.0
    tags: List[str] = field(default_factory=list)
    completed: bool = False

    @property
    def show_full_id(self) -> bool:
        """True if the ID must never be prefix-compressed."""
        return self.id_source is IdSource.USER

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def set_description(self, description: str) -> None:
        """Replace the description. The ID is left untouched."""
        self.description = description

    def add_tag(self, tag: str) -> None:
        """Add a tag; adding an existing tag is a no-op."""
        if tag not in self.tags:
            self.tags.append(tag)

    def remove_tag(self, tag: str) -> None:
        """Remove a tag; removing a missing tag is a no-op."""
        self.tags = [t for t in self.tags if t != tag]

    def set_completed(self, completed: bool = True) -> None:
        self.completed = completed

    def toggle_completed(self) -> bool:
        """Flip the completion flag and return the new state."""
        self.completed = not self.completed
        return self.completed


def create_task(
    description: str,
    parent_id: Optional[str] = None,
    task_id: Optional[str] = None,
    timestamp: Optional[float] = None,
) -> Task:
    """
    Create a new task, deriving its ID unless one is given.

    Args:
        description: Task description
        parent_id: Full ID of the parent task, or None for a root task
        task_id: Explicit ID; stored verbatim and always displayed in full
        timestamp: Creation time (default: now)

    Returns:
        New Task
    """
    if timestamp is None:
        timestamp = time.time()

    if task_id is None:
        task_id = derive_task_id(description, timestamp)
        id_source = IdSource.DERIVED
    else:
        id_source = IdSource.USER

    return Task(
        id=task_id,
        description=description,
        id_source=id_source,
        parent_id=parent_id,
        timestamp=timestamp,
    )
