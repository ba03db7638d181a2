"""
The task store.

Design:
    Primary store: List[Task]        (insertion / load order)
    Prefix index:  Dict[str, str]    (full id -> shortest unique prefix)

The prefix index is a pure cache of the task list. It is rebuilt in full by
compute_prefixes() after every mutation that adds or removes tasks; it is
never patched incrementally and never persisted.

Parent/child relationships are not stored as object references. Children
are found on demand by scanning for tasks whose parent_id matches.

Every operation runs all of its checks before touching the task list, so a
failing operation leaves the store exactly as it was.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set

from tasktrack.errors import (
    AmbiguousPrefixError,
    BadParentPrefixError,
    BadPrefixError,
    DuplicateTaskError,
    RemoveHasChildrenError,
    TaskStoreError,
)
from tasktrack.models.task import Task, create_task
from tasktrack.parsers.store_file import read_file, write_file
from tasktrack.utils.formatting import ROOT_INDENT, child_indent, clean_description, format_tree_line
from tasktrack.utils.ids import compute_prefixes

log = logging.getLogger(__name__)


class TaskStore:
    """An ordered collection of tasks backed by one file."""

    def __init__(self, tasks: Optional[Iterable[Task]] = None, file_path: Optional[Path] = None):
        self.file_path = file_path
        self._tasks: List[Task] = []
        self._prefixes: Dict[str, str] = {}
        self._prefix_max_len = 1

        seen: Set[str] = set()
        for task in tasks or []:
            if task.id in seen:
                raise DuplicateTaskError(f"A task with id '{task.id}' already exists.")
            seen.add(task.id)
            self._tasks.append(task)

        self.compute_prefixes()

    # ------------------------------------------------------------------
    # Loading / saving
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, file_path: Path) -> "TaskStore":
        """Load a store from a file. A missing or empty file gives an empty store."""
        file_path = Path(file_path)
        return cls(read_file(file_path), file_path=file_path)

    def save(self, file_path: Optional[Path] = None) -> None:
        """Write the store back to its file (or to ``file_path``), sorted by id."""
        target = Path(file_path) if file_path is not None else self.file_path
        if target is None:
            raise ValueError("TaskStore has no file path to save to")
        write_file(target, self._tasks)
        log.info("Saved %d task(s) to %s", len(self._tasks), target)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> List[Task]:
        """Tasks in insertion order. The returned list is a copy."""
        return list(self._tasks)

    @property
    def prefixes(self) -> Dict[str, str]:
        return dict(self._prefixes)

    @property
    def prefix_max_len(self) -> int:
        return self._prefix_max_len

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self._tasks)

    def display_id(self, task: Task) -> str:
        """Shortest unique prefix for a task (full id for user-assigned ids)."""
        return self._prefixes.get(task.id, task.id)

    def compute_prefixes(self) -> None:
        """Rebuild the prefix index from the current task list."""
        self._prefixes, self._prefix_max_len = compute_prefixes(
            [(task.id, task.show_full_id) for task in self._tasks]
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_id(self, prefix: str) -> str:
        """
        Resolve a user-supplied prefix to a full task id.

        An exact full-id match always wins, even when the string is also a
        prefix of other ids.

        Raises:
            AmbiguousPrefixError: more than one id starts with ``prefix``
            BadPrefixError: no id starts with ``prefix``
        """
        if not prefix:
            raise BadPrefixError()

        matches = []
        for task in self._tasks:
            if task.id == prefix:
                return task.id
            if task.id.startswith(prefix):
                matches.append(task.id)

        if len(matches) > 1:
            raise AmbiguousPrefixError(f"Prefix '{prefix}' matches more than one task.")
        if not matches:
            raise BadPrefixError(f"Prefix '{prefix}' matches no tasks.")
        return matches[0]

    def _find(self, full_id: str) -> Task:
        for task in self._tasks:
            if task.id == full_id:
                return task
        raise BadPrefixError(f"Prefix '{full_id}' matches no tasks.")

    def get(self, prefix: str) -> Task:
        """Find a task by id prefix."""
        return self._find(self.resolve_id(prefix))

    def children_of(self, full_id: str) -> List[Task]:
        """Direct children of a task, in insertion order."""
        return [task for task in self._tasks if task.parent_id == full_id]

    def _subtree_ids(self, full_id: str) -> List[str]:
        """Ids of a task and all its descendants, children before parents."""
        order: List[str] = []
        visited: Set[str] = set()

        def visit(task_id: str) -> None:
            if task_id in visited:
                return
            visited.add(task_id)
            for child in self.children_of(task_id):
                visit(child.id)
            order.append(task_id)

        visit(full_id)
        return order

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        description: str,
        parent: Optional[str] = None,
        task_id: Optional[str] = None,
        timestamp: Optional[float] = None,
    ) -> Task:
        """
        Add a new task.

        Args:
            description: Task description (flattened onto one line)
            parent: Prefix of the parent task, or None for a root task
            task_id: Explicit id; always displayed in full
            timestamp: Creation time (default: now)

        Returns:
            The new Task. Use display_id() for its compressed id.

        Raises:
            ValueError: description or ``task_id`` is empty
            DuplicateTaskError: ``task_id`` is already in use
            BadParentPrefixError: ``parent`` does not resolve to a task
        """
        description = clean_description(description)
        if not description:
            raise ValueError("Task description cannot be empty")

        if task_id is not None and not task_id.strip():
            raise ValueError("Task id cannot be empty")
        if task_id is not None and task_id in self:
            raise DuplicateTaskError(f"A task with id '{task_id}' already exists.")

        parent_id = None
        if parent is not None:
            try:
                parent_id = self.resolve_id(parent)
            except TaskStoreError as e:
                raise BadParentPrefixError(f"Parent prefix '{parent}' matches no tasks.") from e

        task = create_task(description, parent_id=parent_id, task_id=task_id, timestamp=timestamp)
        if task.id in self:
            raise DuplicateTaskError(f"A task with id '{task.id}' already exists.")

        self._tasks.append(task)
        self.compute_prefixes()
        log.info("Added task %s (%s)", self.display_id(task), task.id)
        return task

    def edit(self, prefix: str, description: str) -> Task:
        """
        Replace a task's description. The task keeps its id.

        Raises:
            ValueError: description is empty
        """
        task = self.get(prefix)
        description = clean_description(description)
        if not description:
            raise ValueError("Task description cannot be empty")
        task.set_description(description)
        log.info("Edited task %s", task.id)
        return task

    def remove(self, prefix: str, force: bool = False) -> List[Task]:
        """
        Remove a task, and with ``force`` its whole subtree.

        Returns:
            Removed tasks, descendants before their parents

        Raises:
            RemoveHasChildrenError: the task has children and ``force`` is off
        """
        full_id = self.resolve_id(prefix)
        if self.children_of(full_id) and not force:
            raise RemoveHasChildrenError()

        doomed = self._subtree_ids(full_id)
        by_id = {task.id: task for task in self._tasks}
        removed = [by_id[task_id] for task_id in doomed]

        doomed_set = set(doomed)
        self._tasks = [task for task in self._tasks if task.id not in doomed_set]
        self.compute_prefixes()
        log.info("Removed %d task(s) under %s", len(removed), full_id)
        return removed

    def complete(self, prefix: str, completed: bool = True) -> Task:
        """Set a task's completion flag. Children are not affected."""
        task = self.get(prefix)
        task.set_completed(completed)
        return task

    def tag(self, prefix: str, tokens: Iterable[str]) -> Task:
        """
        Add or remove tags. A token starting with '-' removes the tag named
        by the rest of the token; any other token adds it.
        """
        task = self.get(prefix)
        for token in tokens:
            if token.startswith("-"):
                name = token[1:]
                if name:
                    task.remove_tag(name)
            elif token:
                task.add_tag(token)
        return task

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _sorted_children(self, parent_id: Optional[str]) -> List[Task]:
        children = [task for task in self._tasks if task.parent_id == parent_id]
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(children, key=lambda task: task.timestamp)

    def _visible_children(self, parent_id: Optional[str], hide_completed: bool,
                          visited: Set[str]) -> List[Task]:
        """
        Children to draw under ``parent_id``.

        Hidden (completed) tasks are replaced by their own visible children,
        so descendants of a hidden task surface at its level.
        """
        result = []
        for task in self._sorted_children(parent_id):
            if task.id in visited:
                continue
            if hide_completed and task.completed:
                visited.add(task.id)
                result.extend(self._visible_children(task.id, hide_completed, visited))
            else:
                result.append(task)
        return result

    def render(self, hide_completed: bool = False, align: bool = False) -> List[str]:
        """
        Render the task tree as display lines.

        Args:
            hide_completed: Leave completed tasks out of the view
            align: Pad display ids to the longest prefix in use

        Returns:
            One line per visible task, depth-first, siblings by timestamp
        """
        lines: List[str] = []
        visited: Set[str] = set()
        width = self._prefix_max_len if align else 0

        def walk(parent_id: Optional[str], indent: str) -> None:
            children = self._visible_children(parent_id, hide_completed, visited)
            for i, task in enumerate(children):
                if task.id in visited:
                    continue
                visited.add(task.id)
                last = i == len(children) - 1
                prefix = self.display_id(task).ljust(width)
                lines.append(format_tree_line(
                    indent, last, prefix, task.tags, task.description, task.completed,
                ))
                walk(task.id, child_indent(indent, last))

        walk(None, ROOT_INDENT)
        return lines
