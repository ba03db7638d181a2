"""
Parser for the flat task file.

Main API:
    read_file(path)  -> List[Task]
    write_file(path, tasks)  -> None

Line format:
    <description> | <json-object>

The description lives in front of the separator so the file stays
grep-able; the JSON object carries every other field. Fields left at their
default value are omitted on write and filled back in on read.

Lines without a separator (or with nothing after it) are accepted as bare
descriptions and get an ID derived from the description and a zero
timestamp. A separator followed by JSON that does not decode is an error.

Only "\\n" ends a line. pydantic writes U+2028, U+0085 and friends raw
inside JSON strings, so str.splitlines() would cut records in half.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, ValidationError

from tasktrack.errors import MalformedRecordError, StoreIOError
from tasktrack.models.task import IdSource, Task, create_task
from tasktrack.utils.formatting import FIELD_SEPARATOR
from tasktrack.utils.ids import derive_task_id

log = logging.getLogger(__name__)


class TaskRecord(BaseModel):
    """JSON payload of one task line. Field order is the on-disk key order."""

    id: str
    parent_id: Optional[str] = None
    show_full_id: bool = False
    timestamp: float = 0.0
    tags: List[str] = []
    completed: bool = False

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        return cls(
            id=task.id,
            parent_id=task.parent_id,
            show_full_id=task.show_full_id,
            timestamp=task.timestamp,
            tags=list(task.tags),
            completed=task.completed,
        )

    def to_task(self, description: str) -> Task:
        tags: List[str] = []
        for tag in self.tags:
            if tag not in tags:
                tags.append(tag)
        return Task(
            id=self.id,
            description=description,
            id_source=IdSource.USER if self.show_full_id else IdSource.DERIVED,
            parent_id=self.parent_id,
            timestamp=self.timestamp,
            tags=tags,
            completed=self.completed,
        )


# ---------------------------------------------------------------------------
# Single lines
# ---------------------------------------------------------------------------

def _split_line(line: str) -> Tuple[str, Optional[str]]:
    """Split a line into description and JSON payload (None for a bare line)."""
    description, sep, payload = line.partition(FIELD_SEPARATOR)
    payload = payload.strip()
    return description.strip(), (payload if sep and payload else None)


def parse_line(line: str, line_number: int = 0) -> Task:
    """
    Parse one line of the task file.

    Args:
        line: Line content (trailing newline optional)
        line_number: 1-based line number, used in error messages

    Returns:
        Task

    Raises:
        MalformedRecordError: if the JSON payload does not decode
    """
    description, payload = _split_line(line)

    if payload is None:
        log.debug("Line %d has no metadata, deriving id from description", line_number)
        return create_task(description, timestamp=0.0)

    try:
        record = TaskRecord.model_validate_json(payload)
    except ValidationError as e:
        errors = e.errors()
        reason = errors[0]["msg"] if errors else str(e)
        raise MalformedRecordError(line_number, reason) from e

    return record.to_task(description)


def format_line(task: Task) -> str:
    """
    Format a task as a file line (without trailing newline).

    Returns:
        e.g. 'Buy milk | {"id":"3f2a...","timestamp":1700000000.5}'
    """
    payload = TaskRecord.from_task(task).model_dump_json(exclude_defaults=True)
    return f"{task.description} {FIELD_SEPARATOR} {payload}"


# ---------------------------------------------------------------------------
# Whole files
# ---------------------------------------------------------------------------

def _free_bare_id(description: str, line_number: int, taken: Set[str]) -> str:
    """ID for a bare line whose derived ID is already used, salted by line number."""
    salt = line_number
    task_id = derive_task_id(description, float(salt))
    while task_id in taken:
        salt += 1
        task_id = derive_task_id(description, float(salt))
    return task_id


def parse_content(content: str) -> List[Task]:
    """
    Parse the full file content into tasks, in file order.

    Blank lines are skipped and a trailing "\\r" is dropped from each line.

    IDs in the result are unique. Full records claim their IDs first; a bare
    line whose derived ID is already taken (e.g. the same description twice)
    gets an ID salted with its line number, so no line is lost on the next
    save.

    Raises:
        MalformedRecordError: a payload does not decode, or two full records
            share an ID
    """
    parsed: List[Tuple[int, bool, Task]] = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip():
            continue
        bare = _split_line(line)[1] is None
        parsed.append((line_number, bare, parse_line(line, line_number)))

    taken: Set[str] = set()
    for line_number, bare, task in parsed:
        if bare:
            continue
        if task.id in taken:
            raise MalformedRecordError(line_number, f"duplicate task id '{task.id}'")
        taken.add(task.id)

    for line_number, bare, task in parsed:
        if not bare:
            continue
        if task.id in taken:
            task.id = _free_bare_id(task.description, line_number, taken)
            log.warning("Line %d repeats a derived id, assigned %s", line_number, task.id)
        taken.add(task.id)

    return [task for _, _, task in parsed]


def format_content(tasks: Iterable[Task]) -> str:
    """Serialize tasks sorted by ID, one per line."""
    ordered = sorted(tasks, key=lambda task: task.id)
    return "".join(format_line(task) + "\n" for task in ordered)


def read_file(file_path: Path) -> List[Task]:
    """
    Load tasks from a file. A missing file is an empty task list.

    Raises:
        StoreIOError: if the file exists but cannot be read or is not UTF-8
        MalformedRecordError: if a line's payload does not decode
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.info("Task file %s not found, starting empty", file_path)
        return []
    except OSError as e:
        raise StoreIOError(f"Cannot read {file_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StoreIOError(f"Cannot read {file_path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e

    tasks = parse_content(content)
    log.debug("Loaded %d task(s) from %s", len(tasks), file_path)
    return tasks


def write_file(file_path: Path, tasks: Iterable[Task]) -> None:
    """
    Truncate and rewrite the task file, sorted by ID.

    Raises:
        StoreIOError: if the file cannot be written
    """
    content = format_content(tasks)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise StoreIOError(f"Cannot write {file_path}: {e}") from e
    log.debug("Wrote %d line(s) to %s", content.count("\n"), file_path)
