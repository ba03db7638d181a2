"""
Error taxonomy for the task store.

Every failure a store operation can report is one of the ErrorKind members.
Each kind has its own exception class so callers can either catch a specific
failure or catch TaskStoreError and switch on ``.kind``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    AMBIGUOUS_PREFIX = "ambiguous-prefix"
    BAD_PREFIX = "bad-prefix"
    BAD_PARENT_PREFIX = "bad-parent-prefix"
    DUPLICATE_TASK = "duplicate-task"
    REMOVE_HAS_CHILDREN = "remove-has-children"
    IO_ERROR = "io-error"
    MALFORMED_RECORD = "malformed-record"


class TaskStoreError(Exception):
    """Base class for all task store failures."""

    kind: ErrorKind
    default_message = "Task store error."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class AmbiguousPrefixError(TaskStoreError):
    kind = ErrorKind.AMBIGUOUS_PREFIX
    default_message = "Prefix matches more than one task."


class BadPrefixError(TaskStoreError):
    kind = ErrorKind.BAD_PREFIX
    default_message = "Prefix matches no tasks."


class BadParentPrefixError(TaskStoreError):
    kind = ErrorKind.BAD_PARENT_PREFIX
    default_message = "Parent prefix matches no tasks."


class DuplicateTaskError(TaskStoreError):
    kind = ErrorKind.DUPLICATE_TASK
    default_message = "A task with this id already exists."


class RemoveHasChildrenError(TaskStoreError):
    kind = ErrorKind.REMOVE_HAS_CHILDREN
    default_message = "The task you are trying to remove has children.  Use --force."


class StoreIOError(TaskStoreError):
    """Raised when the task file cannot be read or written.

    The underlying OSError is kept as ``__cause__``.
    """

    kind = ErrorKind.IO_ERROR
    default_message = "Could not access the task file."


class MalformedRecordError(TaskStoreError):
    """A ``<description> | <json>`` line whose payload could not be decoded."""

    kind = ErrorKind.MALFORMED_RECORD
    default_message = "Malformed task record."

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed task record on line {line_number}: {reason}")
