"""
Personal task tracker backed by a flat text file.

Main API:
    from tasktrack import TaskStore

    store = TaskStore.load(Path("~/.tasks").expanduser())
    task = store.add("Buy milk")
    store.tag(store.display_id(task), ["home"])
    store.save()
"""

from .errors import (
    AmbiguousPrefixError,
    BadParentPrefixError,
    BadPrefixError,
    DuplicateTaskError,
    ErrorKind,
    MalformedRecordError,
    RemoveHasChildrenError,
    StoreIOError,
    TaskStoreError,
)
from .models import IdSource, Task, create_task
from .parsers import read_file, write_file
from .store import TaskStore

__all__ = [
    # Models
    'IdSource',
    'Task',
    'create_task',
    # Store
    'TaskStore',
    'read_file',
    'write_file',
    # Errors
    'ErrorKind',
    'TaskStoreError',
    'AmbiguousPrefixError',
    'BadPrefixError',
    'BadParentPrefixError',
    'DuplicateTaskError',
    'RemoveHasChildrenError',
    'StoreIOError',
    'MalformedRecordError',
]
