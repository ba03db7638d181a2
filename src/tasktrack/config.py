"""
Runtime configuration: where the task file lives and which editor to run.

Task file precedence:
1. explicit path (the --file option)
2. TASKTRACK_FILE environment variable
3. nearest TASKS_FILE_NAME found walking up from the working directory
4. TASKS_FILE_NAME in the home directory
"""

import os
import shlex
from pathlib import Path
from typing import List, Optional

TASKS_FILE_NAME = ".tasks"
TASKS_FILE_ENV = "TASKTRACK_FILE"
DEFAULT_EDITOR = "vi"


def find_tasks_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """
    Find the nearest task file by walking up from cwd.

    Args:
        cwd: Starting directory (default: current directory)

    Returns:
        Path to the task file, or None if not found
    """
    current = (cwd or Path.cwd()).resolve()
    while True:
        candidate = current / TASKS_FILE_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_tasks_file(explicit: Optional[str] = None, cwd: Optional[Path] = None) -> Path:
    """Resolve the task file path following the precedence above."""
    if explicit:
        return Path(explicit).expanduser()

    from_env = os.environ.get(TASKS_FILE_ENV)
    if from_env:
        return Path(from_env).expanduser()

    found = find_tasks_file(cwd)
    if found is not None:
        return found

    return Path.home() / TASKS_FILE_NAME


def editor_command() -> List[str]:
    """Editor command line from $VISUAL or $EDITOR, split shell-style."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR
    return shlex.split(editor) or [DEFAULT_EDITOR]
