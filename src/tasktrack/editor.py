"""
External editor round trip for editing task descriptions.
"""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

from tasktrack.config import editor_command

log = logging.getLogger(__name__)


class EditorError(Exception):
    """The editor could not be started or exited with an error."""


def edit_text(initial: str, command: Optional[List[str]] = None) -> str:
    """
    Open ``initial`` in an external editor and return the saved text.

    Args:
        initial: Text to seed the editor with
        command: Editor command (default: from $VISUAL / $EDITOR)

    Returns:
        File content after the editor exits (may be multi-line)

    Raises:
        EditorError: if the editor is missing or exits non-zero
    """
    cmd = list(command or editor_command())
    fd, name = tempfile.mkstemp(suffix=".txt", prefix="tasktrack-")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(initial + "\n")

        log.debug("Running editor: %s %s", " ".join(cmd), path)
        try:
            subprocess.run(cmd + [str(path)], check=True)
        except subprocess.CalledProcessError as e:
            raise EditorError(f"Editor exited with status {e.returncode}") from e
        except FileNotFoundError as e:
            raise EditorError(f"Editor '{cmd[0]}' not found. Set $EDITOR.") from e

        return path.read_text(encoding="utf-8")
    finally:
        path.unlink(missing_ok=True)
