#!/usr/bin/env python3
"""
t - simple todo tracker

Usage:
    t [list] [--hide-completed] [--align]
    t add <desc>... [--id ID] [--parent PREFIX]
    t show <id>
    t edit <id> [<desc>...]
    t rm <id> [--force]
    t done <id>
    t undone <id>
    t tag <id> <tag>... (prefix a tag with '-' to remove it)

Examples:
    t add Buy milk
    t add --parent 3f Pick up eggs
    t add --id groceries Weekly shopping
    t tag 3f home -work
    t rm groceries --force
    t --file ./project.tasks list --hide-completed
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from tasktrack.config import resolve_tasks_file
from tasktrack.editor import EditorError, edit_text
from tasktrack.errors import ErrorKind, TaskStoreError
from tasktrack.store import TaskStore

log = logging.getLogger(__name__)

EXIT_INVALID = 1
EXIT_CODES = {
    ErrorKind.AMBIGUOUS_PREFIX: 2,
    ErrorKind.BAD_PREFIX: 3,
    ErrorKind.BAD_PARENT_PREFIX: 4,
    ErrorKind.DUPLICATE_TASK: 5,
    ErrorKind.REMOVE_HAS_CHILDREN: 6,
    ErrorKind.IO_ERROR: 7,
    ErrorKind.MALFORMED_RECORD: 8,
}


# --- add ---

def add_task(args) -> None:
    """Add a new task."""
    store = args.store
    task = store.add(" ".join(args.desc), parent=args.parent, task_id=args.id)
    store.save()
    print(f"added task {store.display_id(task)} ({task.id})")


# --- list ---

def list_tasks(args) -> None:
    """Show the task tree."""
    store = args.store
    print("Tasks:")
    for line in store.render(hide_completed=args.hide_completed, align=args.align):
        print(line)


def show_task(args) -> None:
    """Show every field of a single task."""
    store = args.store
    task = store.get(args.id)
    try:
        created = datetime.fromtimestamp(task.timestamp).isoformat(sep=" ", timespec="seconds")
    except (OverflowError, OSError, ValueError):
        # Hand-edited timestamp outside what the platform can convert
        created = repr(task.timestamp)

    print(f"{store.display_id(task)}: {task.description}")
    print(f"  ID: {task.id}")
    if task.parent_id:
        print(f"  Parent: {task.parent_id}")
    print(f"  Created: {created}")
    if task.tags:
        print(f"  Tags: {', '.join(task.tags)}")
    print(f"  Completed: {'yes' if task.completed else 'no'}")
    children = store.children_of(task.id)
    if children:
        print(f"  Children: {len(children)}")


# --- edit ---

def edit_task(args) -> None:
    """Change a task's description, inline or in $EDITOR."""
    store = args.store
    if args.desc:
        description = " ".join(args.desc)
    else:
        task = store.get(args.id)
        description = edit_text(task.description)
        if not description.strip():
            print("Warning: Empty description, task not changed.")
            return

    task = store.edit(args.id, description)
    store.save()
    print(f"edited task {store.display_id(task)} ({task.id})")


# --- rm ---

def remove_task(args) -> None:
    """Remove a task (and with --force its subtasks)."""
    store = args.store
    removed = store.remove(args.id, force=args.force)
    store.save()
    # Subtasks are named by full id, the target by the prefix the user typed
    for task in removed:
        label = args.id if task is removed[-1] else task.id
        print(f"removed task {label} ({task.id})")


# --- done / undone ---

def complete_task(args) -> None:
    store = args.store
    task = store.complete(args.id, completed=args.completed)
    store.save()
    state = "completed" if task.completed else "reopened"
    print(f"{state} task {store.display_id(task)} ({task.id})")


# --- tag ---

def tag_task(args) -> None:
    """Add tags, or remove the ones given as '-tag'."""
    if not args.tags:
        raise ValueError("No tags given")
    store = args.store
    task = store.tag(args.id, args.tags)
    store.save()
    tags = " ".join(f"[{t}]" for t in task.tags) or "(no tags)"
    print(f"tagged task {store.display_id(task)}: {tags}")


# --- main ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="t",
        description="Simple todo tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--file', help='Path to the task file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More logging (-v info, -vv debug)')
    parser.set_defaults(func=list_tasks, hide_completed=False, align=False)
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # --- add ---
    add_p = subparsers.add_parser('add', aliases=['a'], help='Create a new task')
    add_p.add_argument('desc', nargs='+', help='Task description')
    add_p.add_argument('--id', help='Create task with given ID')
    add_p.add_argument('--parent', help='ID prefix of the parent task')
    add_p.set_defaults(func=add_task)

    # --- list ---
    list_p = subparsers.add_parser('list', aliases=['ls'], help='Show the task tree')
    list_p.add_argument('--hide-completed', action='store_true', help='Hide completed tasks')
    list_p.add_argument('--align', action='store_true', help='Align the ID column')
    list_p.set_defaults(func=list_tasks)

    # --- show ---
    show_p = subparsers.add_parser('show', help='Show a single task')
    show_p.add_argument('id', help='Task ID prefix')
    show_p.set_defaults(func=show_task)

    # --- edit ---
    edit_p = subparsers.add_parser('edit', aliases=['e'], help='Edit a task description')
    edit_p.add_argument('id', help='Task ID prefix')
    edit_p.add_argument('desc', nargs='*', help='New description (omit to open $EDITOR)')
    edit_p.set_defaults(func=edit_task)

    # --- rm ---
    rm_p = subparsers.add_parser('rm', help='Remove a task')
    rm_p.add_argument('id', help='Task ID prefix')
    rm_p.add_argument('-f', '--force', action='store_true', help='Also remove subtasks')
    rm_p.set_defaults(func=remove_task)

    # --- done / undone ---
    done_p = subparsers.add_parser('done', help='Mark a task completed')
    done_p.add_argument('id', help='Task ID prefix')
    done_p.set_defaults(func=complete_task, completed=True)

    undone_p = subparsers.add_parser('undone', help='Mark a task not completed')
    undone_p.add_argument('id', help='Task ID prefix')
    undone_p.set_defaults(func=complete_task, completed=False)

    # --- tag ---
    tag_p = subparsers.add_parser('tag', help="Add tags (or remove with '-tag')")
    tag_p.add_argument('id', help='Task ID prefix')
    # REMAINDER so '-tag' tokens are not taken for options
    tag_p.add_argument('tags', nargs=argparse.REMAINDER, help='Tags to add, -tag to remove')
    tag_p.set_defaults(func=tag_task)

    return parser


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    file_path = resolve_tasks_file(args.file)
    log.debug("Using task file %s", file_path)

    try:
        args.store = TaskStore.load(file_path)
        args.func(args)
    except TaskStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CODES[e.kind]
    except (EditorError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID
    return 0


if __name__ == '__main__':
    sys.exit(main())
