from .task import IdSource, Task, create_task

__all__ = [
    "IdSource",
    "Task",
    "create_task",
]
