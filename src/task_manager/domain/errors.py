from __future__ import annotations


class TaskError(Exception):
    """Base class for failures raised by the task store."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskError):
    pass


class NotFoundError(TaskError):
    def __init__(self, task_id: int):
        super().__init__(f"task with ID {task_id} not found")
        self.task_id = task_id


class CapacityError(TaskError):
    def __init__(self, max_tasks: int):
        super().__init__(f"maximum number of tasks ({max_tasks}) reached")
        self.max_tasks = max_tasks
