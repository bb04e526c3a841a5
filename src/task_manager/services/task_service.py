import logging
from typing import List, Optional
from task_manager.domain.task_models import Task, TaskCreate, TaskFilter, TaskSearchQuery, TaskStats, TaskUpdate
from task_manager.infra.memory.task_store import InMemoryTaskStore

logger = logging.getLogger("task_manager.tasks")

class TaskService:
    def __init__(self, store: InMemoryTaskStore):
        self.store = store

    def create_task(self, data: TaskCreate) -> Task:
        task = self.store.create(data)
        logger.info("task.create", extra={"category": "tasks", "event": "task.create", "task_id": task.id, "title": task.title})
        return task

    def get_task(self, task_id: int) -> Task:
        return self.store.get(task_id)

    def list_tasks(self, filter: Optional[TaskFilter] = None) -> List[Task]:
        return self.store.list(filter)

    def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        task = self.store.update(task_id, data)
        logger.info(
            "task.update",
            extra={"category": "tasks", "event": "task.update", "task_id": task_id, "fields": sorted(data.model_fields_set)},
        )
        return task

    def delete_task(self, task_id: int) -> None:
        self.store.delete(task_id)
        logger.info("task.delete", extra={"category": "tasks", "event": "task.delete", "task_id": task_id})

    def search_tasks(self, query: TaskSearchQuery) -> List[Task]:
        results = self.store.search(query)
        logger.debug(
            "task.search",
            extra={"category": "tasks", "event": "task.search", "query": query.query, "returned": len(results)},
        )
        return results

    def task_stats(self) -> TaskStats:
        return self.store.stats()
