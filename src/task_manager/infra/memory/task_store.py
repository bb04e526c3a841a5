from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from task_manager.domain import validation
from task_manager.domain.errors import CapacityError, NotFoundError, ValidationError
from task_manager.domain.task_models import (
    ASSIGNEE_MAX_LEN,
    DESCRIPTION_MAX_LEN,
    MAX_TAGS,
    PRIORITY_RANK,
    TAG_MAX_LEN,
    TITLE_MAX_LEN,
    SortField,
    Task,
    TaskCreate,
    TaskFilter,
    TaskPriority,
    TaskSearchQuery,
    TaskStats,
    TaskStatus,
    TaskUpdate,
    valid_priorities,
    valid_statuses,
)
from task_manager.infra.memory.rwlock import ReadWriteLock

logger = logging.getLogger("task_manager.store")

SEARCHABLE_FIELDS = ("title", "description")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    return [t.strip() for t in tags or []]


def _raise_if(reason: Optional[str]) -> None:
    if reason:
        raise ValidationError(reason)


class InMemoryTaskStore:
    """
    Process-local task collection.

    Reads (get/list/search/stats) share a ReadWriteLock; writes hold it
    exclusively. Records handed out are deep copies, so callers can never
    mutate stored state behind the lock.
    """

    def __init__(self, max_tasks: int, seed: Iterable[TaskCreate] = ()):
        if max_tasks <= 0:
            raise ValueError("max_tasks must be positive")
        self.max_tasks = max_tasks
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()

        for data in seed:
            try:
                self.create(data)
            except CapacityError:
                logger.warning(
                    "store.seed_truncated",
                    extra={"category": "tasks", "event": "store.seed_truncated", "max_tasks": max_tasks},
                )
                break

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tasks)

    # ---- writes ----

    def create(self, data: TaskCreate) -> Task:
        with self._lock.write():
            self._validate_create(data)
            if len(self._tasks) >= self.max_tasks:
                raise CapacityError(self.max_tasks)

            now = _now()
            task = Task(
                id=self._next_id,
                title=_clean(data.title),
                description=_clean(data.description),
                status=TaskStatus(data.status or TaskStatus.pending.value),
                priority=TaskPriority(data.priority or TaskPriority.medium.value),
                created_at=now,
                updated_at=now,
                assigned_to=_clean(data.assigned_to) or None,
                tags=_clean_tags(data.tags),
            )
            self._tasks[task.id] = task
            self._next_id += 1
            return task.model_copy(deep=True)

    def update(self, task_id: int, data: TaskUpdate) -> Task:
        with self._lock.write():
            task = self._tasks.get(task_id)
            if task is None:
                raise NotFoundError(task_id)

            present = data.model_fields_set
            self._validate_update(data, present)

            changes = {}
            if "title" in present:
                changes["title"] = _clean(data.title)
            if "description" in present:
                changes["description"] = _clean(data.description)
            if "status" in present:
                changes["status"] = TaskStatus(data.status)
            if "priority" in present:
                changes["priority"] = TaskPriority(data.priority)
            if "assigned_to" in present:
                changes["assigned_to"] = _clean(data.assigned_to) or None
            if "tags" in present:
                changes["tags"] = _clean_tags(data.tags)
            # clock may step backwards; updated_at must not
            changes["updated_at"] = max(_now(), task.updated_at)

            updated = task.model_copy(update=changes, deep=True)
            self._tasks[task_id] = updated
            return updated.model_copy(deep=True)

    def delete(self, task_id: int) -> None:
        with self._lock.write():
            if task_id not in self._tasks:
                raise NotFoundError(task_id)
            del self._tasks[task_id]

    # ---- reads ----

    def get(self, task_id: int) -> Task:
        with self._lock.read():
            task = self._tasks.get(task_id)
            if task is None:
                raise NotFoundError(task_id)
            return task.model_copy(deep=True)

    def list(self, filter: Optional[TaskFilter] = None) -> List[Task]:
        with self._lock.read():
            tasks = [t for t in self._tasks.values() if _matches_filter(t, filter)]
            tasks = _sort_default(tasks)
            if filter is not None:
                tasks = paginate(tasks, filter.limit, filter.offset)
            return [t.model_copy(deep=True) for t in tasks]

    def search(self, query: TaskSearchQuery) -> List[Task]:
        term = query.query.strip().lower()
        fields = query.fields or list(SEARCHABLE_FIELDS)

        with self._lock.read():
            results = [
                t for t in self._tasks.values()
                if _matches_filter(t, query.filters) and _matches_text(t, term, fields)
            ]
            results = _sort_by(results, query.sort_by, query.sort_desc)
            results = paginate(results, query.filters.limit, query.filters.offset)
            return [t.model_copy(deep=True) for t in results]

    def stats(self) -> TaskStats:
        by_status: Dict[str, int] = {}
        by_priority: Dict[str, int] = {}
        by_user: Dict[str, int] = {}

        with self._lock.read():
            total = len(self._tasks)
            for t in self._tasks.values():
                by_status[t.status.value] = by_status.get(t.status.value, 0) + 1
                by_priority[t.priority.value] = by_priority.get(t.priority.value, 0) + 1
                if t.assigned_to:
                    by_user[t.assigned_to] = by_user.get(t.assigned_to, 0) + 1

        return TaskStats(
            total_tasks=total,
            tasks_by_status=by_status,
            tasks_by_priority=by_priority,
            tasks_by_user=by_user,
            last_updated=_now(),
        )

    # ---- validation ----

    @staticmethod
    def _validate_create(data: TaskCreate) -> None:
        _raise_if(validation.check_required("title", data.title))
        _raise_if(validation.check_length("title", data.title, 1, TITLE_MAX_LEN))
        _raise_if(validation.check_length("description", data.description, 0, DESCRIPTION_MAX_LEN))
        if data.status:
            _raise_if(validation.check_one_of("status", data.status, valid_statuses()))
        if data.priority:
            _raise_if(validation.check_one_of("priority", data.priority, valid_priorities()))
        _raise_if(validation.check_length("assigned_to", data.assigned_to, 0, ASSIGNEE_MAX_LEN))
        _raise_if(validation.check_tags(data.tags, MAX_TAGS, TAG_MAX_LEN))

    @staticmethod
    def _validate_update(data: TaskUpdate, present: set) -> None:
        if "title" in present:
            _raise_if(validation.check_required("title", data.title))
            _raise_if(validation.check_length("title", data.title, 1, TITLE_MAX_LEN))
        if "description" in present:
            _raise_if(validation.check_length("description", data.description, 0, DESCRIPTION_MAX_LEN))
        if "status" in present:
            _raise_if(validation.check_one_of("status", data.status, valid_statuses()))
        if "priority" in present:
            _raise_if(validation.check_one_of("priority", data.priority, valid_priorities()))
        if "assigned_to" in present:
            _raise_if(validation.check_length("assigned_to", data.assigned_to, 0, ASSIGNEE_MAX_LEN))
        if "tags" in present:
            _raise_if(validation.check_tags(data.tags, MAX_TAGS, TAG_MAX_LEN))


def _matches_filter(task: Task, filter: Optional[TaskFilter]) -> bool:
    if filter is None:
        return True
    if filter.status and task.status.value != filter.status:
        return False
    if filter.priority and task.priority.value != filter.priority:
        return False
    if filter.assigned_to and task.assigned_to != filter.assigned_to:
        return False
    if filter.tags and not set(filter.tags).intersection(task.tags):
        return False
    return True


def _matches_text(task: Task, term: str, fields: List[str]) -> bool:
    if not term:
        return True
    for field in fields:
        if field not in SEARCHABLE_FIELDS:
            continue
        if term in getattr(task, field).lower():
            return True
    return False


def _sort_default(tasks: List[Task]) -> List[Task]:
    # newest first; ids break ties between tasks created in the same instant
    return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)


def _sort_by(tasks: List[Task], sort_by: str, desc: bool) -> List[Task]:
    if sort_by == SortField.created_at.value:
        key = lambda t: (t.created_at, t.id)
    elif sort_by == SortField.updated_at.value:
        key = lambda t: (t.updated_at, t.id)
    elif sort_by == SortField.priority.value:
        key = lambda t: (PRIORITY_RANK[t.priority.value], t.created_at, t.id)
    else:
        return _sort_default(tasks)
    return sorted(tasks, key=key, reverse=desc)


def paginate(tasks: List[Task], limit: int, offset: int) -> List[Task]:
    """Window [offset, offset+limit); limit <= 0 means no upper bound."""
    offset = max(offset, 0)
    if offset >= len(tasks):
        return []
    if limit > 0:
        return tasks[offset:offset + limit]
    return tasks[offset:]
