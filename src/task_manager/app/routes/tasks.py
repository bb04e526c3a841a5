from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import BaseModel

from task_manager.app.responses import ApiResponse, ok
from task_manager.domain.task_models import Task, TaskCreate, TaskFilter, TaskSearchQuery, TaskStats, TaskUpdate
from task_manager.services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


class TaskList(BaseModel):
    tasks: List[Task]
    count: int


class SearchResult(TaskList):
    query: str


def get_service(request: Request) -> TaskService:
    # Wired in main.create_app
    return request.app.state.task_service


def _non_negative_int(raw: Optional[str]) -> int:
    # malformed pagination values are ignored rather than rejected
    try:
        value = int(raw) if raw is not None else 0
    except ValueError:
        return 0
    return max(value, 0)


def _split_tags(raw: Optional[List[str]]) -> Optional[List[str]]:
    if not raw:
        return None
    tags = [t.strip() for item in raw for t in item.split(",") if t.strip()]
    return tags or None


@router.get("", response_model=ApiResponse[TaskList])
def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    tags: Optional[List[str]] = Query(default=None),
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    svc: TaskService = Depends(get_service),
):
    filter = TaskFilter(
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        tags=_split_tags(tags),
        limit=_non_negative_int(limit),
        offset=_non_negative_int(offset),
    )
    tasks = svc.list_tasks(filter)
    return ok(TaskList(tasks=tasks, count=len(tasks)))


@router.post("", response_model=ApiResponse[Task], status_code=201)
def create_task(payload: TaskCreate, svc: TaskService = Depends(get_service)):
    return ok(svc.create_task(payload))


@router.get("/stats", response_model=ApiResponse[TaskStats])
def task_stats(svc: TaskService = Depends(get_service)):
    return ok(svc.task_stats())


@router.post("/search", response_model=ApiResponse[SearchResult])
def search_tasks(query: TaskSearchQuery, svc: TaskService = Depends(get_service)):
    tasks = svc.search_tasks(query)
    return ok(SearchResult(tasks=tasks, count=len(tasks), query=query.query))


@router.get("/{task_id}", response_model=ApiResponse[Task])
def get_task(task_id: int, svc: TaskService = Depends(get_service)):
    return ok(svc.get_task(task_id))


@router.put("/{task_id}", response_model=ApiResponse[Task])
def update_task(task_id: int, payload: TaskUpdate, svc: TaskService = Depends(get_service)):
    return ok(svc.update_task(task_id, payload))


@router.delete("/{task_id}", status_code=204, response_class=Response)
def delete_task(task_id: int, svc: TaskService = Depends(get_service)):
    svc.delete_task(task_id)
    return Response(status_code=204)
