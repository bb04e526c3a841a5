from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import datetime
from typing import Dict, List, Optional

TITLE_MAX_LEN = 200
DESCRIPTION_MAX_LEN = 1000
ASSIGNEE_MAX_LEN = 50
MAX_TAGS = 10
TAG_MAX_LEN = 50


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


PRIORITY_RANK: Dict[str, int] = {
    TaskPriority.low.value: 1,
    TaskPriority.medium.value: 2,
    TaskPriority.high.value: 3,
    TaskPriority.critical.value: 4,
}


class SortField(str, Enum):
    created_at = "created_at"
    updated_at = "updated_at"
    priority = "priority"


def valid_statuses() -> List[str]:
    return [s.value for s in TaskStatus]


def valid_priorities() -> List[str]:
    return [p.value for p in TaskPriority]


# Field rules for requests are enforced by the store, not here.
class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None


class TaskUpdate(BaseModel):
    """
    Partial update. Only fields the caller actually sent are applied,
    see `model_fields_set`; an explicit null still counts as sent.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None


class Task(BaseModel):
    id: int
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.pending
    priority: TaskPriority = TaskPriority.medium
    created_at: datetime
    updated_at: datetime
    assigned_to: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class TaskFilter(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None
    limit: int = 0
    offset: int = 0

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def _null_is_zero(cls, v):
        return 0 if v is None else v


class TaskSearchQuery(BaseModel):
    query: str = ""
    fields: List[str] = Field(default_factory=list)
    filters: TaskFilter = Field(default_factory=TaskFilter)
    sort_by: str = ""
    sort_desc: bool = False

    # null on the wire means the same as an omitted field
    @field_validator("query", "fields", "filters", "sort_by", "sort_desc", mode="before")
    @classmethod
    def _null_is_default(cls, v, info):
        if v is not None:
            return v
        return {"query": "", "fields": [], "filters": {}, "sort_by": "", "sort_desc": False}[info.field_name]


class TaskStats(BaseModel):
    total_tasks: int
    tasks_by_status: Dict[str, int]
    tasks_by_priority: Dict[str, int]
    tasks_by_user: Dict[str, int]
    last_updated: datetime
