from __future__ import annotations
from typing import List

from task_manager.domain.task_models import TaskCreate


def sample_tasks() -> List[TaskCreate]:
    """Demonstration tasks loaded into a fresh store."""
    return [
        TaskCreate(
            title="Setup project structure",
            description="Create basic project layout with proper package organization",
            status="completed",
            priority="high",
            assigned_to="alice",
            tags=["setup", "infrastructure"],
        ),
        TaskCreate(
            title="Implement API endpoints",
            description="Create REST API endpoints for task management with proper error handling",
            status="in-progress",
            priority="high",
            assigned_to="bob",
            tags=["api", "backend"],
        ),
        TaskCreate(
            title="Add authentication",
            description="Implement JWT-based authentication and authorization middleware",
            status="pending",
            priority="medium",
            assigned_to="charlie",
            tags=["auth", "security"],
        ),
        TaskCreate(
            title="Write documentation",
            description="Create comprehensive API documentation and user guides",
            status="pending",
            priority="low",
            tags=["docs", "documentation"],
        ),
    ]
