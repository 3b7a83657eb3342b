from typing import Any, Dict, Optional

from taskboard.database import models
from taskboard.database.models.enums import UserRole, TaskStatus, TaskPriority


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_to_dict(user: models.User) -> Dict[str, Any]:
    """사용자 정보를 딕셔너리로 변환합니다. (비밀번호 해시 제외)"""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": UserRole(user.role).value,
    }


def project_to_dict(project: models.Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "created_by": project.created_by,
        "created_at": _iso(project.created_at),
    }


def task_to_dict(task: models.Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "project_id": task.project_id,
        "title": task.title,
        "description": task.description,
        "status": TaskStatus(task.status).value,
        "priority": TaskPriority(task.priority).value,
        "due_date": _iso(task.due_date),
        "assigned_to": task.assigned_to,
        "created_by": task.created_by,
        "created_at": _iso(task.created_at),
    }


def comment_to_dict(comment: models.Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "task_id": comment.task_id,
        "user_id": comment.user_id,
        "body": comment.body,
        "created_at": _iso(comment.created_at),
    }
