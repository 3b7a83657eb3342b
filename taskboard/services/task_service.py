import logging
from datetime import date
from typing import Dict, Any, List, Optional

from taskboard.database import models
from taskboard.database.models.enums import TaskStatus, TaskPriority
from taskboard.policies import AuthorizationPolicy, ModifyGround
from taskboard.repositories.interfaces import IProjectRepository, ITaskRepository
from taskboard.services.task_assignment_service import TaskAssignmentService
from taskboard.services.exceptions import (
    ProjectNotFoundError, TaskNotFoundError, PermissionDeniedError
)
from taskboard.services.serializers import task_to_dict

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
UPDATABLE_FIELDS = ("title", "description", "status", "priority", "due_date", "assigned_to")


class TaskService:
    def __init__(
        self,
        project_repo: IProjectRepository,
        task_repo: ITaskRepository,
        assignment_service: TaskAssignmentService,
        policy: Optional[AuthorizationPolicy] = None,
    ):
        """
        TaskService를 초기화합니다.

        Args:
            project_repo: 상위 프로젝트를 조회하기 위한 리포지토리.
            task_repo: 작업 데이터에 접근하기 위한 리포지토리.
            assignment_service: 담당자 배정 가능 여부를 검증하는 서비스.
            policy: 권한 판단에 사용할 정책 객체. 생략하면 기본 정책을 사용합니다.
        """
        self.project_repo = project_repo
        self.task_repo = task_repo
        self.assignment_service = assignment_service
        self.policy = policy or AuthorizationPolicy()

    def create_task(
        self,
        user: models.User,
        project_id: int,
        title: str,
        description: Optional[str] = None,
        status: str = TaskStatus.PENDING.value,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        프로젝트에 새 작업을 생성합니다. 요청한 사용자가 작업 작성자(created_by)가 됩니다.
        누가 작업을 만들 수 있는지는 라우트의 역할 제한(admin, manager)에서 결정합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            ValueError: 제목, 상태, 우선순위, 마감일 형식이 올바르지 않을 때.
            UserNotFoundError, TaskAssignmentError: 담당자를 배정할 수 없을 때.
        """
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")

        new_task = models.Task(
            project_id=project.id,
            title=_validate_title(title),
            description=_validate_description(description),
            status=_parse_status(status),
            priority=_parse_priority(priority),
            due_date=_parse_due_date(due_date),
            created_by=user.id,
        )
        if assigned_to is not None:
            new_task.assigned_to = self.assignment_service.validate_assignee(_parse_assignee_id(assigned_to)).id

        created_task = self.task_repo.create(new_task)
        logger.info(
            "Task created: task_id=%s project_id=%s user_id=%s assigned_to=%s",
            created_task.id, project.id, user.id, created_task.assigned_to
        )
        return task_to_dict(created_task)

    def list_project_tasks(
        self,
        user: models.User,
        project_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        프로젝트의 작업 목록을 조회합니다. 프로젝트 조회 권한이 필요합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 프로젝트에 접근할 수 없을 때.
        """
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
        if not self.policy.can_access_project(user, project):
            logger.warning("Access denied: user %s attempted to list tasks of project %s", user.id, project.id)
            raise PermissionDeniedError("Access denied to this project.")

        status_filter = _parse_status(status) if status else None
        tasks = self.task_repo.list_by_project(project.id, status=status_filter, assigned_to=assigned_to, search=search)
        return [task_to_dict(t) for t in tasks]

    def get_task(self, user: models.User, task_id: int) -> Dict[str, Any]:
        """
        Raises:
            TaskNotFoundError: 해당 ID의 작업을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 작업에 접근할 수 없을 때.
        """
        task = self.find_task(task_id)
        if not self.policy.can_access_task(user, task):
            logger.warning("Access denied: user %s attempted to access task %s", user.id, task.id)
            raise PermissionDeniedError("Access denied to this task.")
        return task_to_dict(task)

    def update_task(self, user: models.User, task_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        작업을 수정합니다. changes에 포함된 필드만 변경하며, assigned_to에 None을 주면 배정을 해제합니다.

        본인에게 배정되었다는 이유로만 수정 권한을 얻은 경우에도 필드 제한은 두지 않고 기록만 남깁니다.

        Raises:
            TaskNotFoundError: 해당 ID의 작업을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 작업을 수정할 수 없을 때.
            ValueError: 알 수 없는 필드이거나 값의 형식이 올바르지 않을 때.
            UserNotFoundError, TaskAssignmentError: 새 담당자를 배정할 수 없을 때.
        """
        task = self.find_task(task_id)
        ground = self.policy.task_modify_ground(user, task)
        if ground is None:
            logger.warning("Modify denied: user %s attempted to update task %s", user.id, task.id)
            raise PermissionDeniedError("You are not authorized to update this task.")

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}.")

        if ground is ModifyGround.ASSIGNEE:
            logger.info(
                "Assignee-only update: task_id=%s user_id=%s fields=%s",
                task.id, user.id, sorted(changes)
            )

        if "title" in changes:
            task.title = _validate_title(changes["title"])
        if "description" in changes:
            task.description = _validate_description(changes["description"])
        if "status" in changes:
            task.status = _parse_status(changes["status"])
        if "priority" in changes:
            task.priority = _parse_priority(changes["priority"])
        if "due_date" in changes:
            task.due_date = _parse_due_date(changes["due_date"])
        if "assigned_to" in changes:
            new_assignee = changes["assigned_to"]
            if new_assignee is None:
                task.assigned_to = None
            elif new_assignee != task.assigned_to:
                task.assigned_to = self.assignment_service.validate_assignee(_parse_assignee_id(new_assignee)).id

        updated_task = self.task_repo.save(task)
        logger.info("Task updated: task_id=%s user_id=%s", task.id, user.id)
        return task_to_dict(updated_task)

    def delete_task(self, user: models.User, task_id: int) -> bool:
        """
        Raises:
            TaskNotFoundError: 해당 ID의 작업을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 작업을 삭제할 수 없을 때.
        """
        task = self.find_task(task_id)
        if not self.policy.can_modify_task(user, task):
            logger.warning("Modify denied: user %s attempted to delete task %s", user.id, task.id)
            raise PermissionDeniedError("You are not authorized to delete this task.")

        self.task_repo.delete(task)
        logger.info("Task deleted: task_id=%s user_id=%s", task_id, user.id)
        return True

    def find_task(self, task_id: int) -> models.Task:
        """ID로 작업을 조회합니다. 없으면 TaskNotFoundError를 발생시킵니다."""
        task = self.task_repo.find_by_id(task_id)
        if not task:
            raise TaskNotFoundError(f"Task with id '{task_id}' not found.")
        return task


def _validate_title(title: Optional[str]) -> str:
    if title is not None and not isinstance(title, str):
        raise ValueError("Task title must be a string.")
    if not title or not title.strip():
        raise ValueError("Task title is required.")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValueError(f"Task title must not exceed {MAX_TITLE_LENGTH} characters.")
    return title.strip()


def _validate_description(description: Optional[str]) -> Optional[str]:
    if description is not None and not isinstance(description, str):
        raise ValueError("Task description must be a string.")
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"Task description must not exceed {MAX_DESCRIPTION_LENGTH} characters.")
    return description


def _parse_status(value: str) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValueError("Invalid task status selected.")


def _parse_priority(value: str) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValueError("Priority must be one of: low, medium, high, urgent.")


def _parse_due_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        due_date = date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError("Please provide a valid due date.")
    if due_date <= date.today():
        raise ValueError("Due date must be in the future.")
    return due_date


def _parse_assignee_id(value: Any) -> int:
    # JSON의 true / false는 int의 하위 타입이므로 따로 걸러냄
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Assignee must be a user id.")
    return value
