from typing import Dict

from taskboard.database import models
from taskboard.database.models.enums import UserRole, TaskStatus, ACTIVE_TASK_STATUSES
from taskboard.repositories.interfaces import IUserRepository, ITaskRepository
from taskboard.services.exceptions import UserNotFoundError, TaskAssignmentError


class TaskAssignmentService:
    def __init__(self, user_repo: IUserRepository, task_repo: ITaskRepository, max_active_tasks: int = 10):
        """
        TaskAssignmentService를 초기화합니다.

        Args:
            user_repo: 담당자 후보를 조회하기 위한 리포지토리.
            task_repo: 담당자의 진행 중 작업 수를 세기 위한 리포지토리.
            max_active_tasks: 한 사용자가 동시에 맡을 수 있는 pending / in-progress 작업의 최대 개수.
        """
        self.user_repo = user_repo
        self.task_repo = task_repo
        self.max_active_tasks = max_active_tasks

    def validate_assignee(self, user_id: int) -> models.User:
        """
        작업을 배정할 수 있는 사용자인지 검증하고, 가능하면 해당 사용자를 반환합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            TaskAssignmentError: admin 사용자이거나, 이미 진행 중인 작업이 너무 많을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

        if UserRole(user.role) is UserRole.ADMIN:
            raise TaskAssignmentError("Admin users cannot be assigned to tasks.")

        active_tasks = self.task_repo.count_by_assignee(user_id, list(ACTIVE_TASK_STATUSES))
        if active_tasks >= self.max_active_tasks:
            raise TaskAssignmentError("User already has too many active tasks.")

        return user

    def user_task_stats(self, user_id: int) -> Dict[str, int]:
        """사용자에게 배정된 작업 수를 상태별로 집계합니다."""
        return {
            "total_tasks": self.task_repo.count_by_assignee(user_id),
            "pending_tasks": self.task_repo.count_by_assignee(user_id, [TaskStatus.PENDING]),
            "in_progress_tasks": self.task_repo.count_by_assignee(user_id, [TaskStatus.IN_PROGRESS]),
            "completed_tasks": self.task_repo.count_by_assignee(user_id, [TaskStatus.DONE]),
        }
