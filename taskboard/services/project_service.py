import logging
from typing import Dict, Any, Optional

from taskboard.database import models
from taskboard.database.models.enums import UserRole, TaskStatus, TaskPriority
from taskboard.policies import AuthorizationPolicy
from taskboard.repositories.interfaces import IProjectRepository
from taskboard.services.exceptions import ProjectNotFoundError, PermissionDeniedError
from taskboard.services.serializers import project_to_dict, task_to_dict

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
MAX_PER_PAGE = 100


class ProjectService:
    """프로젝트 생성, 조회, 수정, 삭제 및 통계 서비스를 제공합니다."""

    def __init__(self, project_repo: IProjectRepository, policy: Optional[AuthorizationPolicy] = None):
        """
        ProjectService를 초기화합니다.

        Args:
            project_repo: 프로젝트 데이터에 접근하기 위한 리포지토리.
            policy: 권한 판단에 사용할 정책 객체. 생략하면 기본 정책을 사용합니다.
        """
        self.project_repo = project_repo
        self.policy = policy or AuthorizationPolicy()

    def create_project(self, user: models.User, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        """
        요청한 사용자를 소유자로 하는 새 프로젝트를 생성합니다.

        Raises:
            ValueError: 프로젝트 이름이 비어 있거나 너무 길 때.
        """
        _validate_name(name)
        new_project = models.Project(
            name=name.strip(), description=_validate_description(description), created_by=user.id
        )
        created_project = self.project_repo.create(new_project)
        logger.info("Project created: project_id=%s user_id=%s", created_project.id, user.id)
        return project_to_dict(created_project)

    def list_projects(
        self,
        user: models.User,
        page: int = 1,
        per_page: int = 15,
        search: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        사용자가 조회할 수 있는 프로젝트 목록을 페이지 단위로 반환합니다.
        admin은 모든 프로젝트를, 그 외 사용자는 직접 만들었거나 작업을 배정받은 프로젝트만 봅니다.
        """
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PER_PAGE)
        visible_to = None if UserRole(user.role) is UserRole.ADMIN else user.id

        projects, total = self.project_repo.paginate(
            page, per_page, search=search, created_by=created_by, visible_to=visible_to
        )
        total_pages = (total + per_page - 1) // per_page
        return {
            "projects": [project_to_dict(p) for p in projects],
            "pagination": {
                "current_page": page,
                "per_page": per_page,
                "total": total,
                "total_pages": total_pages,
                "has_next_page": page < total_pages,
                "has_previous_page": page > 1,
            },
        }

    def get_project(self, user: models.User, project_id: int) -> Dict[str, Any]:
        """
        프로젝트 상세 정보와 소속 작업, 작업 통계를 조회합니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 프로젝트에 접근할 수 없을 때.
        """
        project = self._find_project(project_id)
        if not self.policy.can_access_project(user, project):
            logger.warning("Access denied: user %s attempted to access project %s", user.id, project.id)
            raise PermissionDeniedError("Access denied to this project.")

        result = project_to_dict(project)
        result["tasks"] = [task_to_dict(t) for t in project.tasks]
        result["statistics"] = self.get_project_statistics(project)
        return result

    def update_project(
        self,
        user: models.User,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        프로젝트 이름 또는 설명을 수정합니다. None인 값은 변경하지 않습니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 프로젝트를 수정할 수 없을 때.
            ValueError: 새 이름이 올바르지 않을 때.
        """
        project = self._find_project(project_id)
        if not self.policy.can_modify_project(user, project):
            logger.warning("Modify denied: user %s attempted to update project %s", user.id, project.id)
            raise PermissionDeniedError("You are not authorized to update this project.")

        if name is not None:
            _validate_name(name)
            project.name = name.strip()
        if description is not None:
            project.description = _validate_description(description)

        updated_project = self.project_repo.save(project)
        logger.info("Project updated: project_id=%s user_id=%s", project.id, user.id)
        return project_to_dict(updated_project)

    def delete_project(self, user: models.User, project_id: int) -> bool:
        """
        프로젝트를 삭제합니다. 소속 작업과 댓글도 함께 삭제됩니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 프로젝트를 삭제할 수 없을 때.
        """
        project = self._find_project(project_id)
        if not self.policy.can_modify_project(user, project):
            logger.warning("Modify denied: user %s attempted to delete project %s", user.id, project.id)
            raise PermissionDeniedError("You are not authorized to delete this project.")

        self.project_repo.delete(project)
        logger.info("Project deleted: project_id=%s user_id=%s", project_id, user.id)
        return True

    def get_project_statistics(self, project: models.Project) -> Dict[str, int]:
        """이미 로딩된 작업 목록으로 상태별, 우선순위별 작업 수를 계산합니다."""
        statuses = [TaskStatus(t.status) for t in project.tasks]
        priorities = [TaskPriority(t.priority) for t in project.tasks]
        return {
            "total_tasks": len(statuses),
            "pending_tasks": statuses.count(TaskStatus.PENDING),
            "in_progress_tasks": statuses.count(TaskStatus.IN_PROGRESS),
            "completed_tasks": statuses.count(TaskStatus.DONE),
            "high_priority_tasks": priorities.count(TaskPriority.HIGH),
            "urgent_tasks": priorities.count(TaskPriority.URGENT),
        }

    def _find_project(self, project_id: int) -> models.Project:
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
        return project


def _validate_name(name: Optional[str]):
    if name is not None and not isinstance(name, str):
        raise ValueError("Project name must be a string.")
    if not name or not name.strip():
        raise ValueError("Project name is required.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"Project name must not exceed {MAX_NAME_LENGTH} characters.")


def _validate_description(description: Optional[str]) -> Optional[str]:
    if description is not None and not isinstance(description, str):
        raise ValueError("Project description must be a string.")
    return description
