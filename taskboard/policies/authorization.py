"""
프로젝트 / 작업 / 댓글에 대한 역할 및 소유권 기반 권한 정책.

모든 판단은 이미 로딩된 모델 스냅샷만 읽는 순수 함수이며, DB 조회나 상태 변경을 하지 않습니다.
따라서 여러 요청 스레드에서 동시에 호출해도 안전합니다.

판단 결과는 항상 허용(ALLOW) 또는 거부(DENY) 둘 중 하나입니다.
사용자, 역할, 상위 관계(task.project 등)가 비어 있거나 올바르지 않으면 예외 대신 거부합니다.
"""

import enum
from typing import Any, Optional, Tuple

from taskboard.database import models
from taskboard.database.models.enums import UserRole


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    @classmethod
    def of(cls, allowed: bool) -> "Decision":
        return cls.ALLOW if allowed else cls.DENY

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


class OperationClass(enum.Enum):
    ACCESS = "access"  # 조회
    MODIFY = "modify"  # 수정 / 삭제


class ModifyGround(enum.Enum):
    """작업 수정 권한을 부여한 규칙."""
    ADMIN = "admin"
    MANAGER = "manager"
    OWNER = "owner"
    # 본인에게 배정된 작업만 수정 가능한 좁은 경로. 수정 가능한 필드 범위는 호출자가 정합니다.
    ASSIGNEE = "assignee"


def _principal(user: Any) -> Optional[Tuple[UserRole, Any]]:
    if user is None:
        return None
    try:
        role = UserRole(getattr(user, "role", None))
    except ValueError:
        return None
    return role, getattr(user, "id", None)


def _matches(value: Any, user_id: Any) -> bool:
    return value is not None and user_id is not None and value == user_id


def _owns_project(user_id: Any, project: Any) -> bool:
    return project is not None and _matches(getattr(project, "created_by", None), user_id)


def _has_assignment_in(user_id: Any, project: Any) -> bool:
    if project is None:
        return False
    tasks = getattr(project, "tasks", None) or []
    return any(_matches(getattr(t, "assigned_to", None), user_id) for t in tasks)


def _created_task(user_id: Any, task: Any) -> bool:
    created_by = getattr(task, "created_by", None)
    if created_by is None:
        # 작성자 정보가 없는 작업은 상위 프로젝트 소유자를 작성자로 간주
        return _owns_project(user_id, getattr(task, "project", None))
    return _matches(created_by, user_id)


def _is_involved_manager(role: UserRole, user_id: Any, project: Any) -> bool:
    return role is UserRole.MANAGER and (
        _owns_project(user_id, project) or _has_assignment_in(user_id, project)
    )


class AuthorizationPolicy:
    """
    사용자와 리소스를 받아 조회(access) / 수정(modify) 허용 여부를 판단합니다.

    - admin은 모든 검사를 통과합니다.
    - 수정 권한이 있으면 항상 조회 권한도 있습니다. (역은 성립하지 않음)
    - 작업 배정(assigned_to)만으로는 수정 권한이 생기지 않습니다. 단, 본인에게 배정된 작업 자체는 예외입니다.
    """

    def can_access_project(self, user: models.User, project: models.Project) -> bool:
        principal = _principal(user)
        if principal is None or project is None:
            return False
        role, user_id = principal
        if role is UserRole.ADMIN:
            return True
        return _owns_project(user_id, project) or _has_assignment_in(user_id, project)

    def can_modify_project(self, user: models.User, project: models.Project) -> bool:
        principal = _principal(user)
        if principal is None or project is None:
            return False
        role, user_id = principal
        return role is UserRole.ADMIN or _owns_project(user_id, project)

    def can_access_task(self, user: models.User, task: models.Task) -> bool:
        principal = _principal(user)
        if principal is None or task is None:
            return False
        role, user_id = principal
        if role is UserRole.ADMIN:
            return True

        project = getattr(task, "project", None)
        return (
            _created_task(user_id, task)
            or _matches(getattr(task, "assigned_to", None), user_id)
            or _owns_project(user_id, project)
            or _is_involved_manager(role, user_id, project)
        )

    def can_modify_task(self, user: models.User, task: models.Task) -> bool:
        return self.task_modify_ground(user, task) is not None

    def task_modify_ground(self, user: models.User, task: models.Task) -> Optional[ModifyGround]:
        """
        작업 수정을 허용한 규칙을 반환합니다. 거부되면 None을 반환합니다.

        ASSIGNEE가 반환되면 본인에게 배정되었다는 이유만으로 허용된 것이므로,
        호출자는 이를 제한된 수정으로 다뤄야 합니다.
        """
        principal = _principal(user)
        if principal is None or task is None:
            return None
        role, user_id = principal
        if role is UserRole.ADMIN:
            return ModifyGround.ADMIN

        project = getattr(task, "project", None)
        if _is_involved_manager(role, user_id, project):
            return ModifyGround.MANAGER
        if _created_task(user_id, task) or _owns_project(user_id, project):
            return ModifyGround.OWNER
        if _matches(getattr(task, "assigned_to", None), user_id):
            return ModifyGround.ASSIGNEE
        return None

    def can_access_comment(self, user: models.User, comment: models.Comment) -> bool:
        principal = _principal(user)
        if principal is None or comment is None:
            return False
        role, user_id = principal
        if role is UserRole.ADMIN or _matches(getattr(comment, "user_id", None), user_id):
            return True

        task = getattr(comment, "task", None)
        if task is None:
            return False
        return (
            _matches(getattr(task, "created_by", None), user_id)
            or _matches(getattr(task, "assigned_to", None), user_id)
            or _owns_project(user_id, getattr(task, "project", None))
        )

    def can_modify_comment(self, user: models.User, comment: models.Comment) -> bool:
        principal = _principal(user)
        if principal is None or comment is None:
            return False
        role, user_id = principal
        return role is UserRole.ADMIN or _matches(getattr(comment, "user_id", None), user_id)

    def decide(self, user: models.User, resource: Any, operation: OperationClass) -> Decision:
        """리소스 종류와 작업 종류에 맞는 검사를 골라 실행합니다. 알 수 없는 리소스는 거부합니다."""
        checks = (
            (models.Project, self.can_access_project, self.can_modify_project),
            (models.Task, self.can_access_task, self.can_modify_task),
            (models.Comment, self.can_access_comment, self.can_modify_comment),
        )
        for resource_type, access_check, modify_check in checks:
            if isinstance(resource, resource_type):
                check = access_check if operation is OperationClass.ACCESS else modify_check
                return Decision.of(check(user, resource))
        return Decision.DENY
