import enum


class UserRole(str, enum.Enum):
    """
    시스템 전역 역할. 이 세 값 외의 역할은 존재하지 않습니다.
    요청 경계(회원가입, DB 로딩)에서 검증되며, 권한 정책 내부에서는 문자열이 아닌 이 열거형으로만 다룹니다.
    """
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# 담당자의 "진행 중" 작업 수를 셀 때 포함되는 상태
ACTIVE_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
