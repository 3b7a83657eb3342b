from abc import ABC, abstractmethod
from typing import List, Optional
from taskboard.database import models

class ITaskRepository(ABC):
    @abstractmethod
    def create(self, task_model: models.Task) -> models.Task:
        """새로운 작업을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, task_id: int) -> Optional[models.Task]:
        """
        고유 ID로 특정 작업을 조회합니다.
        상위 프로젝트와 그 프로젝트의 작업 목록을 함께 로딩해야 합니다.
        """
        pass

    @abstractmethod
    def list_by_project(
        self,
        project_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[models.Task]:
        """특정 프로젝트의 작업을 최신순으로 조회합니다. 상태, 담당자, 검색어로 거를 수 있습니다."""
        pass

    @abstractmethod
    def count_by_assignee(self, user_id: int, statuses: Optional[List[str]] = None) -> int:
        """특정 사용자에게 배정된 작업 수를 셉니다. statuses를 주면 해당 상태만 셉니다."""
        pass

    @abstractmethod
    def list_ids_related_to_user(self, user_id: int) -> List[int]:
        """사용자가 만들었거나, 배정받았거나, 사용자 소유 프로젝트에 속한 작업의 ID 목록을 조회합니다."""
        pass

    @abstractmethod
    def save(self, task: models.Task) -> models.Task:
        """변경된 작업을 저장합니다."""
        pass

    @abstractmethod
    def delete(self, task: models.Task) -> bool:
        """특정 작업을 데이터베이스에서 삭제합니다. (댓글 포함)"""
        pass
