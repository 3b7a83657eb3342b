from abc import ABC, abstractmethod
from typing import List, Optional
from taskboard.database import models

class ICommentRepository(ABC):
    @abstractmethod
    def create(self, comment_model: models.Comment) -> models.Comment:
        """새로운 댓글을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, comment_id: int) -> Optional[models.Comment]:
        """고유 ID로 특정 댓글을 조회합니다. 상위 작업과 프로젝트를 함께 로딩해야 합니다."""
        pass

    @abstractmethod
    def list_by_task(self, task_id: int) -> List[models.Comment]:
        """특정 작업의 댓글을 작성 순서대로 조회합니다."""
        pass

    @abstractmethod
    def list_recent_for_tasks(self, task_ids: List[int], limit: int = 10) -> List[models.Comment]:
        """여러 작업에 달린 댓글 중 최근 것부터 limit 개를 조회합니다."""
        pass

    @abstractmethod
    def save(self, comment: models.Comment) -> models.Comment:
        """변경된 댓글을 저장합니다."""
        pass

    @abstractmethod
    def delete(self, comment: models.Comment) -> bool:
        """특정 댓글을 데이터베이스에서 삭제합니다."""
        pass
