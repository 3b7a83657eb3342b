from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from taskboard.database import models

class IProjectRepository(ABC):
    @abstractmethod
    def create(self, project_model: models.Project) -> models.Project:
        """새로운 프로젝트를 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        """
        고유 ID로 특정 프로젝트를 조회합니다.
        권한 판단에 필요한 tasks 관계를 함께 로딩해야 합니다.
        """
        pass

    @abstractmethod
    def paginate(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        created_by: Optional[int] = None,
        visible_to: Optional[int] = None,
    ) -> Tuple[List[models.Project], int]:
        """
        조건에 맞는 프로젝트를 최신순으로 페이지 단위 조회합니다.

        Args:
            page: 1부터 시작하는 페이지 번호.
            per_page: 페이지당 항목 수.
            search: 이름 또는 설명에 포함될 문자열.
            created_by: 지정 시 해당 사용자가 만든 프로젝트만 조회.
            visible_to: 지정 시 해당 사용자가 만들었거나 작업을 배정받은 프로젝트만 조회.

        Returns:
            (해당 페이지의 프로젝트 리스트, 전체 개수) 튜플.
        """
        pass

    @abstractmethod
    def save(self, project: models.Project) -> models.Project:
        """변경된 프로젝트를 저장합니다."""
        pass

    @abstractmethod
    def delete(self, project: models.Project) -> bool:
        """특정 프로젝트를 데이터베이스에서 삭제합니다. (소속 작업, 댓글 포함)"""
        pass
