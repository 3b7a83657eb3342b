# tests/services/test_project_service.py
import pytest
from unittest.mock import MagicMock, ANY

from taskboard.services.project_service import ProjectService
from taskboard.services.exceptions import *
from taskboard.repositories.interfaces import IProjectRepository
from taskboard.database import models
from taskboard.database.models.enums import UserRole, TaskStatus, TaskPriority

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_project_repo() -> MagicMock:
    """IProjectRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=IProjectRepository)

@pytest.fixture
def project_service(mock_project_repo: MagicMock) -> ProjectService:
    return ProjectService(mock_project_repo)

@pytest.fixture
def owner() -> models.User:
    return models.User(id=1, name="Owner", email="owner@example.com", role=UserRole.USER)

@pytest.fixture
def outsider() -> models.User:
    return models.User(id=2, name="Outsider", email="out@example.com", role=UserRole.USER)

@pytest.fixture
def admin() -> models.User:
    return models.User(id=3, name="Admin", email="admin@example.com", role=UserRole.ADMIN)

@pytest.fixture
def project(owner: models.User) -> models.Project:
    project = models.Project(id=10, name="Website", description="Company site", created_by=owner.id)
    models.Task(id=1, title="a", project=project, status=TaskStatus.PENDING, priority=TaskPriority.HIGH)
    models.Task(id=2, title="b", project=project, status=TaskStatus.IN_PROGRESS, priority=TaskPriority.URGENT)
    models.Task(id=3, title="c", project=project, status=TaskStatus.DONE, priority=TaskPriority.LOW)
    models.Task(id=4, title="d", project=project, status=TaskStatus.DONE, priority=TaskPriority.HIGH)
    return project

# ===================================================================
#  생성 / 목록(Create & List) 테스트
# ===================================================================
class TestCreateAndList:
    def test_create_project_sets_owner(self, project_service: ProjectService, mock_project_repo: MagicMock, owner):
        """프로젝트를 만든 사용자가 created_by로 기록되는지 테스트합니다."""
        # === Arrange ===
        mock_project_repo.create.side_effect = lambda p: models.Project(
            id=5, name=p.name, description=p.description, created_by=p.created_by
        )

        # === Act ===
        result = project_service.create_project(owner, "  New project  ", "desc")

        # === Assert ===
        assert result["id"] == 5
        assert result["name"] == "New project"
        assert result["created_by"] == owner.id
        mock_project_repo.create.assert_called_once_with(ANY)

    def test_create_project_requires_name(self, project_service: ProjectService, mock_project_repo: MagicMock, owner):
        with pytest.raises(ValueError):
            project_service.create_project(owner, "   ")
        mock_project_repo.create.assert_not_called()

    @pytest.mark.parametrize("name, description", [(123, None), (["x"], None), ("Docs", {"text": "x"})])
    def test_create_project_rejects_non_string_fields(self, project_service: ProjectService, mock_project_repo: MagicMock, owner, name, description):
        with pytest.raises(ValueError, match="must be a string"):
            project_service.create_project(owner, name, description)
        mock_project_repo.create.assert_not_called()

    def test_list_projects_scopes_non_admin(self, project_service: ProjectService, mock_project_repo: MagicMock, owner, project):
        """일반 사용자는 본인과 관련된 프로젝트만 조회하도록 visible_to가 전달되어야 합니다."""
        mock_project_repo.paginate.return_value = ([project], 16)

        result = project_service.list_projects(owner, page=2, per_page=5)

        mock_project_repo.paginate.assert_called_once_with(2, 5, search=None, created_by=None, visible_to=owner.id)
        assert result["projects"][0]["id"] == project.id
        assert result["pagination"] == {
            "current_page": 2,
            "per_page": 5,
            "total": 16,
            "total_pages": 4,
            "has_next_page": True,
            "has_previous_page": True,
        }

    def test_list_projects_admin_sees_everything(self, project_service: ProjectService, mock_project_repo: MagicMock, admin):
        mock_project_repo.paginate.return_value = ([], 0)

        project_service.list_projects(admin, search="site")

        mock_project_repo.paginate.assert_called_once_with(1, 15, search="site", created_by=None, visible_to=None)

# ===================================================================
#  조회 / 수정 / 삭제(Get, Update, Delete) 테스트
# ===================================================================
class TestProjectAccess:
    def test_get_project_returns_statistics(self, project_service: ProjectService, mock_project_repo: MagicMock, owner, project):
        mock_project_repo.find_by_id.return_value = project

        result = project_service.get_project(owner, project.id)

        assert len(result["tasks"]) == 4
        assert result["statistics"] == {
            "total_tasks": 4,
            "pending_tasks": 1,
            "in_progress_tasks": 1,
            "completed_tasks": 2,
            "high_priority_tasks": 2,
            "urgent_tasks": 1,
        }

    def test_get_project_denied_for_outsider(self, project_service: ProjectService, mock_project_repo: MagicMock, outsider, project):
        mock_project_repo.find_by_id.return_value = project

        with pytest.raises(PermissionDeniedError):
            project_service.get_project(outsider, project.id)

    def test_get_missing_project_raises_not_found(self, project_service: ProjectService, mock_project_repo: MagicMock, admin):
        """존재하지 않는 프로젝트는 권한 판단 이전에 ProjectNotFoundError가 발생해야 합니다."""
        mock_project_repo.find_by_id.return_value = None

        with pytest.raises(ProjectNotFoundError):
            project_service.get_project(admin, 999)

    def test_update_project_by_owner(self, project_service: ProjectService, mock_project_repo: MagicMock, owner, project):
        mock_project_repo.find_by_id.return_value = project
        mock_project_repo.save.side_effect = lambda p: p

        result = project_service.update_project(owner, project.id, name="Renamed")

        assert result["name"] == "Renamed"
        # 검증: description은 None이 전달되었으므로 그대로 유지
        assert result["description"] == "Company site"
        mock_project_repo.save.assert_called_once_with(project)

    def test_assignee_cannot_update_project(self, project_service: ProjectService, mock_project_repo: MagicMock, outsider, project):
        """작업을 배정받은 사용자는 프로젝트를 조회할 수 있지만 수정할 수는 없습니다."""
        project.tasks[0].assigned_to = outsider.id
        mock_project_repo.find_by_id.return_value = project

        project_service.get_project(outsider, project.id)
        with pytest.raises(PermissionDeniedError):
            project_service.update_project(outsider, project.id, name="Hijacked")
        mock_project_repo.save.assert_not_called()

    def test_delete_project_by_admin(self, project_service: ProjectService, mock_project_repo: MagicMock, admin, project):
        mock_project_repo.find_by_id.return_value = project

        assert project_service.delete_project(admin, project.id) is True
        mock_project_repo.delete.assert_called_once_with(project)

    def test_delete_project_denied_for_outsider(self, project_service: ProjectService, mock_project_repo: MagicMock, outsider, project):
        mock_project_repo.find_by_id.return_value = project

        with pytest.raises(PermissionDeniedError):
            project_service.delete_project(outsider, project.id)
        mock_project_repo.delete.assert_not_called()
