# tests/policies/test_authorization.py
import pytest

from taskboard.database import models
from taskboard.database.models.enums import UserRole
from taskboard.policies import AuthorizationPolicy, Decision, ModifyGround, OperationClass

# ===================================================================
#  Fixture 설정
# ===================================================================

def make_user(user_id: int, role=UserRole.USER) -> models.User:
    return models.User(id=user_id, name=f"user-{user_id}", email=f"user{user_id}@example.com", role=role)

@pytest.fixture
def policy() -> AuthorizationPolicy:
    return AuthorizationPolicy()

@pytest.fixture
def world():
    """
    권한 판단에 쓰일 기본 시나리오를 구성합니다.

    - owner(user)가 project를 만들었고,
    - manager가 task를 만들어 assignee(user)에게 배정했고,
    - other_task는 involved_manager에게 배정되어 있으며,
    - author(user)가 task에 comment를 달았습니다.
    - stranger(user), outside_manager는 아무 관계가 없습니다.
    """
    users = {
        "admin": make_user(1, UserRole.ADMIN),
        "owner": make_user(2),
        "creator": make_user(3, UserRole.MANAGER),
        "assignee": make_user(4),
        "involved_manager": make_user(5, UserRole.MANAGER),
        "author": make_user(6),
        "stranger": make_user(7),
        "outside_manager": make_user(8, UserRole.MANAGER),
    }
    project = models.Project(id=10, name="Website", created_by=users["owner"].id)
    task = models.Task(
        id=20, title="Landing page", project=project,
        assigned_to=users["assignee"].id, created_by=users["creator"].id,
    )
    other_task = models.Task(
        id=21, title="Deploy", project=project,
        assigned_to=users["involved_manager"].id, created_by=users["owner"].id,
    )
    comment = models.Comment(id=30, body="Looks good", task=task, user_id=users["author"].id)
    return {"users": users, "project": project, "task": task, "other_task": other_task, "comment": comment}

# ===================================================================
#  전역 속성(Properties) 테스트
# ===================================================================
class TestGlobalProperties:
    @pytest.mark.parametrize("resource_key", ["project", "task", "other_task", "comment"])
    @pytest.mark.parametrize("operation", list(OperationClass))
    def test_admin_is_allowed_everything(self, policy, world, resource_key, operation):
        """admin은 모든 리소스에 대해 조회/수정이 허용되어야 합니다."""
        decision = policy.decide(world["users"]["admin"], world[resource_key], operation)
        assert decision is Decision.ALLOW

    @pytest.mark.parametrize("resource_key", ["project", "task", "other_task", "comment"])
    def test_modify_implies_access(self, policy, world, resource_key):
        """수정 권한이 있는 모든 사용자는 조회 권한도 가져야 합니다."""
        resource = world[resource_key]
        for user in world["users"].values():
            if policy.decide(user, resource, OperationClass.MODIFY).allowed:
                assert policy.decide(user, resource, OperationClass.ACCESS).allowed, user.id

    def test_comment_modify_only_for_admin_or_author(self, policy, world):
        """댓글 수정은 admin 또는 작성자에게만 허용됩니다. 다른 근거로는 허용되지 않습니다."""
        comment = world["comment"]
        allowed = {u.id for u in world["users"].values() if policy.can_modify_comment(u, comment)}
        assert allowed == {world["users"]["admin"].id, world["users"]["author"].id}

    def test_unrelated_users_cannot_access_task(self, policy, world):
        """소유자, 배정자, 관여 중인 manager가 아닌 사용자는 작업을 조회할 수 없습니다."""
        task = world["task"]
        assert policy.can_access_task(world["users"]["stranger"], task) is False
        assert policy.can_access_task(world["users"]["outside_manager"], task) is False
        assert policy.can_access_task(world["users"]["author"], task) is False

# ===================================================================
#  프로젝트(Project) 테스트
# ===================================================================
class TestProjectPolicy:
    def test_admin_can_access_and_modify_other_users_project(self, policy, world):
        admin, project = world["users"]["admin"], world["project"]
        assert policy.can_access_project(admin, project) is True
        assert policy.can_modify_project(admin, project) is True

    def test_owner_can_access_and_modify(self, policy, world):
        owner, project = world["users"]["owner"], world["project"]
        assert policy.can_access_project(owner, project) is True
        assert policy.can_modify_project(owner, project) is True

    def test_assignee_can_access_but_not_modify(self, policy, world):
        """프로젝트 내 작업을 배정받은 사용자는 조회만 가능하고 수정은 불가합니다."""
        assignee, project = world["users"]["assignee"], world["project"]
        assert policy.can_access_project(assignee, project) is True
        assert policy.can_modify_project(assignee, project) is False

    def test_stranger_without_assignment_is_denied(self, policy, world):
        stranger, project = world["users"]["stranger"], world["project"]
        assert policy.can_access_project(stranger, project) is False
        assert policy.can_modify_project(stranger, project) is False

    def test_task_creator_without_assignment_cannot_access_project(self, policy, world):
        """작업을 만든 것만으로는 프로젝트 조회 권한이 생기지 않습니다."""
        assert policy.can_access_project(world["users"]["creator"], world["project"]) is False

# ===================================================================
#  작업(Task) 테스트
# ===================================================================
class TestTaskPolicy:
    def test_assignee_gets_limited_modify(self, policy, world):
        assignee, task = world["users"]["assignee"], world["task"]
        assert policy.can_access_task(assignee, task) is True
        assert policy.can_modify_task(assignee, task) is True
        assert policy.task_modify_ground(assignee, task) is ModifyGround.ASSIGNEE

    def test_assignee_cannot_modify_sibling_task(self, policy, world):
        """일반 사용자는 같은 프로젝트라도 본인에게 배정되지 않은 작업은 수정할 수 없습니다."""
        assignee, other_task = world["users"]["assignee"], world["other_task"]
        assert policy.can_access_task(assignee, other_task) is False
        assert policy.can_modify_task(assignee, other_task) is False

    def test_project_owner_can_modify_any_task(self, policy, world):
        owner = world["users"]["owner"]
        for task in (world["task"], world["other_task"]):
            assert policy.can_access_task(owner, task) is True
            assert policy.task_modify_ground(owner, task) is ModifyGround.OWNER

    def test_task_creator_can_access_and_modify(self, policy, world):
        """작업 작성자(manager)는 프로젝트에 관여하지 않더라도 자신이 만든 작업은 수정할 수 있습니다."""
        creator, task = world["users"]["creator"], world["task"]
        assert policy.can_access_task(creator, task) is True
        assert policy.task_modify_ground(creator, task) is ModifyGround.OWNER

    def test_involved_manager_can_modify_any_task_in_project(self, policy, world):
        """다른 작업을 배정받아 프로젝트에 관여 중인 manager는 프로젝트의 모든 작업을 수정할 수 있습니다."""
        manager, task = world["users"]["involved_manager"], world["task"]
        assert policy.can_access_task(manager, task) is True
        assert policy.task_modify_ground(manager, task) is ModifyGround.MANAGER

    def test_outside_manager_is_denied(self, policy, world):
        manager, task = world["users"]["outside_manager"], world["task"]
        assert policy.can_modify_task(manager, task) is False
        assert policy.task_modify_ground(manager, task) is None

    def test_missing_created_by_falls_back_to_project_owner(self, policy):
        owner, stranger = make_user(1), make_user(2)
        project = models.Project(id=1, name="Legacy", created_by=owner.id)
        task = models.Task(id=1, title="Old task", project=project, created_by=None)
        assert policy.can_access_task(owner, task) is True
        assert policy.can_access_task(stranger, task) is False

# ===================================================================
#  댓글(Comment) 테스트
# ===================================================================
class TestCommentPolicy:
    def test_author_can_access_and_modify(self, policy, world):
        author, comment = world["users"]["author"], world["comment"]
        assert policy.can_access_comment(author, comment) is True
        assert policy.can_modify_comment(author, comment) is True

    def test_task_assignee_can_read_but_not_modify(self, policy, world):
        """작업 배정자는 다른 사람이 쓴 댓글을 볼 수 있지만 수정할 수는 없습니다."""
        assignee, comment = world["users"]["assignee"], world["comment"]
        assert policy.can_access_comment(assignee, comment) is True
        assert policy.can_modify_comment(assignee, comment) is False

    def test_task_creator_and_project_owner_can_read(self, policy, world):
        comment = world["comment"]
        for key in ("creator", "owner"):
            assert policy.can_access_comment(world["users"][key], comment) is True
            assert policy.can_modify_comment(world["users"][key], comment) is False

    def test_stranger_is_denied(self, policy, world):
        stranger, comment = world["users"]["stranger"], world["comment"]
        assert policy.can_access_comment(stranger, comment) is False
        assert policy.can_modify_comment(stranger, comment) is False

# ===================================================================
#  불완전한 입력(Fail-closed) 테스트
# ===================================================================
class TestFailClosed:
    def test_missing_user_is_denied(self, policy, world):
        assert policy.can_access_project(None, world["project"]) is False
        assert policy.task_modify_ground(None, world["task"]) is None
        assert policy.decide(None, world["comment"], OperationClass.ACCESS) is Decision.DENY

    def test_unknown_role_is_denied_even_for_owner(self, policy, world):
        """알 수 없는 역할 값은 소유자라 하더라도 모든 검사를 거부합니다."""
        rogue_owner = models.User(id=world["users"]["owner"].id, role="superuser")
        assert policy.can_access_project(rogue_owner, world["project"]) is False
        assert policy.can_modify_task(rogue_owner, world["task"]) is False

    def test_missing_resource_is_denied(self, policy, world):
        admin = world["users"]["admin"]
        assert policy.can_access_project(admin, None) is False
        assert policy.can_modify_task(admin, None) is False
        assert policy.can_access_comment(admin, None) is False

    def test_task_without_project_denies_project_based_rules(self, policy):
        """상위 프로젝트가 로딩되지 않은 작업은 프로젝트 기반 규칙이 모두 거부되고 예외도 발생하지 않습니다."""
        manager, assignee = make_user(1, UserRole.MANAGER), make_user(2)
        task = models.Task(id=1, title="Orphan", project=None, assigned_to=assignee.id, created_by=None)
        assert policy.can_access_task(manager, task) is False
        assert policy.can_modify_task(manager, task) is False
        # 배정 규칙은 상위 프로젝트 없이도 판단 가능
        assert policy.can_access_task(assignee, task) is True

    def test_comment_without_task_only_allows_author(self, policy):
        author, other = make_user(1), make_user(2)
        comment = models.Comment(id=1, body="hi", task=None, user_id=author.id)
        assert policy.can_access_comment(author, comment) is True
        assert policy.can_access_comment(other, comment) is False

    def test_unknown_resource_type_is_denied(self, policy, world):
        admin = world["users"]["admin"]
        assert policy.decide(admin, object(), OperationClass.ACCESS) is Decision.DENY

# ===================================================================
#  시나리오 테스트
# ===================================================================
class TestScenarios:
    def test_assigned_user_can_access_project_but_not_modify(self, policy):
        u1, u2 = make_user(1), make_user(2)
        project = models.Project(id=1, name="P", created_by=u1.id)
        assert policy.can_access_project(u2, project) is False

        models.Task(id=1, title="T", project=project, assigned_to=u2.id, created_by=u1.id)
        assert policy.can_access_project(u2, project) is True
        assert policy.can_modify_project(u2, project) is False

    def test_manager_with_assignment_can_modify_every_task(self, policy):
        owner, manager = make_user(1), make_user(2, UserRole.MANAGER)
        project = models.Project(id=1, name="P", created_by=owner.id)
        models.Task(id=1, title="Mine", project=project, assigned_to=manager.id, created_by=owner.id)
        other = models.Task(id=2, title="Theirs", project=project, assigned_to=None, created_by=owner.id)
        assert all(policy.can_modify_task(manager, t) for t in project.tasks)
        assert policy.can_modify_task(manager, other) is True

    def test_comment_visible_to_assignee_but_only_author_modifies(self, policy):
        owner, u3, u4 = make_user(1), make_user(3), make_user(4)
        project = models.Project(id=1, name="P", created_by=owner.id)
        task = models.Task(id=1, title="T", project=project, assigned_to=u4.id, created_by=owner.id)
        comment = models.Comment(id=1, body="note", task=task, user_id=u3.id)
        assert policy.can_access_comment(u4, comment) is True
        assert policy.can_modify_comment(u4, comment) is False
