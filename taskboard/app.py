# taskboard/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import json
import logging
import re

# SQLAlchemy 및 의존성 임포트
from taskboard.settings import get_settings
from taskboard.database.database import SessionLocal
from taskboard.database.db_init import initialize_db
from taskboard.database.models.enums import UserRole
from taskboard.policies import AuthorizationPolicy
from taskboard.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from taskboard.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from taskboard.repositories.sqlalchemy.sqlalchemy_task_repository import SqlalchemyTaskRepository
from taskboard.repositories.sqlalchemy.sqlalchemy_comment_repository import SqlalchemyCommentRepository
from taskboard.services.auth_service import AuthService
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService
from taskboard.services.task_assignment_service import TaskAssignmentService
from taskboard.services.comment_service import CommentService
from taskboard.services.serializers import user_to_dict
from taskboard.services.exceptions import *

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object.")
    return data

def get_query_params(environ):
    return {key: values[0] for key, values in parse_qs(environ.get("QUERY_STRING", "")).items()}

def int_param(params, name, default=None):
    value = params.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Query parameter '{name}' must be an integer.")

def get_auth_token(environ):
    auth_token = environ.get('HTTP_X_AUTH_TOKEN')
    if not auth_token:
        raise TokenInvalidError("Missing 'X-Auth-Token' header.")
    return auth_token

def authenticate_request(environ):
    """X-Auth-Token 헤더를 검증하고 요청한 사용자(models.User)를 반환합니다."""
    user = environ["services"]["auth"].validate_token(get_auth_token(environ))
    # 요청 로그에 남길 사용자 ID
    environ["taskboard.user_id"] = user.id
    return user

def require_role(user, *roles):
    """라우트 단위 역할 제한. 리소스 권한 정책보다 먼저 검사됩니다."""
    if UserRole(user.role) not in roles:
        logger.warning("Role check failed: user %s with role %s", user.id, UserRole(user.role).value)
        raise PermissionDeniedError("Forbidden")

def handle_exception(e):
    error_map = {
        TokenInvalidError: "401 Unauthorized",
        AuthenticationError: "401 Unauthorized",
        PermissionDeniedError: "403 Forbidden",
        ProjectNotFoundError: "404 Not Found",
        TaskNotFoundError: "404 Not Found",
        CommentNotFoundError: "404 Not Found",
        UserNotFoundError: "404 Not Found",
        ValueError: "400 Bad Request",
        UserCreationError: "400 Bad Request",
        TaskAssignmentError: "400 Bad Request",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request")
        return "500 Internal Server Error", json.dumps({"error": "Internal Server Error"})
    if isinstance(e, PermissionDeniedError):
        # 어떤 규칙에서 거부되었는지 응답에 드러내지 않음
        return status, json.dumps({"error": "Forbidden"})
    return status, json.dumps({"error": str(e)})

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def make_application(session_factory=SessionLocal, settings=None):
    """세션 팩토리와 설정을 받아 WSGI 애플리케이션 함수를 만듭니다."""
    settings = settings or get_settings()
    policy = AuthorizationPolicy()

    def application(environ, start_response):
        path = environ.get("PATH_INFO", "")
        method = environ.get("REQUEST_METHOD", "")
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)
            project_repo = SqlalchemyProjectRepository(db_session)
            task_repo = SqlalchemyTaskRepository(db_session)
            comment_repo = SqlalchemyCommentRepository(db_session)

            assignment_service = TaskAssignmentService(user_repo, task_repo, settings["max_active_tasks"])

            # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
            environ['services'] = {
                'auth': AuthService(user_repo, settings["token_ttl_minutes"]),
                'project': ProjectService(project_repo, policy),
                'task': TaskService(project_repo, task_repo, assignment_service, policy),
                'assignment': assignment_service,
                'comment': CommentService(comment_repo, task_repo, policy),
            }

            # 3. 라우팅 및 핸들러 실행
            handler, path_args = None, []
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            db_session.rollback()
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        logger.info(
            "API request: method=%s path=%s user_id=%s ip=%s status=%s",
            method, path, environ.get("taskboard.user_id"), environ.get("REMOTE_ADDR"), status.split()[0]
        )

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def register_handler(environ, *args):
    data = get_request_data(environ)
    result = environ['services']['auth'].register(
        name=data.get('name'),
        email=data.get('email'),
        password=data.get('password'),
        role=data.get('role', UserRole.USER.value),
    )
    return '201 Created', json.dumps(result)

def login_handler(environ, *args):
    data = get_request_data(environ)
    result = environ['services']['auth'].login(data.get('email'), data.get('password'))
    return '200 OK', json.dumps(result)

def logout_handler(environ, *args):
    environ['services']['auth'].logout(get_auth_token(environ))
    return '204 No Content', ''

def me_handler(environ, *args):
    user = authenticate_request(environ)
    profile = user_to_dict(user)
    profile['task_stats'] = environ['services']['assignment'].user_task_stats(user.id)
    return '200 OK', json.dumps({"user": profile})

def list_projects_handler(environ, *args):
    user = authenticate_request(environ)
    params = get_query_params(environ)
    result = environ['services']['project'].list_projects(
        user,
        page=int_param(params, 'page', 1),
        per_page=int_param(params, 'per_page', 15),
        search=params.get('search'),
        created_by=int_param(params, 'created_by'),
    )
    return '200 OK', json.dumps(result)

def create_project_handler(environ, *args):
    user = authenticate_request(environ)
    data = get_request_data(environ)
    project = environ['services']['project'].create_project(user, data.get('name'), data.get('description'))
    return '201 Created', json.dumps(project)

def get_project_handler(environ, project_id):
    user = authenticate_request(environ)
    project = environ['services']['project'].get_project(user, int(project_id))
    return '200 OK', json.dumps(project)

def update_project_handler(environ, project_id):
    user = authenticate_request(environ)
    require_role(user, UserRole.ADMIN)
    data = get_request_data(environ)
    project = environ['services']['project'].update_project(
        user, int(project_id), name=data.get('name'), description=data.get('description')
    )
    return '200 OK', json.dumps(project)

def delete_project_handler(environ, project_id):
    user = authenticate_request(environ)
    require_role(user, UserRole.ADMIN)
    environ['services']['project'].delete_project(user, int(project_id))
    return '204 No Content', ''

def list_project_tasks_handler(environ, project_id):
    user = authenticate_request(environ)
    params = get_query_params(environ)
    tasks = environ['services']['task'].list_project_tasks(
        user,
        int(project_id),
        status=params.get('status'),
        assigned_to=int_param(params, 'assigned_to'),
        search=params.get('search'),
    )
    return '200 OK', json.dumps({"tasks": tasks})

def create_task_handler(environ, project_id):
    user = authenticate_request(environ)
    require_role(user, UserRole.ADMIN, UserRole.MANAGER)
    data = get_request_data(environ)
    task = environ['services']['task'].create_task(
        user,
        int(project_id),
        title=data.get('title'),
        description=data.get('description'),
        status=data.get('status', 'pending'),
        priority=data.get('priority', 'medium'),
        due_date=data.get('due_date'),
        assigned_to=data.get('assigned_to'),
    )
    return '201 Created', json.dumps(task)

def get_task_handler(environ, task_id):
    user = authenticate_request(environ)
    task = environ['services']['task'].get_task(user, int(task_id))
    return '200 OK', json.dumps(task)

def update_task_handler(environ, task_id):
    user = authenticate_request(environ)
    data = get_request_data(environ)
    task = environ['services']['task'].update_task(user, int(task_id), data)
    return '200 OK', json.dumps(task)

def delete_task_handler(environ, task_id):
    user = authenticate_request(environ)
    require_role(user, UserRole.ADMIN, UserRole.MANAGER)
    environ['services']['task'].delete_task(user, int(task_id))
    return '204 No Content', ''

def list_task_comments_handler(environ, task_id):
    user = authenticate_request(environ)
    comments = environ['services']['comment'].list_task_comments(user, int(task_id))
    return '200 OK', json.dumps({"comments": comments})

def create_comment_handler(environ, task_id):
    user = authenticate_request(environ)
    data = get_request_data(environ)
    comment = environ['services']['comment'].create_comment(user, int(task_id), data.get('body'))
    return '201 Created', json.dumps(comment)

def recent_comments_handler(environ, *args):
    user = authenticate_request(environ)
    params = get_query_params(environ)
    comments = environ['services']['comment'].recent_comments_for_user(user, int_param(params, 'limit', 10))
    return '200 OK', json.dumps({"comments": comments})

def get_comment_handler(environ, comment_id):
    user = authenticate_request(environ)
    comment = environ['services']['comment'].get_comment(user, int(comment_id))
    return '200 OK', json.dumps(comment)

def update_comment_handler(environ, comment_id):
    user = authenticate_request(environ)
    data = get_request_data(environ)
    comment = environ['services']['comment'].update_comment(user, int(comment_id), data.get('body'))
    return '200 OK', json.dumps(comment)

def delete_comment_handler(environ, comment_id):
    user = authenticate_request(environ)
    environ['services']['comment'].delete_comment(user, int(comment_id))
    return '204 No Content', ''

ROUTES = [
    ('POST', r'^/api/register$', register_handler),
    ('POST', r'^/api/login$', login_handler),
    ('POST', r'^/api/logout$', logout_handler),
    ('GET', r'^/api/me$', me_handler),
    ('GET', r'^/api/projects$', list_projects_handler),
    ('POST', r'^/api/projects$', create_project_handler),
    ('GET', r'^/api/projects/([0-9]+)$', get_project_handler),
    ('PUT', r'^/api/projects/([0-9]+)$', update_project_handler),
    ('DELETE', r'^/api/projects/([0-9]+)$', delete_project_handler),
    ('GET', r'^/api/projects/([0-9]+)/tasks$', list_project_tasks_handler),
    ('POST', r'^/api/projects/([0-9]+)/tasks$', create_task_handler),
    ('GET', r'^/api/tasks/([0-9]+)$', get_task_handler),
    ('PUT', r'^/api/tasks/([0-9]+)$', update_task_handler),
    ('DELETE', r'^/api/tasks/([0-9]+)$', delete_task_handler),
    ('GET', r'^/api/tasks/([0-9]+)/comments$', list_task_comments_handler),
    ('POST', r'^/api/tasks/([0-9]+)/comments$', create_comment_handler),
    ('GET', r'^/api/comments/recent$', recent_comments_handler),
    ('GET', r'^/api/comments/([0-9]+)$', get_comment_handler),
    ('PUT', r'^/api/comments/([0-9]+)$', update_comment_handler),
    ('DELETE', r'^/api/comments/([0-9]+)$', delete_comment_handler),
]

application = make_application()

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    initialize_db()
    with make_server("", settings["port"], application) as httpd:
        logger.info("Serving taskboard API on port %s...", settings["port"])
        httpd.serve_forever()

if __name__ == "__main__":
    main()
