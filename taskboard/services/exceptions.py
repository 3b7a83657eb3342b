# taskboard/services/exceptions.py

# --- General Exceptions ---
class ProjectNotFoundError(Exception):
    """프로젝트를 찾을 수 없을 때"""
    pass

class TaskNotFoundError(Exception):
    """작업을 찾을 수 없을 때"""
    pass

class CommentNotFoundError(Exception):
    """댓글을 찾을 수 없을 때"""
    pass

class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

# --- Creation/Validation Exceptions ---
class UserCreationError(Exception):
    """사용자 생성 실패 시 (이메일 중복 등)"""
    pass

class TaskAssignmentError(Exception):
    """작업을 해당 사용자에게 배정할 수 없을 때"""
    pass

# --- Auth Exceptions ---
class TokenInvalidError(Exception):
    """토큰이 유효하지 않거나 없을 때"""
    pass

class AuthenticationError(Exception):
    """사용자 자격 증명 실패 시"""
    pass

class PermissionDeniedError(Exception):
    """
    권한 정책이 요청을 거부했을 때.
    메시지는 어떤 규칙에서 거부되었는지 드러내지 않아야 합니다.
    """
    pass
