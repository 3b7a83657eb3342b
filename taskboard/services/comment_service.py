import logging
from typing import Dict, Any, List, Optional

from taskboard.database import models
from taskboard.policies import AuthorizationPolicy
from taskboard.repositories.interfaces import ICommentRepository, ITaskRepository
from taskboard.services.exceptions import (
    TaskNotFoundError, CommentNotFoundError, PermissionDeniedError
)
from taskboard.services.serializers import comment_to_dict

logger = logging.getLogger(__name__)

MAX_BODY_LENGTH = 1000
MAX_RECENT_LIMIT = 50


class CommentService:
    """작업 댓글의 작성, 조회, 수정, 삭제 서비스를 제공합니다."""

    def __init__(
        self,
        comment_repo: ICommentRepository,
        task_repo: ITaskRepository,
        policy: Optional[AuthorizationPolicy] = None,
    ):
        self.comment_repo = comment_repo
        self.task_repo = task_repo
        self.policy = policy or AuthorizationPolicy()

    def list_task_comments(self, user: models.User, task_id: int) -> List[Dict[str, Any]]:
        """
        작업의 댓글을 작성 순서대로 조회합니다. 작업 조회 권한이 필요합니다.

        Raises:
            TaskNotFoundError: 해당 ID의 작업을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 작업에 접근할 수 없을 때.
        """
        task = self._find_accessible_task(user, task_id)
        return [comment_to_dict(c) for c in self.comment_repo.list_by_task(task.id)]

    def create_comment(self, user: models.User, task_id: int, body: str) -> Dict[str, Any]:
        """
        작업에 댓글을 작성합니다. 작업 조회 권한이 있는 사용자만 작성할 수 있습니다.

        Raises:
            TaskNotFoundError: 해당 ID의 작업을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 작업에 접근할 수 없을 때.
            ValueError: 본문이 비어 있거나 너무 길 때.
        """
        task = self._find_accessible_task(user, task_id)
        new_comment = models.Comment(task_id=task.id, user_id=user.id, body=_validate_body(body))
        created_comment = self.comment_repo.create(new_comment)
        logger.info("Comment created: comment_id=%s task_id=%s user_id=%s", created_comment.id, task.id, user.id)
        return comment_to_dict(created_comment)

    def get_comment(self, user: models.User, comment_id: int) -> Dict[str, Any]:
        comment = self._find_comment(comment_id)
        if not self.policy.can_access_comment(user, comment):
            logger.warning("Access denied: user %s attempted to access comment %s", user.id, comment.id)
            raise PermissionDeniedError("Access denied to this comment.")
        return comment_to_dict(comment)

    def update_comment(self, user: models.User, comment_id: int, body: str) -> Dict[str, Any]:
        """
        댓글 본문을 수정합니다. 작성자 본인 또는 admin만 가능합니다.

        Raises:
            CommentNotFoundError: 해당 ID의 댓글을 찾을 수 없을 때.
            PermissionDeniedError: 사용자가 댓글을 수정할 수 없을 때.
            ValueError: 본문이 비어 있거나 너무 길 때.
        """
        comment = self._find_comment(comment_id)
        if not self.policy.can_modify_comment(user, comment):
            logger.warning("Modify denied: user %s attempted to update comment %s", user.id, comment.id)
            raise PermissionDeniedError("You are not authorized to update this comment.")

        comment.body = _validate_body(body)
        updated_comment = self.comment_repo.save(comment)
        logger.info("Comment updated: comment_id=%s user_id=%s", comment.id, user.id)
        return comment_to_dict(updated_comment)

    def delete_comment(self, user: models.User, comment_id: int) -> bool:
        comment = self._find_comment(comment_id)
        if not self.policy.can_modify_comment(user, comment):
            logger.warning("Modify denied: user %s attempted to delete comment %s", user.id, comment.id)
            raise PermissionDeniedError("You are not authorized to delete this comment.")

        self.comment_repo.delete(comment)
        logger.info("Comment deleted: comment_id=%s user_id=%s", comment_id, user.id)
        return True

    def recent_comments_for_user(self, user: models.User, limit: int = 10) -> List[Dict[str, Any]]:
        """사용자가 만들었거나, 배정받았거나, 소유한 프로젝트에 속한 작업의 최근 댓글을 조회합니다."""
        limit = min(max(limit, 1), MAX_RECENT_LIMIT)
        task_ids = self.task_repo.list_ids_related_to_user(user.id)
        comments = self.comment_repo.list_recent_for_tasks(sorted(set(task_ids)), limit)
        return [comment_to_dict(c) for c in comments]

    def _find_accessible_task(self, user: models.User, task_id: int) -> models.Task:
        task = self.task_repo.find_by_id(task_id)
        if not task:
            raise TaskNotFoundError(f"Task with id '{task_id}' not found.")
        if not self.policy.can_access_task(user, task):
            logger.warning("Access denied: user %s attempted to access comments of task %s", user.id, task.id)
            raise PermissionDeniedError("Access denied to this task.")
        return task

    def _find_comment(self, comment_id: int) -> models.Comment:
        comment = self.comment_repo.find_by_id(comment_id)
        if not comment:
            raise CommentNotFoundError(f"Comment with id '{comment_id}' not found.")
        return comment


def _validate_body(body: Optional[str]) -> str:
    if body is not None and not isinstance(body, str):
        raise ValueError("Comment body must be a string.")
    if not body or not body.strip():
        raise ValueError("Comment body is required.")
    if len(body) > MAX_BODY_LENGTH:
        raise ValueError(f"Comment body must not exceed {MAX_BODY_LENGTH} characters.")
    return body
