from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from taskboard.database import models
from taskboard.repositories.interfaces import ICommentRepository

class SqlalchemyCommentRepository(ICommentRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, comment_model: models.Comment) -> models.Comment:
        self.db.add(comment_model)
        self.db.commit()
        self.db.refresh(comment_model)
        return comment_model

    def find_by_id(self, comment_id: int) -> Optional[models.Comment]:
        return self.db.query(models.Comment).options(
            joinedload(models.Comment.task).joinedload(models.Task.project)
        ).filter(models.Comment.id == comment_id).first()

    def list_by_task(self, task_id: int) -> List[models.Comment]:
        return self.db.query(models.Comment).filter(
            models.Comment.task_id == task_id
        ).order_by(models.Comment.created_at.asc(), models.Comment.id.asc()).all()

    def list_recent_for_tasks(self, task_ids: List[int], limit: int = 10) -> List[models.Comment]:
        if not task_ids:
            return []
        return self.db.query(models.Comment).filter(
            models.Comment.task_id.in_(task_ids)
        ).order_by(models.Comment.created_at.desc(), models.Comment.id.desc()).limit(limit).all()

    def save(self, comment: models.Comment) -> models.Comment:
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete(self, comment: models.Comment) -> bool:
        if comment:
            self.db.delete(comment)
            self.db.commit()
            return True
        return False
