from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload, selectinload
from taskboard.database import models
from taskboard.repositories.interfaces import ITaskRepository

class SqlalchemyTaskRepository(ITaskRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, task_model: models.Task) -> models.Task:
        self.db.add(task_model)
        self.db.commit()
        self.db.refresh(task_model)
        return task_model

    def find_by_id(self, task_id: int) -> Optional[models.Task]:
        return self.db.query(models.Task).options(
            joinedload(models.Task.project).selectinload(models.Project.tasks)
        ).filter(models.Task.id == task_id).first()

    def list_by_project(
        self,
        project_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[models.Task]:
        query = self.db.query(models.Task).filter(models.Task.project_id == project_id)
        if status:
            query = query.filter(models.Task.status == status)
        if assigned_to is not None:
            query = query.filter(models.Task.assigned_to == assigned_to)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.Task.title.ilike(pattern),
                models.Task.description.ilike(pattern),
            ))
        return query.order_by(models.Task.created_at.desc(), models.Task.id.desc()).all()

    def count_by_assignee(self, user_id: int, statuses: Optional[List[str]] = None) -> int:
        query = self.db.query(models.Task).filter(models.Task.assigned_to == user_id)
        if statuses:
            query = query.filter(models.Task.status.in_(statuses))
        return query.count()

    def list_ids_related_to_user(self, user_id: int) -> List[int]:
        owned_project_ids = select(models.Project.id).where(models.Project.created_by == user_id)
        rows = self.db.query(models.Task.id).filter(or_(
            models.Task.created_by == user_id,
            models.Task.assigned_to == user_id,
            models.Task.project_id.in_(owned_project_ids),
        )).all()
        return [row[0] for row in rows]

    def save(self, task: models.Task) -> models.Task:
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, task: models.Task) -> bool:
        if task:
            self.db.delete(task)
            self.db.commit()
            return True
        return False
