from typing import List, Optional, Tuple
from sqlalchemy import exists, or_
from sqlalchemy.orm import Session, selectinload
from taskboard.database import models
from taskboard.repositories.interfaces import IProjectRepository

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, project_model: models.Project) -> models.Project:
        self.db.add(project_model)
        self.db.commit()
        self.db.refresh(project_model)
        return project_model

    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        return self.db.query(models.Project).options(
            selectinload(models.Project.tasks)
        ).filter(models.Project.id == project_id).first()

    def paginate(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        created_by: Optional[int] = None,
        visible_to: Optional[int] = None,
    ) -> Tuple[List[models.Project], int]:
        query = self.db.query(models.Project)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.Project.name.ilike(pattern),
                models.Project.description.ilike(pattern),
            ))

        if created_by is not None:
            query = query.filter(models.Project.created_by == created_by)

        if visible_to is not None:
            # can_access_project와 같은 조건: 소유자이거나 프로젝트 내 작업을 배정받은 사용자
            has_assignment = exists().where(
                models.Task.project_id == models.Project.id,
                models.Task.assigned_to == visible_to,
            )
            query = query.filter(or_(models.Project.created_by == visible_to, has_assignment))

        total = query.count()
        projects = query.options(selectinload(models.Project.tasks)).order_by(
            models.Project.created_at.desc(), models.Project.id.desc()
        ).offset((page - 1) * per_page).limit(per_page).all()
        return projects, total

    def save(self, project: models.Project) -> models.Project:
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project: models.Project) -> bool:
        if project:
            self.db.delete(project)
            self.db.commit()
            return True
        return False
