from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from sqlalchemy.orm import relationship
from ..database import Base
from .enums import UserRole

class User(Base):
    """
    시스템에 로그인하여 프로젝트를 만들고, 작업을 맡고, 댓글을 작성하는 사용자입니다.
    role은 admin / manager / user 중 하나이며 권한 판단의 기준이 됩니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
    )
    created_at = Column(DateTime, server_default=func.now())

    projects = relationship("Project", back_populates="creator")
    assigned_tasks = relationship("Task", foreign_keys="Task.assigned_to", back_populates="assignee")
    created_tasks = relationship("Task", foreign_keys="Task.created_by", back_populates="creator")
    comments = relationship("Comment", back_populates="author")
