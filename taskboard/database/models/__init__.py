from .enums import UserRole, TaskStatus, TaskPriority, ACTIVE_TASK_STATUSES
from .user import User
from .project import Project
from .task import Task
from .comment import Comment
