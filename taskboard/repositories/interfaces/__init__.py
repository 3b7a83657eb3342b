from .user import IUserRepository
from .project import IProjectRepository
from .task import ITaskRepository
from .comment import ICommentRepository
