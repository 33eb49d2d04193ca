from .user import User, Profession
from .task import Task, TaskStatus, TaskPriority
