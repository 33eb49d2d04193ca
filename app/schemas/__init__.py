from .user import UserCreate, UserLogin, UserOut, VerifyEmailRequest, ForgotPasswordRequest, ResetPasswordRequest, MessageResponse
from .tokens import LoginResponse, ResetPasswordResponse
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TaskDeleted
