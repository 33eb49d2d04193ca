# app/utils/dependencies.py
from fastapi import Depends
from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.database import get_db
from app.services.auth_service import AuthService
from app.services.email_service import EmailService
from app.services.task_service import TaskService


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(db, settings, mailer)


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db)
