from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.config.settings import get_settings

settings = get_settings()


def _connect_args(database_url: str, sslmode: str = None) -> dict:
    if database_url.startswith("sqlite"):
        # Route handlers run in a threadpool; SQLite must accept cross-thread use
        return {"check_same_thread": False}
    if sslmode:
        # PostgreSQL on Render or similar needs sslmode=require
        return {"sslmode": sslmode}
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=_connect_args(settings.database_url, settings.database_sslmode),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Import wherever a DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
