import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.logging import configure_logging
from app.config.settings import get_settings
from app.database import Base, engine
from app import models  # noqa: F401
from app.routers import auth, tasks
from app.services.scheduler import AccountMaintenanceScheduler

settings = get_settings()
settings.validate()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

app = FastAPI(title="Task Manager API")

maintenance_scheduler = AccountMaintenanceScheduler(settings)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the API as {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_error(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query"))
    if error.get("type") == "missing":
        if not field:
            return "Please provide all required fields"
        return f"Please provide all required fields: {field} is missing"
    message = error.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    logger.info("Starting Task Manager API...")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Database initialization failed. Check DATABASE_URL.")
        raise
    if settings.scheduler_enabled:
        maintenance_scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Task Manager API...")
    maintenance_scheduler.stop()


# Root route
@app.get("/")
def read_root():
    return {"message": "Task Manager API"}

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/scheduler/status")
def get_scheduler_status():
    """Get scheduler status and job information"""
    return maintenance_scheduler.get_scheduler_status()
