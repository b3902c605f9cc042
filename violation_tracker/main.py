from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from violation_tracker import model  # noqa: F401  registers the tables
from violation_tracker.config import settings
from violation_tracker.log import get_logger
from violation_tracker.router import (
    auth_router,
    students_router,
    violations_router,
    whatsapp_router,
    photos_router,
)
from violation_tracker.router.photo_store import build_photo_store
from violation_tracker.router.whatsapp_gateway import build_whatsapp_gateway

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Built once per process and shared by every request through app.state
    app.state.whatsapp_gateway = build_whatsapp_gateway(settings)
    app.state.photo_store = build_photo_store(settings)
    log.info(
        f"Gateways ready: whatsapp={type(app.state.whatsapp_gateway).__name__} "
        f"photos={type(app.state.photo_store).__name__}"
    )
    yield


app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version=settings.API_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",  # For local development
        "http://localhost:5173",  # For Vite development
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    log.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database operation failed"},
    )


app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
app.include_router(students_router, prefix="/students", tags=["Students"])
app.include_router(violations_router, prefix="/violations", tags=["Violations"])
app.include_router(whatsapp_router, prefix="/whatsapp", tags=["WhatsApp"])
app.include_router(photos_router, prefix="/photos", tags=["Photos"])

if settings.PHOTO_STORAGE == "local":
    app.mount(
        settings.PHOTO_PUBLIC_PREFIX,
        StaticFiles(directory=settings.PHOTO_UPLOAD_DIR, check_dir=False),
        name="photo-files",
    )


#####################
### Root Endpoint ###
#####################
@app.get("/")
def read_root():
    return {"Project": settings.PROJECT_NAME, "Environment": settings.ENV, "Version": settings.API_VERSION}


@app.get("/healthcheck")
def healthcheck():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
