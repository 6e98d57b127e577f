# Filename: cloudnest/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import auth as auth_router, files as files_router, folders as folders_router
from .config import settings
from .db import init_db
from .error_handlers import register_error_handlers

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug)

origins = ["*"] if settings.cors_allow_origins == "*" else [o.strip() for o in settings.cors_allow_origins.split(",")]
allow_methods = ["*"] if settings.cors_allow_methods == "*" else [m.strip() for m in settings.cors_allow_methods.split(",")]
allow_headers = ["*"] if settings.cors_allow_headers == "*" else [h.strip() for h in settings.cors_allow_headers.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=allow_methods,
    allow_headers=allow_headers,
)

register_error_handlers(app)

app.include_router(auth_router.router)
app.include_router(folders_router.router)
app.include_router(files_router.router)


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint with app version and health.
    """
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "status": "ok",
    }


@app.on_event("startup")
def on_startup():
    init_db()
