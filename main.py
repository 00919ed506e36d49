import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.exceptions import SchedulingError
from core.logging_config import setup_logging

from auth.routes.auth_router import auth_router
from user.router import user_router
from shift.router import shift_router
import models_bootstrap

setup_logging()
logger = logging.getLogger(__name__)

openapi_tags = [
    {
        "name": "Shifts",
        "description": "Shift scheduling, registration and approval",
    },
    {
        "name": "Users",
        "description": "User operations",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(title=settings.PROJECT_NAME, openapi_tags=openapi_tags)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(SchedulingError)
def scheduling_error_handler(request: Request, exc: SchedulingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Malformed request bodies/params are client errors: 400, not FastAPI's 422
@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


app.include_router(auth_router, prefix="/api")
app.include_router(user_router, prefix="/api")
app.include_router(shift_router, prefix="/api")


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}
