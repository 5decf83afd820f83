import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storeadmin.api.activation import router as activation_router
from storeadmin.api.administrators import router as administrators_router
from storeadmin.api.auth import router as auth_router
from storeadmin.init_db import init_db
from storeadmin.services.errors import AdminError

logger = logging.getLogger("storeadmin.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(lifespan=lifespan)

# Let the admin panel front end call the API during local development.
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],  # includes Authorization
)


def _failure(status_code: int, error: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=headers,
    )


@app.exception_handler(AdminError)
async def admin_error_handler(request: Request, exc: AdminError) -> JSONResponse:
    headers = None
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    logger.info(
        "request_rejected",
        extra={"path": request.url.path, "kind": exc.kind.value, "status_code": exc.http_status},
    )
    return _failure(exc.http_status, exc.message, headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return _failure(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", exc_info=exc, extra={"path": request.url.path})
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


app.include_router(administrators_router)
app.include_router(activation_router)
app.include_router(auth_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
