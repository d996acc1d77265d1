# app/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException

from app.config import settings
from app.core.db import init_db, close_db
from app.core.errors import AppError, InternalError, ValidationError

from app.api.v1.routers import auth, snippets, users

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

@app.middleware("http")
async def unexpected_error_guard(request: Request, call_next):
    # Anything no exception handler claimed still gets the JSON error body
    try:
        return await call_next(request)
    except Exception:
        logger.exception("[errors] unhandled failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=InternalError().to_dict())

# CORS (with Cookie), added last so it wraps the error guard
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Missing/invalid fields are a 400 ValidationError rather than FastAPI's default 422
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", []) if p != "body")
    message = f"{loc}: {first.get('msg')}" if loc else ValidationError.message
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=ValidationError(message).to_dict())

@app.exception_handler(BaseORMException)
async def orm_error_handler(request: Request, exc: BaseORMException):
    logger.exception("[errors] persistence failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=InternalError().to_dict())

@app.on_event("startup")
async def on_startup():
    await init_db()

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(snippets.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
