# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.db import init_db, close_db
from app.core.errors import AccountError, ServerError
from app.core.bootstrap import ensure_default_admin
from app.services.factory import build_services

from app.api.v1.routers import auth, cart

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s : %s", request.method, request.url.path)
    return await call_next(request)

@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError):
    if exc.status_code >= 500:
        logger.error("[%s %s] %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are reported like any other validation failure
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"Invalid value for {field}"},
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[%s %s] unhandled error", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ServerError("Internal server error").to_body())

@app.on_event("startup")
async def on_startup():
    # Fails before serving anything when JWT_SECRET is missing
    app.state.accounts = build_services(settings)
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin(app.state.accounts.store, settings)

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router)
app.include_router(cart.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
