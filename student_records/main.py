from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.responses import JSONResponse

import student_records.db.base  # noqa: F401
from student_records.api.main import api_router
from student_records.core.errors import (
    NotFound,
    ServerError,
    ServiceError,
    ValidationFailed,
)
from student_records.core.logging import configure_logging, get_logger
from student_records.core.settings import settings
from student_records.middlewares.telemetry import RequestContextMiddleware
from student_records.version import APP_VERSION, BUILD_TIME_UTC, GIT_SHA

configure_logging(json=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(debug=settings.DEBUG, title="Student Records", version=APP_VERSION)

# --- Middlewares de contexto/log
app.add_middleware(RequestContextMiddleware)

# --- CORS
allowed_origins = []
for host in settings.ALLOWED_HOSTS.split(","):
    _host = host.strip()
    if not _host:
        continue
    # aceita tanto com quanto sem protocolo
    if _host.startswith("http"):
        allowed_origins.append(_host)
    else:
        allowed_origins.append(f"http://{_host}")
        allowed_origins.append(f"https://{_host}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=(allowed_origins or ["*"]) if settings.DEBUG else allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# --- Segurança: HTTPS only em prod
if settings.APP_ENV.value == "prod":
    app.add_middleware(HTTPSRedirectMiddleware)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if settings.APP_ENV.value == "prod":
        response.headers["Strict-Transport-Security"] = (
            "max-age=15552000; includeSubDomains"
        )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


# --- Erros: sempre {ok: false, error: {code, message, fields?}}
def _error_response(exc: ServiceError) -> JSONResponse:
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(ServiceError)
async def service_error_handler(_: Request, exc: ServiceError):
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any((err.get("loc") or ("",))[0] == "body" for err in errors):
        return _error_response(
            ValidationFailed("Invalid JSON body", {"root": "Expected a JSON object"})
        )
    fields: dict[str, str] = {}
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())[1:]]
        fields.setdefault(".".join(loc) or "root", err.get("msg", "Invalid value"))
    return _error_response(ValidationFailed("Invalid request", fields))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    get_logger().error(
        "storage.error", path=request.url.path, error_type=type(exc).__name__
    )
    return _error_response(ServerError("Unexpected storage error"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(NotFound("Not Found"))
    return JSONResponse(
        {"ok": False, "error": {"code": "http_error", "message": str(exc.detail)}},
        status_code=exc.status_code,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    get_logger().exception(
        "request.unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return _error_response(ServerError("Unexpected server error"))


app.include_router(api_router)


# --- Endpoints
@app.get("/healthz", tags=["ops"])
def healthz():
    get_logger().info("health.check")
    return {"status": "ok", "env": settings.APP_ENV, "version": APP_VERSION}


@app.get("/version", tags=["ops"])
def version():
    return {
        "version": APP_VERSION,
        "git_sha": GIT_SHA,
        "build_time_utc": BUILD_TIME_UTC,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
    }
