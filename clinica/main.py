from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.responses import JSONResponse

import clinica.db.base  # noqa: F401  (registra todos os models)
from clinica.api.main import api_router
from clinica.core.errors import (
    AgendaError,
    DuplicateRecord,
    InvalidInput,
    NoBalance,
    NotFound,
    RemoteError,
    SlotConflict,
)
from clinica.core.logging import configure_logging, get_logger
from clinica.core.settings import settings
from clinica.middlewares.telemetry import RequestContextMiddleware
from clinica.version import APP_NAME, APP_VERSION, BUILD_TIME_UTC, GIT_SHA

configure_logging(json=settings.LOG_JSON, level=settings.LOG_LEVEL)
log = get_logger("clinica")

app = FastAPI(title=APP_NAME, version=APP_VERSION, debug=settings.DEBUG)

# --- Middlewares de contexto/log
app.add_middleware(RequestContextMiddleware)

# --- CORS (config abaixo)
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
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Segurança: HTTPS only em prod
if settings.APP_ENV.value == "prod":
    app.add_middleware(HTTPSRedirectMiddleware)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)

    if settings.APP_ENV.value == "prod":
        response.headers["Strict-Transport-Security"] = (
            "max-age=15552000; includeSubDomains; preload"
        )

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    # a API só devolve JSON
    response.headers["Content-Security-Policy"] = "default-src 'none'"
    return response


# --- Erros de domínio -> HTTP
@app.exception_handler(SlotConflict)
async def slot_conflict_handler(_: Request, exc: SlotConflict):
    log.info("agenda.conflict", conflict=exc.reason)
    return JSONResponse(
        {"detail": exc.message, "conflict": exc.reason}, status_code=409
    )


@app.exception_handler(NoBalance)
async def no_balance_handler(_: Request, exc: NoBalance):
    log.info("ledger.no_balance", balance=exc.kind)
    return JSONResponse({"detail": exc.message, "balance": exc.kind}, status_code=409)


@app.exception_handler(NotFound)
async def not_found_handler(_: Request, exc: NotFound):
    return JSONResponse({"detail": exc.message}, status_code=404)


@app.exception_handler(DuplicateRecord)
async def duplicate_handler(_: Request, exc: DuplicateRecord):
    return JSONResponse(
        {"detail": exc.message, "field": exc.field, "existing_id": exc.existing_id},
        status_code=409,
    )


@app.exception_handler(InvalidInput)
async def invalid_input_handler(_: Request, exc: InvalidInput):
    return JSONResponse({"detail": exc.message}, status_code=422)


@app.exception_handler(RemoteError)
async def remote_error_handler(_: Request, exc: RemoteError):
    return JSONResponse({"detail": exc.message}, status_code=503)


@app.exception_handler(AgendaError)
async def agenda_error_handler(_: Request, exc: AgendaError):
    log.warning("agenda.error", error=exc.message)
    return JSONResponse({"detail": exc.message}, status_code=400)


app.include_router(api_router)


# --- Endpoints
@app.get("/healthz", tags=["ops"])
def healthz():
    return {"status": "ok", "env": settings.APP_ENV, "version": APP_VERSION}


@app.get("/version", tags=["ops"])
def version():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "git_sha": GIT_SHA,
        "build_time_utc": BUILD_TIME_UTC,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
    }
