# backend/maintrack/main.py
import os, json, logging, time
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

# .env yükle
from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv())

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("maintrack")

from maintrack.core.db import get_db

# --- Router importları ---
from maintrack.routers.machines import router as machines_router
from maintrack.routers.schedules import router as schedules_router
from maintrack.routers.records import router as records_router
from maintrack.routers.dashboard import router as dashboard_router

# --- API zarfları ---
from maintrack.core.api import ok, fail, UTF8JSONResponse

# --- CORS ---
from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title="MAINTRACK", default_response_class=UTF8JSONResponse)


# JSON Content-Type charset düzeltmesi
@app.middleware("http")
async def _force_json_charset(request, call_next):
    resp = await call_next(request)
    ct = resp.headers.get("content-type", "")
    if ct.lower().startswith("application/json") and "charset=" not in ct.lower():
        resp.headers["content-type"] = "application/json; charset=utf-8"
    return resp

# İstek günlüğü: METHOD path status in Nms
@app.middleware("http")
async def _log_requests(request: Request, call_next):
    started = time.perf_counter()
    resp = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s in %dms", request.method, request.url.path, resp.status_code, elapsed)
    return resp


# -----------------------------
# Global hata zarfı
# -----------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    # Motor hataları (NotFound, InvalidTransition, ...) meta taşır
    return fail(
        str(exc.detail) if exc.detail else exc.__class__.__name__,
        status_code=exc.status_code,
        meta=getattr(exc, "meta", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail("Validation error", status_code=422, meta={"errors": exc.errors()})


# -----------------------------
# CORS yapılandırması (.env)
# -----------------------------
def _parse_origins(env_val: str | None):
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        parsed = json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]

ALLOWED_ORIGINS = _parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*"))
logger.debug("CORS allow_origins = %s", ALLOWED_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Sağlık uçları ----
@app.get("/health")
def health():
    return ok({"service": "MAINTRACK"})

@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    val = db.execute(text("SELECT 1")).scalar()
    return ok({"db": "ok", "select1": val})


# =========================
# Router kayıtları
# =========================
app.include_router(machines_router)     # /machines
app.include_router(schedules_router)    # /schedules
app.include_router(records_router)      # /records
app.include_router(dashboard_router)    # /dashboard
