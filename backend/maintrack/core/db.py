# backend/maintrack/core/db.py
"""
Veritabanı bağlantısı: engine, oturum fabrikası ve `get_db` bağımlılığı.

Adres `DATABASE_URL` (ya da `MSSQL_DSN`) ortam değişkeninden okunur;
backend/.env varsa önce o yüklenir, ortamda zaten dolu olan anahtarlar ezilmez.
"""
import os
from typing import Any, Dict, Optional

from dotenv import dotenv_values, find_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_dotenv() -> Optional[str]:
    """backend/.env (yoksa cwd'den yukarı ilk .env) ortama eklenir; BOM'lu anahtarlar temizlenir."""
    path = os.path.join(BACKEND_DIR, ".env")
    if not os.path.exists(path):
        path = find_dotenv(filename=".env", usecwd=True)
    if not path:
        return None
    for key, value in dotenv_values(path, encoding="utf-8-sig").items():
        key = key.replace("\ufeff", "").strip()
        if value is not None and not os.environ.get(key, "").strip():
            os.environ[key] = value
    return path


def _resolve_dsn(dotenv_path: Optional[str]) -> str:
    dsn = (os.environ.get("DATABASE_URL") or os.environ.get("MSSQL_DSN") or "").strip()
    if not dsn:
        raise RuntimeError(f"DATABASE_URL / MSSQL_DSN is not set (.env: {dotenv_path or 'not found'})")
    return dsn


def engine_options(url: URL) -> Dict[str, Any]:
    """Dialect'e göre engine ayarları."""
    opts: Dict[str, Any] = {"pool_pre_ping": True}
    name = url.get_backend_name()
    if name == "sqlite":
        opts["connect_args"] = {"check_same_thread": False}
        # Bellek içi SQLite: tüm oturumlar tek bağlantıyı paylaşır
        if url.database in (None, "", ":memory:"):
            opts["poolclass"] = StaticPool
    elif name == "mssql":
        opts.update(pool_size=5, max_overflow=10, fast_executemany=True)
    return opts


DSN = _resolve_dsn(_load_dotenv())
engine = create_engine(DSN, **engine_options(make_url(DSN)))

# expire_on_commit kapalı: servisler commit sonrası nesneyi döndürür
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
