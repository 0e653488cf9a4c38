from __future__ import annotations

from fastapi import APIRouter

from db import get_conn
from settings import settings

router = APIRouter(tags=["health"])


def _check_db() -> tuple[bool, str | None]:
    if not settings.DATABASE_URL:
        return False, "DATABASE_URL is not set"
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True, None
    except Exception as exc:
        return False, f"{type(exc).__name__}: {exc}"


@router.get("/healthz")
def healthz():
    db_ok, db_error = _check_db()
    return {
        "ok": True,
        "version": settings.APP_VERSION,
        "db_ok": db_ok,
        "db_error": db_error,
    }


@router.get("/health")
def health():
    return {
        "ok": True,
        "env": settings.ENV,
        "version": settings.APP_VERSION,
    }
