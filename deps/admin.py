# deps/admin.py
import hmac

from fastapi import Header, HTTPException, status

from settings import settings


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    expected = (settings.ADMIN_API_TOKEN or "").strip()
    if not expected or not x_admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="ADMIN_TOKEN_REQUIRED")
    if not hmac.compare_digest(x_admin_token.strip(), expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="ADMIN_REQUIRED",
        )
