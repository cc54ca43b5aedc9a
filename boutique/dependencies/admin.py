from typing import Optional

from fastapi import Cookie, HTTPException

from boutique.utils.token import ADMIN_COOKIE_NAME, decode_admin_token


def require_admin(admin_session: Optional[str] = Cookie(default=None, alias=ADMIN_COOKIE_NAME)):
    if not admin_session:
        raise HTTPException(status_code=401, detail="Unauthorized - Admin access required")

    payload = decode_admin_token(admin_session)

    if payload is None or payload.get("role") != "admin":
        raise HTTPException(status_code=401, detail="Unauthorized - Admin access required")

    return {"id": "admin", "email": payload.get("email"), "role": "admin"}
