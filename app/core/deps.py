from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.core.config import settings
from app.core.security import decode_jwt

ROLE_ADMIN = "ADMIN"
ROLE_RESTAURANT = "RESTAURANT"
ROLE_USER = "USER"

bearer = HTTPBearer(auto_error=False)

def get_current_principal(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(status_code=401, detail="Missing authorization token")
    try:
        claims = decode_jwt(creds.credentials, settings.JWT_SECRET)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not str(claims.get("sub") or "").strip():
        raise HTTPException(status_code=401, detail="Invalid token")
    return claims

def require_role(*roles: str):
    def _inner(principal: dict = Depends(get_current_principal)) -> dict:
        if str(principal.get("role") or "").upper() not in roles:
            raise HTTPException(status_code=403, detail="You don't have permission to access this resource")
        return principal
    return _inner
