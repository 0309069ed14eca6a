from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from aeroledger.db.session import get_db
from aeroledger.core.security import decode_token
from aeroledger.models.user import User

bearer = HTTPBearer(auto_error=False)

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user

def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard

_STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "INVALID_STATE": 409,
    "ALREADY_APPROVED": 409,
    "INCOMPLETE_DATA": 400,
    "VALIDATION_ERROR": 400,
}

def http_error(code: str | None, message: str) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_CODE.get(code or "", 500), detail=message)
