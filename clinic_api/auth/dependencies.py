import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clinic_api.auth import jwt_handler
from clinic_api.core import config

security = HTTPBearer()


def require_staff(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """Return the subject of a valid staff token."""
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    if payload.get("role") != config.STAFF_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only clinic staff can perform this action.")

    return subject
