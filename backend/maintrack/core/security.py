# backend/maintrack/core/security.py
"""
Eylemi yapan kullanıcının kimliği.

Oturum açma / token üretimi bu servisin işi değil; burada yalnızca gelen
bearer JWT doğrulanır ve AppUser satırına çözülür. `create_access_token`
seed betiği ve testler için duruyor.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from .db import get_db
from ..models.user import AppUser

SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change-me")
ALGORITHM = os.getenv("JWT_ALG", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ---- JWT üretimi ----
def create_access_token(sub: str, role: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(tz=timezone.utc) + timedelta(
        minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"sub": sub, "role": role, "exp": expire}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )

# ---- Authorization başlığını toleranslı çöz ----
def _extract_bearer_token(request: Request) -> str:
    """
    'Authorization' başlığını esnek parse eder:
      - Fazladan boşluklar: "Bearer   <JWT>"
      - Üst üste 'Bearer': "Bearer Bearer <JWT>"
      - Tırnaklı değer:    Authorization: "Bearer <JWT>"
    """
    auth = request.headers.get("Authorization")
    if not auth:
        raise _credentials_exception()

    auth = str(auth).strip().strip('"').strip("'")
    scheme, param = get_authorization_scheme_param(auth)
    if not scheme or scheme.lower() != "bearer":
        raise _credentials_exception()

    token = (param or "").strip()
    if token.lower().startswith("bearer "):
        token = token.split(None, 1)[1].strip()
    token = token.replace(" ", "")
    if not token:
        raise _credentials_exception()
    return token

# ---- Token'dan kullanıcıyı çöz ----
def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(_extract_bearer_token),
) -> AppUser:
    try:
        data = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username = data.get("sub")
        if not username:
            raise _credentials_exception()
    except JWTError:
        raise _credentials_exception()

    user = db.query(AppUser).filter(AppUser.Username == username).first()
    if not user or not user.IsActive:
        raise _credentials_exception()
    return user

# ---- Rol kontrol bağımlılığı ----
def require_roles(*roles: str):
    UserDep = Annotated[AppUser, Depends(get_current_user)]
    def _dep(current: UserDep) -> AppUser:
        if current.Role not in roles:
            raise HTTPException(status_code=403, detail="Not allowed for this role")
        return current
    return _dep
