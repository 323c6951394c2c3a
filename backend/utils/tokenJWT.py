# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from services.errors import Unauthorized
from services.identity import Authenticated, Guest, Identity, require_admin
from utils.session import guest_session_id

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# Bearer token is optional: requests without one are served as guests
bearer_scheme = HTTPBearer(auto_error=False)

# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def _user_from_token(token: str, db: Session) -> User:
    credentials_exception = Unauthorized("Could not validate credentials")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username: str = payload.get("sub")
        # Ensure username is present in the token payload
        if username is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise credentials_exception
    return user

# Resolve the caller: Authenticated for a valid token, Guest otherwise
def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    if credentials is None:
        return Guest(session_id=guest_session_id(request))
    user = _user_from_token(credentials.credentials, db)
    return Authenticated(user_id=user.id, is_admin=bool(user.is_admin))

# Retrieve the currently authenticated user; guests are rejected
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise Unauthorized("Authentication required")
    return _user_from_token(credentials.credentials, db)

# Dependency for admin-only endpoints
def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Authenticated:
    return require_admin(identity)
