from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from . import models, schemas
from .database import SessionLocal
from .security import decode_access_token
from .store import RecordStore


# ----- DB -----
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


# ----- Auth / JWT -----
# Match actual login endpoint: /users/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="users/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    store: RecordStore = Depends(get_store),
) -> models.User:
    """
    Resolve the bearer token to a user.

    The user is re-read from the store on every request, so role changes
    take effect immediately even for tokens issued before the change.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception
    email = payload.get("sub")
    if email is None:
        raise credentials_exception
    token_data = schemas.TokenData(email=email, role=payload.get("role"))

    users = store.query_by_field(models.User, "email", token_data.email)
    if not users:
        raise credentials_exception
    return users[0]


def require_roles(*allowed_roles: models.UserRole):
    """
    Usage: current_user: models.User = Depends(require_roles(UserRole.HOST, UserRole.ADMIN))
    """
    async def role_checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return role_checker
