from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List

from .. import schemas, models
from ..deps import get_store, get_current_user, require_roles
from ..security import create_access_token
from ..services import users as user_service
from ..store import RecordStore

router = APIRouter(prefix="/users", tags=["users"])


def _token_for(user: models.User) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role.value})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
    }


@router.post("/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def register_user(user_in: schemas.UserCreate, store: RecordStore = Depends(get_store)):
    """
    Register a new user.

    Creates an account with the given role (``GUEST``, ``HOST`` or ``ADMIN``)
    and returns an access token for it, like ``/login`` does.

    Raises
    ------
    DuplicateEmail
        400 if the email is already registered.
    """
    user = user_service.register_user(store, user_in)
    return _token_for(user)


@router.post("/login", response_model=schemas.Token, tags=["auth"])
def login_for_access_token(
    email: str,
    password: str,
    store: RecordStore = Depends(get_store),
):
    """
    Authenticate a user and return a JWT access token.

    Raises
    ------
    HTTPException
        - 401 if credentials are invalid.
    """
    user = user_service.authenticate_user(store, email, password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _token_for(user)


@router.get("/me", response_model=schemas.UserOut)
def read_current_user(current_user: models.User = Depends(get_current_user)):
    """Get the currently authenticated user."""
    return current_user


@router.post("/me/become-host", response_model=schemas.Token)
def become_host(
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Promote the current guest to host.

    Returns a fresh token carrying the new role. Hosts and admins get a
    token for their unchanged role.
    """
    user = user_service.become_host(store, current_user)
    return _token_for(user)


@router.get("/", response_model=List[schemas.UserOut])
def list_users(
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(require_roles(models.UserRole.ADMIN)),
):
    """List all registered users. *(Admin-only)*"""
    return user_service.list_users(store)


@router.put("/{user_id}/role", response_model=schemas.UserOut)
def update_user_role(
    user_id: int,
    payload: schemas.UserRoleUpdate,
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(require_roles(models.UserRole.ADMIN)),
):
    """
    Reassign a user's role. *(Admin-only)*

    Setting the role a user already has is a no-op.
    """
    return user_service.update_user_role(store, user_id, payload.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(require_roles(models.UserRole.ADMIN)),
):
    """
    Delete a user. *(Admin-only)*

    Refused with 400 while the user still hosts properties or holds
    reservations.
    """
    user_service.delete_user(store, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
