"""Request dependencies: authentication, authorization and app services."""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from teamspace.database import get_db
from teamspace.models import Project, User
from teamspace.security import TokenError, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authenticate_token(db: Session, token: Optional[str]) -> User:
    """Resolve a bearer token to an active user or raise a 401."""
    if not token:
        raise _unauthorized("Not authorized to access this route")

    try:
        user_id = decode_access_token(token)
    except TokenError:
        raise _unauthorized("Invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User account is deactivated")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return authenticate_token(db, token)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User role '{current_user.role.value}' is not authorized to access this route",
        )
    return current_user


def ensure_project_member(project: Project, user: User, detail: str = "Not authorized to access this project") -> None:
    """Admins see every project; everyone else must be a member."""
    if user.is_admin or project.is_member(user.id):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def ensure_project_manager(project: Project, user: User, detail: str) -> None:
    """Only admins and the project owner may change a project."""
    if user.is_admin or project.is_owner(user.id):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_broadcaster(request: Request):
    return request.app.state.broadcaster


def get_file_storage(request: Request):
    return request.app.state.file_storage
