"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from echo_feedback.core.security import decode_access_token
from echo_feedback.db.session import get_db
from echo_feedback.models import User

# Missing credentials are reported as 401 by get_current_admin itself.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Resolve the bearer token to an administrator account.

    Raises:
        HTTPException: 401 when the token is missing, invalid or names an
            unknown user; 403 when the user is not an administrator.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    claims = decode_access_token(credentials.credentials)
    subject = claims.get("sub") if claims else None
    if not subject:
        raise _unauthorized("Could not validate credentials")

    user = db.query(User).filter(User.user_id == subject).first()
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return user


def get_client_identifier(request: Request) -> str:
    """Best-effort caller identity: first X-Forwarded-For hop, else peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


# Type alias for the authenticated administrator dependency
AdminDep = Annotated[User, Depends(get_current_admin)]
ClientIdentifierDep = Annotated[str, Depends(get_client_identifier)]
