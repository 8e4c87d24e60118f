"""
Request dependencies: store access and caller authentication.
"""
from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .database import User, get_db
from .errors import AuthError
from .store import SonarStore


def get_store(db: Session = Depends(get_db)) -> SonarStore:
    """Dependency for a request-scoped SonarStore."""
    return SonarStore(db)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    store: SonarStore = Depends(get_store),
) -> User:
    """Resolve the caller from `Authorization: Bearer <api token>`."""
    token = _bearer_token(authorization)
    if not token:
        raise AuthError()

    user = store.get_user_by_token(token)
    if not user:
        raise AuthError()
    return user
