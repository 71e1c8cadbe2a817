from typing import Generator, Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from settings.config import get_settings
from settings.database import get_db
from api.competency.config import Constants
from api.competency.infra.db.uow import UnitOfWork
from api.competency.domain.services.lifecycle_engine import CompetencyLifecycleEngine
from api.competency.domain.services.catalog_query import CatalogQueryService


class AuthContext:
    """Identity forwarded by the authenticating gateway."""

    def __init__(self, actor_id: str, role: str):
        self.actor_id = actor_id
        self.role = role
        self.is_catalog_owner = role == Constants.CATALOG_OWNER_ROLE


def get_auth_context(
    x_actor_id: Optional[str] = Header(None, alias=Constants.ACTOR_ID_HEADER),
    x_actor_role: Optional[str] = Header(None, alias=Constants.ACTOR_ROLE_HEADER),
) -> AuthContext:
    """
    Build the caller identity from gateway headers.

    In local development, returns a catalog-owner context when no identity is sent.
    In QA/prod, the actor header is always required.
    """
    if x_actor_id:
        return AuthContext(actor_id=x_actor_id, role=(x_actor_role or "").upper())

    settings = get_settings()
    if settings.is_local:
        return AuthContext(actor_id=settings.local_actor_id, role=Constants.CATALOG_OWNER_ROLE)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required"
    )


def require_catalog_owner(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not auth.is_catalog_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Catalog owner role required"
        )
    return auth


def get_uow(db: Session = Depends(get_db)) -> Generator[UnitOfWork, None, None]:
    """
    Dependency to get Unit of Work instance.

    Args:
        db: Database session

    Yields:
        UnitOfWork instance
    """
    yield UnitOfWork(db)


def get_lifecycle_engine(uow: UnitOfWork = Depends(get_uow)) -> CompetencyLifecycleEngine:
    return CompetencyLifecycleEngine(uow)


def get_query_service(uow: UnitOfWork = Depends(get_uow)) -> CatalogQueryService:
    return CatalogQueryService(uow)
