from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
import logging

from api.competency.dependencies import (
    AuthContext,
    get_auth_context,
    get_lifecycle_engine,
    get_query_service,
    require_catalog_owner
)
from api.competency.domain.services.lifecycle_engine import CompetencyLifecycleEngine
from api.competency.domain.services.catalog_query import CatalogQueryService
from api.competency.schemas.competencies import (
    AuditLogResponse,
    CatalogStats,
    CompetencyCreateRequest,
    CompetencyDeprecateRequest,
    CompetencyListResponse,
    CompetencyResponse,
    CompetencyReviewRequest,
    SubjectCount
)

logger = logging.getLogger(__name__)

competencies_router = APIRouter(prefix="/competencies", tags=["Competencies"])


@competencies_router.post("", response_model=CompetencyResponse, status_code=status.HTTP_201_CREATED)
def create_competency(
    request: CompetencyCreateRequest,
    auth: AuthContext = Depends(require_catalog_owner),
    engine: CompetencyLifecycleEngine = Depends(get_lifecycle_engine)
):
    """
    Create a new competency in DRAFT status.

    - **code**: Unique business key (3-50 characters)
    - **domain**: COGNITIVE, CLINICAL or PRACTICAL
    - **academic_level**: UG, PG or SPECIALIZATION
    """
    return engine.create(request, actor_id=auth.actor_id)


@competencies_router.get("", response_model=CompetencyListResponse, status_code=status.HTTP_200_OK)
def list_competencies(
    subject: Optional[str] = Query(None, description="Exact subject match"),
    domain: Optional[str] = Query(None, description="COGNITIVE, CLINICAL or PRACTICAL"),
    academic_level: Optional[str] = Query(None, description="UG, PG or SPECIALIZATION"),
    status_filter: Optional[str] = Query(None, alias="status", description="DRAFT, ACTIVE or DEPRECATED"),
    search: Optional[str] = Query(None, description="Case-insensitive match on code, title, description, subject"),
    sort_by: str = Query("code", description="code, title, subject, domain, academic_level, created_at or status"),
    sort_order: str = Query("asc", description="asc or desc"),
    page: int = Query(1, description="1-indexed page number"),
    limit: Optional[int] = Query(None, description="Page size"),
    query_service: CatalogQueryService = Depends(get_query_service)
):
    """
    List competencies with filtering, search, sorting and pagination.

    Filters are combined with AND; the search term is OR-ed across the text
    columns and then AND-ed with the filters.
    """
    query = {
        "subject": subject,
        "domain": domain,
        "academic_level": academic_level,
        "status": status_filter,
        "search": search,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "page": page,
        "limit": limit,
    }
    return query_service.list_competencies({key: value for key, value in query.items() if value is not None})


@competencies_router.get("/subjects", response_model=List[SubjectCount], status_code=status.HTTP_200_OK)
def get_subjects(query_service: CatalogQueryService = Depends(get_query_service)):
    """
    Active subjects with competency counts, for filtering UIs.
    """
    return query_service.subjects()


@competencies_router.get("/stats", response_model=CatalogStats, status_code=status.HTTP_200_OK)
def get_stats(
    auth: AuthContext = Depends(require_catalog_owner),
    query_service: CatalogQueryService = Depends(get_query_service)
):
    """
    Catalog totals by status and number of distinct subjects.
    """
    return query_service.stats()


@competencies_router.get("/{competency_id}", response_model=CompetencyResponse, status_code=status.HTTP_200_OK)
def get_competency(
    competency_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    engine: CompetencyLifecycleEngine = Depends(get_lifecycle_engine)
):
    return engine.get(competency_id)


@competencies_router.patch("/{competency_id}", response_model=CompetencyResponse, status_code=status.HTTP_200_OK)
def review_competency(
    competency_id: UUID,
    request: CompetencyReviewRequest,
    auth: AuthContext = Depends(require_catalog_owner),
    engine: CompetencyLifecycleEngine = Depends(get_lifecycle_engine)
):
    """
    Assign the reviewer of a DRAFT competency. No other field can be changed.
    """
    return engine.update(competency_id, request.reviewed_by, actor_id=auth.actor_id)


@competencies_router.patch(
    "/{competency_id}/activate", response_model=CompetencyResponse, status_code=status.HTTP_200_OK
)
def activate_competency(
    competency_id: UUID,
    auth: AuthContext = Depends(require_catalog_owner),
    engine: CompetencyLifecycleEngine = Depends(get_lifecycle_engine)
):
    """
    Activate a reviewed DRAFT competency. Active competencies are frozen.
    """
    return engine.activate(competency_id, actor_id=auth.actor_id)


@competencies_router.patch(
    "/{competency_id}/deprecate", response_model=CompetencyResponse, status_code=status.HTTP_200_OK
)
def deprecate_competency(
    competency_id: UUID,
    request: Optional[CompetencyDeprecateRequest] = None,
    auth: AuthContext = Depends(require_catalog_owner),
    engine: CompetencyLifecycleEngine = Depends(get_lifecycle_engine)
):
    """
    Retire a competency, optionally naming the ACTIVE competency that replaces it.
    """
    replaced_by = request.replaced_by if request else None
    return engine.deprecate(competency_id, actor_id=auth.actor_id, replaced_by=replaced_by)


@competencies_router.get(
    "/{competency_id}/history", response_model=List[AuditLogResponse], status_code=status.HTTP_200_OK
)
def get_competency_history(
    competency_id: UUID,
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of entries"),
    auth: AuthContext = Depends(require_catalog_owner),
    query_service: CatalogQueryService = Depends(get_query_service)
):
    """
    Audit trail of one competency, newest first.
    """
    return query_service.history(competency_id, limit=limit)
