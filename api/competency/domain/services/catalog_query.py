from typing import Any, List, Mapping, Optional, Union
import logging

from common.pagination import build_page
from models.competency import CompetencyStatus
from api.competency.config import catalog_config, Constants
from api.competency.infra.db.uow import UnitOfWork
from api.competency.domain.policies import QueryPolicy, ValidationPolicy
from api.competency.exceptions import NotFoundError
from api.competency.schemas.competencies import (
    AuditLogResponse,
    CatalogStats,
    CompetencyListResponse,
    CompetencyQuery,
    CompetencyResponse,
    PageMeta,
    SubjectCount
)

logger = logging.getLogger(__name__)


class CatalogQueryService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def list_competencies(
        self,
        query: Union[CompetencyQuery, Mapping[str, Any], None] = None
    ) -> CompetencyListResponse:
        query = QueryPolicy.validate_query(query)
        params = QueryPolicy.pagination(query)

        filters = {
            "subject": query.subject,
            "domain": query.domain,
            "academic_level": query.academic_level,
            "status": query.status,
        }

        # Page and count read in the same transaction
        with self.uow.transaction("list"):
            rows, total = self.uow.competencies.query_filtered(
                filters=filters,
                search=query.search_term,
                sort_by=query.sort_by,
                sort_order=query.sort_order,
                offset=params.offset,
                limit=params.limit
            )
            items = [CompetencyResponse.model_validate(row) for row in rows]

        page = build_page(items, total, params)
        logger.debug(
            f"Listed competencies: total={total}, page={page.page}, limit={page.limit}, "
            f"sort={query.sort_by.value} {query.sort_order.value}"
        )

        return CompetencyListResponse(
            data=page.items,
            meta=PageMeta(
                total=page.total,
                page=page.page,
                limit=page.limit,
                total_pages=page.total_pages
            )
        )

    def subjects(self) -> List[SubjectCount]:
        """Active subjects with their competency counts, for filter pickers."""
        with self.uow.transaction("subjects"):
            grouped = self.uow.competencies.count_subjects(status=CompetencyStatus.ACTIVE)
        return [SubjectCount(subject=subject, count=count) for subject, count in grouped]

    def stats(self) -> CatalogStats:
        with self.uow.transaction("stats"):
            counts = self.uow.competencies.catalog_counts()
        return CatalogStats(**counts)

    def history(self, competency_id: Any, limit: Optional[int] = None) -> List[AuditLogResponse]:
        """Audit trail of one competency, newest first."""
        competency_id = ValidationPolicy.validate_id(competency_id)
        limit = limit or catalog_config.history_default_limit

        with self.uow.transaction("history"):
            if not self.uow.competencies.find_by_id(competency_id):
                raise NotFoundError(competency_id)
            entries = self.uow.audit_logs.list_by_entity(
                Constants.AUDIT_ENTITY_COMPETENCY,
                str(competency_id),
                limit=limit
            )
            return [AuditLogResponse.model_validate(entry) for entry in entries]
