from typing import Optional, List, Tuple, Dict, Any
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, case, distinct, func, select, update

from common.common_utils import escape_like, utc_now
from models.competency import Competency, CompetencyStatus
from models.audit import AuditLog
from api.competency.schemas.competencies import CompetencySortKey, SortOrder


SORT_COLUMNS = {
    CompetencySortKey.CODE: Competency.code,
    CompetencySortKey.TITLE: Competency.title,
    CompetencySortKey.SUBJECT: Competency.subject,
    CompetencySortKey.DOMAIN: Competency.domain,
    CompetencySortKey.ACADEMIC_LEVEL: Competency.academic_level,
    CompetencySortKey.CREATED_AT: Competency.created_at,
    CompetencySortKey.STATUS: Competency.status,
}

SEARCH_COLUMNS = (
    Competency.code,
    Competency.title,
    Competency.description,
    Competency.subject,
)


class CompetencyRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, competency_id: UUID, for_share: bool = False) -> Optional[Competency]:
        query = self.db.query(Competency).filter(Competency.id == competency_id)
        if for_share:
            query = query.with_for_update(read=True)
        return query.first()

    def find_by_code(self, code: str) -> Optional[Competency]:
        return self.db.query(Competency).filter(Competency.code == code).first()

    def insert(self, competency: Competency) -> Competency:
        self.db.add(competency)
        self.db.flush()
        return competency

    def update_fields(
        self,
        competency_id: UUID,
        fields: Dict[str, Any],
        expected_status: Optional[CompetencyStatus] = None
    ) -> Optional[Competency]:
        """
        Conditional write: applies ``fields`` only while the row still has
        ``expected_status``. Returns the refreshed row, or None when no row
        matched (missing id or status changed underneath us).
        """
        conditions = [Competency.id == competency_id]
        if expected_status is not None:
            conditions.append(Competency.status == expected_status)

        result = self.db.execute(
            update(Competency)
            .where(and_(*conditions))
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        return self.db.get(Competency, competency_id, populate_existing=True)

    def query_filtered(
        self,
        filters: Dict[str, Any],
        search: Optional[str],
        sort_by: CompetencySortKey,
        sort_order: SortOrder,
        offset: int,
        limit: int
    ) -> Tuple[List[Competency], int]:
        conditions = [
            getattr(Competency, column) == value
            for column, value in filters.items()
            if value is not None
        ]

        if search:
            pattern = f"%{escape_like(search)}%"
            conditions.append(
                or_(*[column.ilike(pattern, escape="\\") for column in SEARCH_COLUMNS])
            )

        where = and_(*conditions) if conditions else None

        count_stmt = select(func.count(Competency.id))
        rows_stmt = select(Competency)
        if where is not None:
            count_stmt = count_stmt.where(where)
            rows_stmt = rows_stmt.where(where)

        sort_column = SORT_COLUMNS[sort_by]
        ordering = sort_column.desc() if sort_order == SortOrder.DESC else sort_column.asc()
        # id keeps pages stable when the sort column has duplicates
        rows_stmt = rows_stmt.order_by(ordering, Competency.id.asc()).offset(offset).limit(limit)

        total = self.db.execute(count_stmt).scalar_one()
        rows = list(self.db.execute(rows_stmt).scalars().all())
        return rows, total

    def count_subjects(self, status: CompetencyStatus = CompetencyStatus.ACTIVE) -> List[Tuple[str, int]]:
        stmt = (
            select(Competency.subject, func.count(Competency.id))
            .where(Competency.status == status)
            .group_by(Competency.subject)
            .order_by(Competency.subject.asc())
        )
        return [(subject, count) for subject, count in self.db.execute(stmt).all()]

    def catalog_counts(self) -> Dict[str, int]:
        """
        Total, per-status and distinct-subject counts evaluated in a single
        SELECT so the figures come from one snapshot of the table.
        """
        def status_count(status: CompetencyStatus):
            return func.coalesce(func.sum(case((Competency.status == status, 1), else_=0)), 0)

        stmt = select(
            func.count(Competency.id).label("total"),
            status_count(CompetencyStatus.ACTIVE).label("active"),
            status_count(CompetencyStatus.DRAFT).label("draft"),
            status_count(CompetencyStatus.DEPRECATED).label("deprecated"),
            func.count(distinct(Competency.subject)).label("unique_subjects"),
        )
        row = self.db.execute(stmt).one()
        return {key: int(value) for key, value in row._mapping.items()}


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        actor_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
        description: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> AuditLog:
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            metadata_json=metadata,
            created_at=utc_now()
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_by_entity(self, entity_type: str, entity_id: str, limit: int = 100) -> List[AuditLog]:
        return self.db.query(AuditLog).filter(
            and_(
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id
            )
        ).order_by(AuditLog.created_at.desc()).limit(limit).all()
