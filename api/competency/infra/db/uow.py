from sqlalchemy.orm import Session
from sqlalchemy.exc import DBAPIError, OperationalError
from contextlib import contextmanager
from typing import Generator
import logging

from api.competency.exceptions import StoreUnavailableError
from api.competency.infra.db.repositories import (
    CompetencyRepository,
    AuditLogRepository
)

logger = logging.getLogger(__name__)


def _is_transient(error: DBAPIError) -> bool:
    return isinstance(error, OperationalError) or error.connection_invalidated


class UnitOfWork:
    def __init__(self, db: Session):
        self.db = db
        self.competencies = CompetencyRepository(db)
        self.audit_logs = AuditLogRepository(db)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def flush(self):
        self.db.flush()

    @contextmanager
    def transaction(self, operation: str) -> Generator["UnitOfWork", None, None]:
        """
        Run one catalog operation as a single transaction. Commits on success,
        rolls back on any error, and surfaces connection-level failures as
        StoreUnavailableError.
        """
        try:
            yield self
            self.commit()
        except DBAPIError as e:
            self.rollback()
            if _is_transient(e):
                logger.error(f"Catalog store unavailable: operation={operation}, error={e.orig}")
                raise StoreUnavailableError(operation, str(e.orig)) from e
            raise
        except Exception:
            self.rollback()
            raise
