from typing import Optional, Dict, Any
import logging

from api.competency.config import Constants
from api.competency.infra.db.uow import UnitOfWork
from models.audit import AuditAction

logger = logging.getLogger(__name__)


class AuditSink:
    """
    Append-only audit channel. Writes happen after the primary mutation has
    committed, in their own transaction; a failed write is logged and never
    reaches the caller.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def record(
        self,
        actor_id: str,
        action: AuditAction,
        entity_id: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        entity_type: str = Constants.AUDIT_ENTITY_COMPETENCY
    ) -> bool:
        try:
            self.uow.audit_logs.create(
                actor_id=actor_id,
                action=action.value,
                entity_type=entity_type,
                entity_id=str(entity_id),
                description=description,
                metadata=metadata
            )
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            logger.error(
                f"CRITICAL: Audit log failed: action={action.value}, "
                f"entity_type={entity_type}, entity_id={entity_id}, actor_id={actor_id}",
                exc_info=True
            )
            return False

        logger.debug(f"Audit recorded: action={action.value}, entity_id={entity_id}")
        return True
