import enum
import uuid
from sqlalchemy import Column, String, Text, DateTime, Index, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from settings.database import Base


class AuditAction(str, enum.Enum):
    COMPETENCY_CREATED = "COMPETENCY_CREATED"
    COMPETENCY_REVIEWED = "COMPETENCY_REVIEWED"
    COMPETENCY_ACTIVATED = "COMPETENCY_ACTIVATED"
    COMPETENCY_DEPRECATED = "COMPETENCY_DEPRECATED"


class AuditLog(Base):
    """Append-only record of state-changing actions."""

    __tablename__ = "catalog_audit_logs"
    __table_args__ = (
        Index("ix_catalog_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_catalog_audit_logs_actor_action", "actor_id", "action"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    actor_id = Column(String(255), nullable=False)
    action = Column(String(64), nullable=False)
    entity_type = Column(String(64), nullable=False)
    entity_id = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    metadata_json = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
