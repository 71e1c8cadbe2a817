import enum
import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, ForeignKey, Index, Enum, Uuid
)
from sqlalchemy.sql import func
from settings.database import Base


class CompetencyStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    DEPRECATED = "DEPRECATED"


class CompetencyDomain(str, enum.Enum):
    COGNITIVE = "COGNITIVE"
    CLINICAL = "CLINICAL"
    PRACTICAL = "PRACTICAL"


class AcademicLevel(str, enum.Enum):
    UG = "UG"
    PG = "PG"
    SPECIALIZATION = "SPECIALIZATION"


class Competency(Base):
    __tablename__ = "catalog_competencies"
    __table_args__ = (
        Index("ix_catalog_competencies_status", "status"),
        Index("ix_catalog_competencies_subject", "subject"),
        Index("ix_catalog_competencies_status_subject", "status", "subject"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    subject = Column(String(200), nullable=False)
    domain = Column(Enum(CompetencyDomain, name="competency_domain"), nullable=False)
    academic_level = Column(Enum(AcademicLevel, name="academic_level"), nullable=False)
    status = Column(
        Enum(CompetencyStatus, name="competency_status"),
        nullable=False,
        default=CompetencyStatus.DRAFT
    )
    # Provenance only; never incremented
    version = Column(Integer, nullable=False, default=1)

    created_by = Column(String(255), nullable=False)
    reviewed_by = Column(String(255), nullable=True)
    replaced_by = Column(Uuid(as_uuid=True), ForeignKey("catalog_competencies.id"), nullable=True)

    activated_at = Column(DateTime(timezone=True), nullable=True)
    deprecated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Competency {self.code} {self.status.value if self.status else None}>"
