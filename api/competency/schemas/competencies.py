import enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, List
from uuid import UUID
from datetime import datetime

from models.competency import CompetencyStatus, CompetencyDomain, AcademicLevel


class CompetencySortKey(str, enum.Enum):
    CODE = "code"
    TITLE = "title"
    SUBJECT = "subject"
    DOMAIN = "domain"
    ACADEMIC_LEVEL = "academic_level"
    CREATED_AT = "created_at"
    STATUS = "status"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class CompetencyCreateRequest(BaseModel):
    code: str = Field(..., min_length=3, max_length=50)
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=20)
    subject: str = Field(..., min_length=1, max_length=200)
    domain: CompetencyDomain
    academic_level: AcademicLevel

    @field_validator('code', 'title', 'description', 'subject')
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Value must not be blank')
        return v


class CompetencyReviewRequest(BaseModel):
    reviewed_by: str = Field(..., min_length=1, max_length=255)

    @field_validator('reviewed_by')
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Reviewer must not be blank')
        return v.strip()


class CompetencyDeprecateRequest(BaseModel):
    replaced_by: Optional[UUID] = None  # Active competency superseding this one


class CompetencyQuery(BaseModel):
    subject: Optional[str] = None
    domain: Optional[CompetencyDomain] = None
    academic_level: Optional[AcademicLevel] = None
    status: Optional[CompetencyStatus] = None
    search: Optional[str] = None
    sort_by: CompetencySortKey = CompetencySortKey.CODE
    sort_order: SortOrder = SortOrder.ASC
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1)

    @property
    def search_term(self) -> Optional[str]:
        if self.search and self.search.strip():
            return self.search.strip()
        return None


class CompetencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    title: str
    description: str
    subject: str
    domain: CompetencyDomain
    academic_level: AcademicLevel
    status: CompetencyStatus
    version: int
    created_by: str
    reviewed_by: Optional[str]
    replaced_by: Optional[UUID]
    activated_at: Optional[datetime]
    deprecated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class CompetencyListResponse(BaseModel):
    data: List[CompetencyResponse]
    meta: PageMeta


class SubjectCount(BaseModel):
    subject: str
    count: int


class CatalogStats(BaseModel):
    total: int
    active: int
    draft: int
    deprecated: int
    unique_subjects: int


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: str
    action: str
    entity_type: str
    entity_id: str
    description: Optional[str]
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias=AliasChoices("metadata_json", "metadata"))
    created_at: datetime
