import uuid
from typing import Any, Mapping, Optional, Union
import logging

from sqlalchemy.exc import IntegrityError

from common.common_utils import utc_now
from models.competency import Competency, CompetencyStatus
from models.audit import AuditAction
from api.competency.infra.db.uow import UnitOfWork
from api.competency.infra.audit.audit_sink import AuditSink
from api.competency.domain import lifecycle
from api.competency.domain.policies import ValidationPolicy
from api.competency.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError
)
from api.competency.schemas.competencies import CompetencyCreateRequest, CompetencyResponse

logger = logging.getLogger(__name__)


class CompetencyLifecycleEngine:
    """
    Sole writer path for competency records.

    Every state change is a conditional write on the status read at the start
    of the transaction, so two callers racing on the same record cannot both
    win. Audit entries are recorded after the commit.
    """

    def __init__(self, uow: UnitOfWork, audit_sink: Optional[AuditSink] = None):
        self.uow = uow
        self.audit = audit_sink or AuditSink(uow)

    def create(
        self,
        payload: Union[CompetencyCreateRequest, Mapping[str, Any]],
        actor_id: str
    ) -> CompetencyResponse:
        request = ValidationPolicy.validate_create(payload)

        with self.uow.transaction("create"):
            if self.uow.competencies.find_by_code(request.code):
                raise ConflictError(request.code)

            now = utc_now()
            competency = Competency(
                id=uuid.uuid4(),
                code=request.code,
                title=request.title,
                description=request.description,
                subject=request.subject,
                domain=request.domain,
                academic_level=request.academic_level,
                status=lifecycle.INITIAL_STATE,
                version=1,
                created_by=actor_id,
                created_at=now,
                updated_at=now
            )
            try:
                self.uow.competencies.insert(competency)
            except IntegrityError as e:
                # Lost the race against a concurrent create with the same code
                logger.info(f"Unique constraint rejected competency code={request.code}")
                raise ConflictError(request.code) from e
            response = CompetencyResponse.model_validate(competency)

        logger.info(f"Competency created: id={response.id}, code={response.code}, actor_id={actor_id}")

        self.audit.record(
            actor_id=actor_id,
            action=AuditAction.COMPETENCY_CREATED,
            entity_id=str(response.id),
            description=f"Created competency: {response.code} - {response.title}"
        )
        return response

    def get(self, competency_id: Any) -> CompetencyResponse:
        competency_id = ValidationPolicy.validate_id(competency_id)
        with self.uow.transaction("get"):
            competency = self._require(competency_id)
            return CompetencyResponse.model_validate(competency)

    def update(self, competency_id: Any, reviewed_by: Any, actor_id: str) -> CompetencyResponse:
        """Assign the reviewer of a DRAFT competency. No other field is writable."""
        competency_id = ValidationPolicy.validate_id(competency_id)
        reviewed_by = ValidationPolicy.validate_reviewer(reviewed_by)

        with self.uow.transaction("update"):
            competency = self._require(competency_id)
            if not lifecycle.is_editable(competency.status):
                raise InvalidStateError(
                    "Only DRAFT competencies can be updated",
                    competency_id=competency_id,
                    status=competency.status.value
                )

            updated = self._conditional_update(
                competency,
                {"reviewed_by": reviewed_by, "updated_at": utc_now()},
                expected_status=CompetencyStatus.DRAFT
            )
            response = CompetencyResponse.model_validate(updated)

        logger.info(f"Competency reviewed: id={competency_id}, reviewed_by={reviewed_by}")

        self.audit.record(
            actor_id=actor_id,
            action=AuditAction.COMPETENCY_REVIEWED,
            entity_id=str(competency_id),
            description=f"Reviewed competency: {response.code}"
        )
        return response

    def activate(self, competency_id: Any, actor_id: str) -> CompetencyResponse:
        competency_id = ValidationPolicy.validate_id(competency_id)

        with self.uow.transaction("activate"):
            competency = self._require(competency_id)
            self._check_transition(competency, CompetencyStatus.ACTIVE, "Only DRAFT competencies can be activated")

            if not competency.reviewed_by:
                raise InvalidStateError(
                    "Competency must be reviewed before activation",
                    competency_id=competency_id,
                    status=competency.status.value
                )

            now = utc_now()
            activated = self._conditional_update(
                competency,
                {"status": CompetencyStatus.ACTIVE, "activated_at": now, "updated_at": now},
                expected_status=CompetencyStatus.DRAFT
            )
            response = CompetencyResponse.model_validate(activated)

        logger.info(f"Competency activated: id={competency_id}, code={response.code}")

        self.audit.record(
            actor_id=actor_id,
            action=AuditAction.COMPETENCY_ACTIVATED,
            entity_id=str(competency_id),
            description=f"Activated competency: {response.code} - {response.title}"
        )
        return response

    def deprecate(
        self,
        competency_id: Any,
        actor_id: str,
        replaced_by: Any = None
    ) -> CompetencyResponse:
        competency_id = ValidationPolicy.validate_id(competency_id)
        if replaced_by is not None:
            replaced_by = ValidationPolicy.validate_id(replaced_by, field="replaced_by")
            if replaced_by == competency_id:
                raise ValidationError("A competency cannot replace itself", field="replaced_by")

        with self.uow.transaction("deprecate"):
            competency = self._require(competency_id)
            if competency.status == CompetencyStatus.DEPRECATED:
                raise InvalidStateError(
                    "Competency is already deprecated",
                    competency_id=competency_id,
                    status=competency.status.value
                )
            self._check_transition(competency, CompetencyStatus.DEPRECATED, "Competency cannot be deprecated")

            if replaced_by is not None:
                replacement = self.uow.competencies.find_by_id(replaced_by, for_share=True)
                if not replacement:
                    raise NotFoundError(replaced_by, "Replacement competency not found")
                if replacement.status != CompetencyStatus.ACTIVE:
                    raise InvalidStateError(
                        "Replacement competency must be ACTIVE",
                        competency_id=replaced_by,
                        status=replacement.status.value
                    )

            now = utc_now()
            deprecated = self._conditional_update(
                competency,
                {
                    "status": CompetencyStatus.DEPRECATED,
                    "deprecated_at": now,
                    "replaced_by": replaced_by,
                    "updated_at": now
                },
                expected_status=competency.status
            )
            response = CompetencyResponse.model_validate(deprecated)

        logger.info(f"Competency deprecated: id={competency_id}, replaced_by={replaced_by}")

        suffix = f" (replaced by: {replaced_by})" if replaced_by else ""
        self.audit.record(
            actor_id=actor_id,
            action=AuditAction.COMPETENCY_DEPRECATED,
            entity_id=str(competency_id),
            description=f"Deprecated competency: {response.code}{suffix}",
            metadata={"replaced_by": str(replaced_by) if replaced_by else None}
        )
        return response

    def _require(self, competency_id: uuid.UUID) -> Competency:
        competency = self.uow.competencies.find_by_id(competency_id)
        if not competency:
            raise NotFoundError(competency_id)
        return competency

    def _check_transition(self, competency: Competency, target: CompetencyStatus, message: str):
        result = lifecycle.validate_transition(competency.status, target)
        if not result.allowed:
            raise InvalidStateError(
                message,
                competency_id=competency.id,
                status=competency.status.value
            )

    def _conditional_update(
        self,
        competency: Competency,
        fields: dict,
        expected_status: CompetencyStatus
    ) -> Competency:
        updated = self.uow.competencies.update_fields(competency.id, fields, expected_status=expected_status)
        if updated is None:
            logger.warning(
                f"Concurrent modification detected: id={competency.id}, expected_status={expected_status.value}"
            )
            raise InvalidStateError(
                f"Competency is no longer {expected_status.value}; it was modified concurrently",
                competency_id=competency.id,
                status=expected_status.value
            )
        return updated
