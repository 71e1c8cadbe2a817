from typing import Any, Mapping, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from common.common_utils import parse_uuid
from common.pagination import PaginationParams
from api.competency.config import catalog_config
from api.competency.exceptions import ValidationError
from api.competency.schemas.competencies import CompetencyCreateRequest, CompetencyQuery


def _first_error(error: PydanticValidationError) -> ValidationError:
    detail = error.errors()[0]
    field = ".".join(str(part) for part in detail.get("loc", ())) or None
    return ValidationError(f"Invalid {field or 'input'}: {detail.get('msg')}", field=field)


class ValidationPolicy:
    """Input checks the engine applies regardless of what the boundary already did."""

    @staticmethod
    def validate_create(payload: Union[CompetencyCreateRequest, Mapping[str, Any]]) -> CompetencyCreateRequest:
        if not isinstance(payload, CompetencyCreateRequest):
            try:
                payload = CompetencyCreateRequest.model_validate(payload)
            except PydanticValidationError as e:
                raise _first_error(e) from e

        if not payload.description or not payload.description.strip():
            raise ValidationError("Description is required", field="description")
        if len(payload.description) < catalog_config.description_min_length:
            raise ValidationError(
                f"Description must be at least {catalog_config.description_min_length} characters",
                field="description"
            )
        return payload

    @staticmethod
    def validate_reviewer(reviewed_by: Any) -> str:
        if not isinstance(reviewed_by, str) or not reviewed_by.strip():
            raise ValidationError("Reviewer is required", field="reviewed_by")
        return reviewed_by.strip()

    @staticmethod
    def validate_id(value: Any, field: str = "id") -> UUID:
        try:
            return parse_uuid(value)
        except (TypeError, ValueError, AttributeError):
            raise ValidationError(f"'{value}' is not a valid competency id", field=field)


class QueryPolicy:
    """Listing parameters; sort keys only ever come from CompetencySortKey."""

    @staticmethod
    def validate_query(query: Union[CompetencyQuery, Mapping[str, Any], None]) -> CompetencyQuery:
        if query is None:
            return CompetencyQuery()
        if isinstance(query, CompetencyQuery):
            return query
        try:
            return CompetencyQuery.model_validate(dict(query))
        except PydanticValidationError as e:
            raise _first_error(e) from e

    @staticmethod
    def pagination(query: CompetencyQuery) -> PaginationParams:
        params = PaginationParams(
            page=query.page,
            limit=query.limit or catalog_config.default_page_size,
            max_limit=catalog_config.max_page_size
        )
        try:
            params.validate_bounds()
        except ValueError as e:
            raise ValidationError(str(e), field="limit" if params.page >= 1 else "page")
        return params
