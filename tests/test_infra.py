"""
Tests for the supporting layers: unit of work, audit sink, pagination and
string helpers, settings, and the Datadog log handler.

Run with:
    pytest tests/test_infra.py -v
"""

import json
import logging
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy.exc import IntegrityError, OperationalError

from common.common_utils import escape_like, parse_uuid
from common.pagination import PaginationParams, build_page
from settings.config import Settings
from settings.datadog_logger import DatadogLogger
from models import AuditAction, AuditLog
from api.competency.exceptions import StoreUnavailableError
from api.competency.infra.audit.audit_sink import AuditSink
from api.competency.infra.db.uow import UnitOfWork


# ============================================================================
# Unit of Work
# ============================================================================

class TestUnitOfWorkTransaction:
    """Commit/rollback behaviour and store-outage translation."""

    def test_operational_error_becomes_store_unavailable(self, uow):
        with pytest.raises(StoreUnavailableError) as exc_info:
            with uow.transaction("list"):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.extra["operation"] == "list"
        assert exc_info.value.extra["details"] == "connection refused"

    def test_non_transient_database_error_propagates(self, uow):
        with pytest.raises(IntegrityError):
            with uow.transaction("create"):
                raise IntegrityError("INSERT", {}, Exception("constraint"))

    def test_other_errors_roll_back_and_propagate(self):
        mock_uow_db = MagicMock()
        uow = UnitOfWork(mock_uow_db)

        with pytest.raises(KeyError):
            with uow.transaction("get"):
                raise KeyError("boom")

        mock_uow_db.rollback.assert_called_once()
        mock_uow_db.commit.assert_not_called()

    def test_success_commits(self):
        mock_uow_db = MagicMock()
        uow = UnitOfWork(mock_uow_db)

        with uow.transaction("get"):
            pass

        mock_uow_db.commit.assert_called_once()
        mock_uow_db.rollback.assert_not_called()


# ============================================================================
# Audit Sink
# ============================================================================

class TestAuditSink:
    """Best-effort, append-only audit writes."""

    def test_record_persists_entry(self, uow, db_session):
        sink = AuditSink(uow)

        assert sink.record(
            actor_id="owner-1",
            action=AuditAction.COMPETENCY_ACTIVATED,
            entity_id="abc",
            description="Activated competency: X",
            metadata={"key": "value"}
        ) is True

        entry = db_session.query(AuditLog).one()
        assert entry.action == "COMPETENCY_ACTIVATED"
        assert entry.entity_type == "Competency"
        assert entry.metadata_json == {"key": "value"}

    def test_failure_is_logged_not_raised(self, uow, caplog):
        sink = AuditSink(uow)
        with patch.object(uow.audit_logs, "create", side_effect=RuntimeError("disk full")):
            with caplog.at_level(logging.ERROR):
                result = sink.record(
                    actor_id="owner-1",
                    action=AuditAction.COMPETENCY_CREATED,
                    entity_id="abc",
                    description="Created competency"
                )

        assert result is False
        assert "CRITICAL: Audit log failed" in caplog.text
        assert "entity_id=abc" in caplog.text


# ============================================================================
# Helpers
# ============================================================================

class TestPagination:

    def test_offset(self):
        assert PaginationParams(page=3, limit=10).offset == 20

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 5001)])
    def test_bounds(self, page, limit):
        with pytest.raises(ValueError):
            PaginationParams(page=page, limit=limit, max_limit=5000).validate_bounds()

    def test_build_page(self):
        page = build_page(["a"] * 10, total=25, params=PaginationParams(page=2, limit=10))
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is True

    def test_build_empty_page(self):
        page = build_page([], total=0, params=PaginationParams(page=1, limit=10))
        assert page.total_pages == 0
        assert page.has_next is False


class TestStringHelpers:

    def test_escape_like(self):
        assert escape_like("100%") == "100\\%"
        assert escape_like("a_b") == "a\\_b"
        assert escape_like("back\\slash") == "back\\\\slash"
        assert escape_like("plain") == "plain"

    def test_parse_uuid(self):
        value = parse_uuid("12345678-1234-5678-1234-567812345678")
        assert parse_uuid(value) is value
        with pytest.raises(ValueError):
            parse_uuid("not-a-uuid")


# ============================================================================
# Settings
# ============================================================================

class TestSettings:

    def test_database_url_override(self):
        settings = Settings(database_url="sqlite:///catalog.db")
        assert settings.sqlalchemy_url == "sqlite:///catalog.db"

    def test_postgres_url_from_parts(self):
        settings = Settings(database_url=None, db_host="db", db_user="svc", db_password="pw", db_name="catalog")
        url = settings.sqlalchemy_url
        assert url.drivername == "postgresql"
        assert url.host == "db"
        assert url.database == "catalog"

    def test_datadog_logger_prefixes(self):
        settings = Settings(datadog_include_loggers="catalog_app, api.competency ,")
        assert settings.datadog_logger_prefixes == ["catalog_app", "api.competency"]

    def test_is_local(self):
        assert Settings(environment="dev").is_local is True
        assert Settings(environment="prod").is_local is False


# ============================================================================
# Datadog Log Handler
# ============================================================================

def _record(name="catalog_app", msg="GET /competencies 200", **extra):
    record = logging.LogRecord(name, logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestDatadogLogger:

    def test_no_api_key_sends_nothing(self):
        handler = DatadogLogger(service="competency-catalog", api_key=None)
        with patch("settings.datadog_logger.requests.post") as mock_post:
            handler.emit(_record())
        mock_post.assert_not_called()

    def test_structured_fields_become_tags(self):
        handler = DatadogLogger(service="competency-catalog", api_key="key", env="qa")
        record = _record(**{"http.method": "GET", "http.status_code": 200, "event_type": "http_request_complete"})

        with patch("settings.datadog_logger.requests.post") as mock_post:
            handler.emit(record)

        payload = json.loads(mock_post.call_args.kwargs["data"])
        assert payload["http.method"] == "GET"
        assert payload["logger"] == "catalog_app"
        assert payload["ddtags"] == (
            "env:qa,service:competency-catalog,http.method:get,"
            "http.status_code:200,event_type:http_request_complete"
        )
        assert mock_post.call_args.kwargs["headers"]["DD-API-KEY"] == "key"

    def test_uvicorn_access_log_is_parsed(self):
        handler = DatadogLogger(service="competency-catalog", api_key="key")
        record = _record(name="uvicorn.access", msg='10.2.10.131:35054 - "GET /competencies?page=2 HTTP/1.1" 200')

        payload = handler.build_payload(record)

        assert payload["http.method"] == "GET"
        assert payload["http.url"] == "/competencies"
        assert payload["http.status_code"] == 200

    def test_allowlist_and_exclusions(self):
        handler = DatadogLogger(service="svc", api_key="key", include_loggers=["catalog_app"])
        assert handler.should_log(_record(name="catalog_app"))
        assert not handler.should_log(_record(name="sqlalchemy.engine"))

        default_handler = DatadogLogger(service="svc", api_key="key")
        assert not default_handler.should_log(_record(name="httpcore.connection"))
        assert default_handler.should_log(_record(name="api.competency.domain"))

    def test_transport_failure_is_handled(self):
        handler = DatadogLogger(service="svc", api_key="key")
        with patch("settings.datadog_logger.requests.post", side_effect=ConnectionError("down")):
            with patch.object(handler, "handleError") as mock_handle_error:
                handler.emit(_record())
        mock_handle_error.assert_called_once()
