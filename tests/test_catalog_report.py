"""
Tests for the catalog_report management command.

Run with:
    pytest tests/test_catalog_report.py -v
"""

import uuid
from unittest.mock import patch
from click.testing import CliRunner

from models import CompetencyStatus
from management_commands.catalog_report import catalog_report


class TestCatalogReport:

    def _run(self, session_factory, *args):
        with patch("settings.database.get_session_local", return_value=session_factory):
            return CliRunner().invoke(catalog_report, list(args))

    def test_prints_stats_and_subjects(self, session_factory, make_competency):
        make_competency(subject="Cardiology", status=CompetencyStatus.ACTIVE)
        make_competency(subject="Neurology")

        result = self._run(session_factory)

        assert result.exit_code == 0
        assert "Total:           2" in result.output
        assert "Active:          1" in result.output
        assert "- Cardiology: 1" in result.output
        assert "Neurology" not in result.output

    def test_without_subjects(self, session_factory):
        result = self._run(session_factory, "--no-subjects")

        assert result.exit_code == 0
        assert "ACTIVE SUBJECTS" not in result.output

    def test_history_of_unknown_competency_fails(self, session_factory):
        result = self._run(session_factory, "--history", str(uuid.uuid4()))

        assert result.exit_code == 1
        assert "not found" in result.output
