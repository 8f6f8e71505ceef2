"""
Unit tests for the volunteer applications repository.

Queries are checked by compiling the statement handed to the session.
"""

import re
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy.dialects import postgresql

from lmghi_api.modules.volunteer_applications import repository
from lmghi_api.modules.volunteer_applications.models import (
    ApplicationStatus,
    VolunteerApplication,
)
from lmghi_api.modules.volunteer_applications.schemas import ValidatedApplication


def _compiled(mock_db):
    statement = mock_db.execute.call_args[0][0]
    return statement.compile(dialect=postgresql.dialect())


def _compiled_sql(mock_db) -> str:
    return str(_compiled(mock_db))


def _result_with(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class TestCreate:
    """Tests for repository.create."""

    @pytest.mark.asyncio
    async def test_inserts_pending_row(self, mock_db):
        data = ValidatedApplication(
            full_name="Ada Mensah",
            email="ada@lmghi.org",
            role_interest="Data Collection",
        )

        application = await repository.create(mock_db, data)

        assert isinstance(application, VolunteerApplication)
        assert application.full_name == "Ada Mensah"
        assert application.role_interest == "Data Collection"
        assert application.phone is None
        assert application.status == ApplicationStatus.PENDING
        mock_db.add.assert_called_once_with(application)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_id_assigned_before_commit(self, mock_db):
        """The returned row is complete without a post-commit round trip."""
        ids_at_commit = []
        mock_db.commit.side_effect = lambda: ids_at_commit.append(
            mock_db.add.call_args[0][0].id
        )
        mock_db.refresh.side_effect = RuntimeError("connection reset")

        application = await repository.create(
            mock_db, ValidatedApplication(full_name="Ada", email="ada@lmghi.org")
        )

        assert isinstance(application.id, UUID)
        assert ids_at_commit == [application.id]
        mock_db.refresh.assert_not_called()


class TestListApplications:
    """Tests for repository.list_applications."""

    @pytest.mark.asyncio
    async def test_newest_first_with_limit(self, mock_db, sample_application):
        mock_db.execute.return_value = _result_with([sample_application])

        rows = await repository.list_applications(mock_db, limit=25)

        assert rows == [sample_application]
        sql = _compiled_sql(mock_db)
        assert "ORDER BY volunteer_applications.created_at DESC" in sql
        assert "LIMIT" in sql
        assert "WHERE" not in sql

    @pytest.mark.asyncio
    async def test_status_filter(self, mock_db):
        mock_db.execute.return_value = _result_with([])

        await repository.list_applications(mock_db, status=ApplicationStatus.REVIEWED)

        sql = _compiled_sql(mock_db)
        assert "volunteer_applications.status =" in sql

    @pytest.mark.asyncio
    async def test_search_matches_name_or_email(self, mock_db):
        mock_db.execute.return_value = _result_with([])

        await repository.list_applications(mock_db, search="ada")

        sql = _compiled_sql(mock_db)
        assert "volunteer_applications.full_name ILIKE" in sql
        assert "volunteer_applications.email ILIKE" in sql
        assert " OR " in sql

    @pytest.mark.asyncio
    async def test_status_and_search_combined(self, mock_db):
        """Status narrows the name-or-email match rather than widening it."""
        mock_db.execute.return_value = _result_with([])

        await repository.list_applications(
            mock_db, status=ApplicationStatus.SHORTLISTED, search="amy", limit=200
        )

        compiled = _compiled(mock_db)
        sql = " ".join(str(compiled).split())
        assert re.search(
            r"volunteer_applications\.status = %\(\w+\)s AND \("
            r"volunteer_applications\.full_name ILIKE .* OR "
            r"volunteer_applications\.email ILIKE .*\)",
            sql,
        )
        assert "LIMIT" in sql
        assert "%amy%" in compiled.params.values()
        assert 200 in compiled.params.values()
        assert ApplicationStatus.SHORTLISTED in compiled.params.values()


class TestEscapeLike:
    """Tests for LIKE wildcard escaping in search terms."""

    def test_wildcards_are_escaped(self):
        assert repository._escape_like("100%_sure") == "100\\%\\_sure"

    def test_backslash_is_escaped(self):
        assert repository._escape_like("a\\b") == "a\\\\b"

    def test_plain_text_unchanged(self):
        assert repository._escape_like("ada@lmghi.org") == "ada@lmghi.org"


class TestUpdateStatus:
    """Tests for repository.update_status."""

    @pytest.mark.asyncio
    async def test_updates_existing_row(self, mock_db, sample_application):
        mock_db.get.return_value = sample_application

        result = await repository.update_status(
            mock_db, sample_application.id, ApplicationStatus.REVIEWED
        )

        assert result is sample_application
        assert sample_application.status == ApplicationStatus.REVIEWED
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_row_returns_none(self, mock_db):
        mock_db.get.return_value = None

        result = await repository.update_status(mock_db, uuid4(), ApplicationStatus.REVIEWED)

        assert result is None
        mock_db.commit.assert_not_called()
