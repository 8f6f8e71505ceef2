"""
Unit tests for volunteer application notifications.

These tests cover:
- The sandbox sender restriction on admin recipients
- Provider failures reported as warnings
- The optional applicant confirmation
"""

from unittest.mock import AsyncMock, patch

import pytest

from lmghi_api.core.config import settings
from lmghi_api.modules.volunteer_applications.notifications import (
    EMAIL_FAILED_WARNING,
    dispatch_application_notifications,
)

NOTIFICATIONS = "lmghi_api.modules.volunteer_applications.notifications"
ACCOUNT_EMAIL = "owner@lmghi.org"


@pytest.fixture
def sandbox_sender(monkeypatch):
    monkeypatch.setattr(settings, "email_from", "LMGHI <onboarding@resend.dev>")
    monkeypatch.setattr(settings, "resend_account_email", ACCOUNT_EMAIL)
    monkeypatch.setattr(settings, "admin_notify_email", None)
    monkeypatch.setattr(settings, "send_applicant_confirmation", False)


@pytest.fixture
def verified_sender(monkeypatch):
    monkeypatch.setattr(settings, "email_from", "LMGHI <volunteers@lmghi.org>")
    monkeypatch.setattr(settings, "resend_account_email", None)
    monkeypatch.setattr(settings, "admin_notify_email", "team@lmghi.org, director@lmghi.org")
    monkeypatch.setattr(settings, "send_applicant_confirmation", False)


class TestAdminNotification:
    """Tests for the admin notification."""

    @pytest.mark.asyncio
    async def test_sandbox_sender_to_account_email(self, sandbox_sender, sample_application):
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            mock_send.return_value = True

            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is True
            assert result.warning is None
            assert mock_send.call_args.kwargs["to_emails"] == [ACCOUNT_EMAIL]
            assert mock_send.call_args.kwargs["email"] == "ada@lmghi.org"

    @pytest.mark.asyncio
    async def test_sandbox_sender_other_recipient_is_misconfigured(
        self, sandbox_sender, sample_application, monkeypatch
    ):
        monkeypatch.setattr(settings, "admin_notify_email", "team@lmghi.org")
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is False
            assert result.warning.startswith("Saved, but email is misconfigured:")
            assert "RESEND_ACCOUNT_EMAIL" in result.warning
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sandbox_sender_without_account_email(
        self, sandbox_sender, sample_application, monkeypatch
    ):
        monkeypatch.setattr(settings, "resend_account_email", None)
        monkeypatch.setattr(settings, "admin_notify_email", "team@lmghi.org")
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            result = await dispatch_application_notifications(sample_application)

            assert result.warning.startswith("Saved, but email is misconfigured:")
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_verified_sender_any_recipients(self, verified_sender, sample_application):
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            mock_send.return_value = True

            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is True
            assert mock_send.call_args.kwargs["to_emails"] == [
                "team@lmghi.org",
                "director@lmghi.org",
            ]

    @pytest.mark.asyncio
    async def test_no_recipients_configured(self, verified_sender, sample_application, monkeypatch):
        monkeypatch.setattr(settings, "admin_notify_email", None)
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is False
            assert result.warning is None
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_failure_is_a_warning(self, verified_sender, sample_application):
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            mock_send.return_value = False

            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is False
            assert result.warning == EMAIL_FAILED_WARNING

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_a_warning(self, verified_sender, sample_application):
        with patch(
            f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
        ) as mock_send:
            mock_send.side_effect = RuntimeError("boom")

            result = await dispatch_application_notifications(sample_application)

            assert result.warning == EMAIL_FAILED_WARNING


class TestApplicantConfirmation:
    """Tests for the optional applicant confirmation."""

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, verified_sender, sample_application):
        with (
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
            ) as mock_notice,
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_received", new_callable=AsyncMock
            ) as mock_received,
        ):
            mock_notice.return_value = True

            result = await dispatch_application_notifications(sample_application)

            assert result.applicant_notified is False
            mock_received.assert_not_called()

    @pytest.mark.asyncio
    async def test_sent_with_verified_sender(
        self, verified_sender, sample_application, monkeypatch
    ):
        monkeypatch.setattr(settings, "send_applicant_confirmation", True)
        with (
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
            ) as mock_notice,
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_received", new_callable=AsyncMock
            ) as mock_received,
        ):
            mock_notice.return_value = True
            mock_received.return_value = True

            result = await dispatch_application_notifications(sample_application)

            assert result.applicant_notified is True
            mock_received.assert_awaited_once_with(
                to_email="ada@lmghi.org",
                full_name="Ada Mensah",
                role_interest="Community Outreach",
            )

    @pytest.mark.asyncio
    async def test_skipped_under_sandbox_sender(
        self, sandbox_sender, sample_application, monkeypatch
    ):
        monkeypatch.setattr(settings, "send_applicant_confirmation", True)
        with (
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
            ) as mock_notice,
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_received", new_callable=AsyncMock
            ) as mock_received,
        ):
            mock_notice.return_value = True

            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is True
            assert result.applicant_notified is False
            mock_received.assert_not_called()

    @pytest.mark.asyncio
    async def test_confirmation_failure_does_not_add_warning(
        self, verified_sender, sample_application, monkeypatch
    ):
        monkeypatch.setattr(settings, "send_applicant_confirmation", True)
        with (
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_notice", new_callable=AsyncMock
            ) as mock_notice,
            patch(
                f"{NOTIFICATIONS}.send_volunteer_application_received", new_callable=AsyncMock
            ) as mock_received,
        ):
            mock_notice.return_value = True
            mock_received.side_effect = RuntimeError("boom")

            result = await dispatch_application_notifications(sample_application)

            assert result.admin_notified is True
            assert result.applicant_notified is False
            assert result.warning is None
