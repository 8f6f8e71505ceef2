"""
Volunteer Application Notifications

Best-effort email side effects run after an application row is saved.
The row is the record of truth, so nothing in here may raise: every
failure is logged and reported back as a warning string.
"""

import logging
from dataclasses import dataclass

from lmghi_api.core.config import settings
from lmghi_api.core.email import (
    EmailConfigurationError,
    ensure_deliverable,
    is_sandbox_sender,
    send_volunteer_application_notice,
    send_volunteer_application_received,
)
from lmghi_api.modules.volunteer_applications.models import VolunteerApplication

logger = logging.getLogger(__name__)

EMAIL_FAILED_WARNING = "Saved, but email failed to send."


@dataclass
class NotificationResult:
    admin_notified: bool = False
    applicant_notified: bool = False
    warning: str | None = None


async def _notify_admins(application: VolunteerApplication) -> NotificationResult:
    recipients = settings.admin_notify_emails
    if not recipients:
        logger.warning("No admin email configured; skipping admin notification.")
        return NotificationResult()

    try:
        ensure_deliverable(recipients)
    except EmailConfigurationError as e:
        logger.error(f"Admin notification not sent for application {application.id}: {e}")
        return NotificationResult(warning=f"Saved, but email is misconfigured: {e}")

    sent = await send_volunteer_application_notice(
        to_emails=recipients,
        full_name=application.full_name,
        email=application.email,
        phone=application.phone,
        role_interest=application.role_interest,
        country=application.country,
        city=application.city,
        availability=application.availability,
        motivation=application.motivation,
        cv_url=application.cv_url,
    )
    if not sent:
        logger.error(f"Admin notification failed for application {application.id}")
        return NotificationResult(warning=EMAIL_FAILED_WARNING)

    return NotificationResult(admin_notified=True)


async def _notify_applicant(application: VolunteerApplication) -> bool:
    if is_sandbox_sender():
        try:
            ensure_deliverable([application.email])
        except EmailConfigurationError:
            logger.info(
                f"Skipping applicant confirmation for {application.id}: sandbox sender in use"
            )
            return False

    sent = await send_volunteer_application_received(
        to_email=application.email,
        full_name=application.full_name,
        role_interest=application.role_interest,
    )
    if not sent:
        logger.error(f"Applicant confirmation failed for application {application.id}")
    return sent


async def dispatch_application_notifications(
    application: VolunteerApplication,
) -> NotificationResult:
    """
    Notify the admin mailboxes (and optionally the applicant) of a new application.

    Never raises. A configuration problem or provider failure on the admin
    notification is returned as ``warning``; the applicant confirmation is
    silent on failure.
    """
    try:
        result = await _notify_admins(application)
    except Exception as e:
        logger.exception(f"Exception sending admin notification for {application.id}: {e}")
        result = NotificationResult(warning=EMAIL_FAILED_WARNING)

    if settings.send_applicant_confirmation:
        try:
            result.applicant_notified = await _notify_applicant(application)
        except Exception as e:
            logger.exception(f"Exception sending applicant confirmation for {application.id}: {e}")

    return result
