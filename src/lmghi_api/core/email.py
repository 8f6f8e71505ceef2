"""
Email Service using Resend

Handles sending notification emails for the volunteer intake flow.
"""

import asyncio
import logging
from email.utils import parseaddr
from html import escape

import resend

from lmghi_api.core.config import settings

logger = logging.getLogger(__name__)

NOT_PROVIDED = "not provided"


class EmailConfigurationError(RuntimeError):
    """Raised when the email settings cannot deliver to the requested recipients."""


def sender_address(from_header: str | None = None) -> str:
    """Bare address of a ``Name <address>`` sender header, lowercased."""
    return parseaddr(from_header or settings.email_from)[1].lower()


def is_sandbox_sender(from_header: str | None = None) -> bool:
    """True when the sender belongs to Resend's shared test domain."""
    address = sender_address(from_header)
    return address.endswith(f"@{settings.resend_sandbox_domain.lower()}")


def ensure_deliverable(recipients: list[str]) -> None:
    """
    Refuse recipient lists the configured sender cannot deliver to.

    Resend's test sender only delivers to the account's own verified
    address. Sending anywhere else is accepted by the API but never
    arrives, so it is treated as a configuration error up front.

    Raises:
        EmailConfigurationError: If the sandbox sender is in use and any
            recipient differs from RESEND_ACCOUNT_EMAIL
    """
    if not is_sandbox_sender():
        return

    account_email = (settings.resend_account_email or "").strip().lower()
    if not account_email:
        raise EmailConfigurationError(
            f"Resend test sender in use ({sender_address()}). "
            "Set RESEND_ACCOUNT_EMAIL on the server."
        )

    mismatched = [r for r in recipients if r.strip().lower() != account_email]
    if mismatched:
        raise EmailConfigurationError(
            f"Resend sender '{sender_address()}' can only send to your Resend account email. "
            "Ensure ADMIN_NOTIFY_EMAIL matches RESEND_ACCOUNT_EMAIL."
        )


async def send_email(
    to_emails: list[str],
    subject: str,
    html_content: str,
    text_content: str | None = None,
    reply_to: str | None = None,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_emails: Recipient email addresses
        subject: Email subject line
        html_content: HTML content of the email
        text_content: Optional plain-text alternative
        reply_to: Optional Reply-To address

    Returns:
        True if email was sent successfully
    """
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {', '.join(to_emails)} | SUBJECT: {subject}")
        return True

    resend.api_key = settings.resend_api_key

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": to_emails,
            "subject": subject,
            "html": html_content,
        }
        if text_content:
            params["text"] = text_content
        if reply_to:
            params["reply_to"] = reply_to

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {len(to_emails)} recipient(s), id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email '{subject}': {e}")
        return False


def _display(value: str | None) -> str:
    return value if value else "-"


def build_application_notice_text(
    full_name: str,
    email: str,
    phone: str | None,
    role_interest: str | None,
    country: str | None,
    city: str | None,
    availability: str | None,
    motivation: str | None,
    cv_url: str | None,
) -> str:
    """Plain-text body of the admin notification."""
    return (
        "New application received:\n\n"
        f"Name: {full_name}\n"
        f"Email: {email}\n"
        f"Phone: {_display(phone)}\n"
        f"Role interest: {_display(role_interest)}\n"
        f"Country: {_display(country)}\n"
        f"City: {_display(city)}\n"
        f"Availability: {_display(availability)}\n"
        f"Motivation:\n{_display(motivation)}\n\n"
        f"CV: {cv_url or NOT_PROVIDED}"
    )


async def send_volunteer_application_notice(
    to_emails: list[str],
    full_name: str,
    email: str,
    phone: str | None,
    role_interest: str | None,
    country: str | None,
    city: str | None,
    availability: str | None,
    motivation: str | None,
    cv_url: str | None,
) -> bool:
    """Send the new-application notification to the admin mailboxes."""
    # Escape user inputs to prevent XSS
    safe_name = escape(full_name)
    safe_email = escape(email)
    safe_phone = escape(_display(phone))
    safe_role = escape(_display(role_interest))
    safe_location = escape(", ".join(part for part in (city, country) if part) or "-")
    safe_availability = escape(_display(availability))
    # Newlines in the motivation are preserved with <br>
    safe_motivation = escape(_display(motivation)).replace("\n", "<br>")

    if cv_url:
        safe_cv_url = escape(cv_url, quote=True)
        cv_html = f'<a href="{safe_cv_url}">Open CV</a>'
    else:
        cv_html = NOT_PROVIDED

    admin_url = f"{settings.site_url.rstrip('/')}/admin/applications"
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #065f46; margin-bottom: 24px; }}
            .summary-box {{ background-color: #f9fafb; border: 1px solid #e5e7eb; padding: 16px; border-radius: 8px; margin: 16px 0; }}
            .summary-box ul {{ margin: 8px 0 0 0; padding-left: 20px; }}
            .summary-box li {{ margin-bottom: 4px; }}
            .motivation {{ background-color: #ecfdf5; border: 1px solid #a7f3d0; padding: 16px; border-radius: 8px; margin: 16px 0; }}
            .button {{ display: inline-block; background-color: #065f46; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">New Volunteer Application</h1>

            <div class="summary-box">
                <ul>
                    <li><strong>Name:</strong> {safe_name}</li>
                    <li><strong>Email:</strong> {safe_email}</li>
                    <li><strong>Phone:</strong> {safe_phone}</li>
                    <li><strong>Role interest:</strong> {safe_role}</li>
                    <li><strong>Location:</strong> {safe_location}</li>
                    <li><strong>Availability:</strong> {safe_availability}</li>
                    <li><strong>CV:</strong> {cv_html}</li>
                </ul>
            </div>

            <p><strong>Motivation:</strong></p>
            <div class="motivation">{safe_motivation}</div>

            <a href="{admin_url}" class="button">Review Applications</a>

            <div class="footer">
                <p>LMGHI - Volunteer Intake</p>
            </div>
        </div>
    </body>
    </html>
    """

    text_content = build_application_notice_text(
        full_name=full_name,
        email=email,
        phone=phone,
        role_interest=role_interest,
        country=country,
        city=city,
        availability=availability,
        motivation=motivation,
        cv_url=cv_url,
    )

    return await send_email(
        to_emails=to_emails,
        subject="New Volunteer Application - LMGHI",
        html_content=html_content,
        text_content=text_content,
        reply_to=email,
    )


async def send_volunteer_application_received(
    to_email: str,
    full_name: str,
    role_interest: str | None,
) -> bool:
    """Send the submission confirmation to the applicant."""
    safe_name = escape(full_name)
    track_line = (
        f"<p>Track of interest: <strong>{escape(role_interest)}</strong></p>"
        if role_interest
        else ""
    )

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #065f46; margin-bottom: 24px; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Application Received</h1>

            <p>Hello {safe_name},</p>

            <p>Thank you for applying to volunteer with LMGHI. Your application has been received and will be reviewed by our team.</p>

            {track_line}

            <p>We will contact you if you are shortlisted.</p>

            <div class="footer">
                <p>If you didn't submit this application, you can safely ignore this email.</p>
                <p>LMGHI</p>
            </div>
        </div>
    </body>
    </html>
    """

    return await send_email(
        to_emails=[to_email],
        subject="We received your volunteer application - LMGHI",
        html_content=html_content,
    )
