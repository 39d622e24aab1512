import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from datetime import date, datetime, timedelta

from counseling.core.config import settings

logger = logging.getLogger(__name__)

_MODE_LABELS = {"online": "Online session", "offline": "In-person session"}
_TYPE_LABELS = {"regular": "Regular consultation", "welfare": "Welfare consultation"}


def _send_email_sync(to_email: str, subject: str, html_body: str) -> None:
    """Send email via SMTP (blocking). Use from background task."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send")
        return
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _slot_display(appointment_date: date, appointment_time: str) -> tuple[str, str]:
    start = datetime.combine(appointment_date, datetime.strptime(appointment_time, "%H:%M").time())
    end = start + timedelta(minutes=settings.session_duration_minutes)
    return start.strftime("%A, %B %d, %Y"), f"{start:%H:%M} – {end:%H:%M}"


def build_booking_received_html(
    recipient_name: str,
    appointment_date: date,
    appointment_time: str,
    consultation_type: str,
    consultation_mode: str,
) -> str:
    date_str, time_str = _slot_display(appointment_date, appointment_time)
    return f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Booking received</title></head>
<body style="margin:0;padding:24px;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;background-color:#f3f4f6;">
  <div style="max-width:560px;margin:0 auto;background:#ffffff;border-radius:12px;padding:32px;">
    <h1 style="margin:0 0 8px 0;font-size:22px;color:#111827;">Booking received</h1>
    <p style="margin:0 0 24px 0;font-size:15px;color:#6b7280;">Hi {recipient_name or 'there'}, we have received your request. The counselor will confirm it shortly.</p>
    <p style="margin:0;font-size:16px;font-weight:600;color:#111827;">{date_str}</p>
    <p style="margin:4px 0 16px 0;font-size:16px;color:#111827;">{time_str}</p>
    <p style="margin:0 0 4px 0;font-size:14px;color:#374151;">{_TYPE_LABELS.get(consultation_type, consultation_type)} · {_MODE_LABELS.get(consultation_mode, consultation_mode)}</p>
    <p style="margin:24px 0 0 0;font-size:13px;color:#6b7280;">Changes and cancellations are accepted until {settings.modification_cutoff_hour}:00 on the day before your session.</p>
    <p style="margin:24px 0 0 0;font-size:13px;color:#6b7280;">{settings.site_name}<br>{settings.contact_phone} {settings.contact_address}</p>
  </div>
</body>
</html>
"""


def send_booking_received_email(
    to_email: str,
    recipient_name: str | None,
    appointment_date: date,
    appointment_time: str,
    consultation_type: str,
    consultation_mode: str,
) -> None:
    """Compose and send the booking receipt (call from background task)."""
    subject = f"{settings.site_name} – Booking received"
    html = build_booking_received_html(
        recipient_name=_html_escape(recipient_name or ""),
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        consultation_type=consultation_type,
        consultation_mode=consultation_mode,
    )
    _send_email_sync(to_email, subject, html)


def send_counselor_booking_notification(
    counselor_email: str,
    visitor_name: str,
    visitor_email: str,
    appointment_date: date,
    appointment_time: str,
    consultation_mode: str,
) -> None:
    date_str, time_str = _slot_display(appointment_date, appointment_time)
    subject = f"New booking: {date_str} {appointment_time}"
    html = (
        f"<p>New appointment request from <strong>{_html_escape(visitor_name)}</strong> "
        f"({_html_escape(visitor_email)}).</p>"
        f"<p>{date_str}, {time_str} · {_MODE_LABELS.get(consultation_mode, consultation_mode)}</p>"
    )
    _send_email_sync(counselor_email, subject, html)
