"""Email service for planner reminder notifications"""
import html
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from studykit.config import settings
from studykit.utils.monitoring import StructuredLogger


class EmailService:
    """Service for sending email notifications"""

    @staticmethod
    def default_recipient() -> Optional[str]:
        """Fallback address when a reminder request names no recipient"""
        return settings.NOTIFY_EMAIL_TO or settings.EMAIL_FROM or settings.SMTP_USER or None

    @staticmethod
    def send_email(
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Send email notification

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_body: HTML email body
            text_body: Plain text email body (optional)

        Returns:
            True if sent successfully, False otherwise
        """
        if not settings.EMAIL_ENABLED:
            StructuredLogger.log_event(
                "email_disabled",
                "Email notifications are disabled",
                metadata={"to_email": to_email, "subject": subject},
                level="WARNING",
            )
            return False

        if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
            StructuredLogger.log_event(
                "email_config_missing",
                "Email configuration is missing",
                metadata={"to_email": to_email},
                level="WARNING",
            )
            return False

        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = settings.EMAIL_FROM or settings.SMTP_USER
            msg['To'] = to_email

            if text_body:
                msg.attach(MIMEText(text_body, 'plain'))
            msg.attach(MIMEText(html_body, 'html'))

            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
                server.starttls()
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg)

            StructuredLogger.log_event(
                "email_sent",
                f"Email sent to {to_email}",
                metadata={
                    "to_email": to_email,
                    "subject": subject,
                },
            )
            return True

        except (smtplib.SMTPException, OSError) as e:
            StructuredLogger.log_error(
                e,
                context={
                    "function": "send_email",
                    "to_email": to_email,
                    "subject": subject,
                },
            )
            return False

    @staticmethod
    def send_task_reminder_email(
        to_email: str,
        task_date: str,
        subject_name: str,
        priority: str,
        notes: Optional[str] = None,
    ) -> bool:
        """
        Send a planner task reminder

        Args:
            to_email: Recipient email address
            task_date: Planner date the task is scheduled on
            subject_name: Task subject
            priority: Low, Medium or High
            notes: Optional task notes

        Returns:
            True if sent successfully, False otherwise
        """
        subject = f"📚 Reminder: {subject_name} on {task_date}"

        border_color = {
            "High": "#dc2626",
            "Medium": "#ea580c",
        }.get(priority, "#3b82f6")

        notes_html = ""
        if notes:
            notes_html = f'<p style="font-size: 14px; margin: 8px 0;">Notes: {html.escape(notes)}</p>'

        html_body = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #f9fafb; border-radius: 8px; padding: 24px; border-left: 4px solid {border_color};">
                <h2 style="margin-top: 0;">Task reminder</h2>
                <p style="font-size: 16px; margin: 16px 0;">
                    <strong>{html.escape(subject_name)}</strong> is planned for <strong>{task_date}</strong>
                    (priority: {priority}).
                </p>
                {notes_html}
                <p style="font-size: 14px; color: #6b7280; margin-top: 24px;">
                    This is an automated reminder from Student Life Toolkit.
                </p>
            </div>
        </body>
        </html>
        """

        text_lines = [
            subject,
            "",
            f"{subject_name} is planned for {task_date} (priority: {priority}).",
        ]
        if notes:
            text_lines.append(f"Notes: {notes}")
        text_lines.extend(["", "This is an automated reminder from Student Life Toolkit."])

        return EmailService.send_email(
            to_email=to_email,
            subject=subject,
            html_body=html_body,
            text_body="\n".join(text_lines),
        )
