"""Out-of-band delivery of the run summary (email and webhook)."""

import smtplib
from email.message import EmailMessage
from typing import Any, Dict

import requests

from mysqlbackup.models import NotificationSettings


class NotificationService:
    """Sends the summary through every configured channel.

    Delivery problems are logged and never raised: a failed notification must
    not change the outcome of the backup run.
    """

    def __init__(self, settings: NotificationSettings, logger, smtp_module=smtplib, requests_module=requests):
        self.settings = settings
        self.logger = logger
        self.smtp = smtp_module
        self.requests = requests_module

    def notify(self, summary: Dict[str, Any], body: str) -> bool:
        if not self.settings.enabled:
            return False

        subject = f"{self.settings.subject_prefix} {summary['status']}"
        delivered = False

        if self.settings.email_to:
            delivered = self.send_email(subject, body) or delivered
        if self.settings.webhook_url:
            delivered = self.send_webhook(subject, summary) or delivered
        if not self.settings.email_to and not self.settings.webhook_url:
            self.logger.warning("Notifications enabled but no email recipient or webhook configured.")

        return delivered

    def send_email(self, subject: str, body: str) -> bool:
        settings = self.settings
        if not settings.smtp_host or not settings.email_from:
            self.logger.warning("Email notification skipped: smtp_host and email_from are required.")
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = settings.email_from
        msg["To"] = ", ".join(settings.email_to)
        msg.set_content(body)

        try:
            with self.smtp.SMTP(host=settings.smtp_host, port=settings.smtp_port, timeout=settings.timeout) as smtp:
                if settings.smtp_starttls:
                    smtp.starttls()
                if settings.smtp_user:
                    smtp.login(settings.smtp_user, settings.smtp_password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            self.logger.error("Could not send notification email: %s", exc)
            return False

        self.logger.info("Notification email sent to %s", msg["To"])
        return True

    def send_webhook(self, subject: str, summary: Dict[str, Any]) -> bool:
        payload = {"subject": subject, "summary": summary}
        try:
            response = self.requests.post(
                self.settings.webhook_url,
                json=payload,
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            self.logger.error("Could not deliver webhook notification: %s", exc)
            return False

        self.logger.info("Webhook notification delivered.")
        return True
