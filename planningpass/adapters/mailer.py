from __future__ import annotations

import html
import logging
import smtplib
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Any, Callable

from planningpass.config import Settings
from planningpass.errors import NotificationError


logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = 'Planning Assessment Confirmation - PlanningPass'
TEST_SUBJECT = 'PlanningPass Email Test'

NEXT_STEPS = (
    ('Expert Review (24 hours)', 'Our qualified planning consultants will review your submission'),
    ('Detailed Analysis (48 hours)', "We'll prepare a comprehensive assessment with recommendations"),
    ('Report Delivery (72 hours)', "You'll receive your detailed planning report via email"),
)


@dataclass
class MailerConfig:
    host: str
    port: int
    user: str | None
    password: str | None
    use_ssl: bool = True
    timeout_seconds: int = 30
    sender_name: str = 'PlanningPass'
    support_email: str = 'planning@planningpass.co.uk'


def reference_id(now: float | None = None) -> str:
    millis = int((time.time() if now is None else now) * 1000)
    return f'PPA-{str(millis)[-6:]}'


def _text(data: Mapping[str, Any], key: str, default: str = 'N/A') -> str:
    value = data.get(key)
    return html.escape(str(value)) if value else default


class ConfirmationMailer:
    def __init__(self, cfg: MailerConfig, smtp_factory: Callable[..., smtplib.SMTP] | None = None):
        self.cfg = cfg
        self._smtp_factory = smtp_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> ConfirmationMailer:
        return cls(
            MailerConfig(
                host=settings.email_host,
                port=settings.email_port,
                user=settings.email_user,
                password=settings.email_pass,
                use_ssl=settings.email_use_ssl,
                timeout_seconds=settings.email_timeout_seconds,
                sender_name=settings.email_sender_name,
                support_email=settings.support_email,
            )
        )

    @property
    def configured(self) -> bool:
        return bool(self.cfg.user and self.cfg.password)

    @property
    def sender(self) -> str:
        return formataddr((self.cfg.sender_name, str(self.cfg.user or '')))

    def compose_confirmation(self, data: Mapping[str, Any], *, ref: str | None = None) -> EmailMessage:
        steps = ''.join(
            f'<li><strong>{title}</strong><br>{detail}</li>' for title, detail in NEXT_STEPS
        )
        body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #8b5cf6;">PlanningPass</h1>
  <p>Professional Planning Assessment</p>
  <h2>Assessment Confirmation</h2>
  <p>Dear {_text(data, 'name', 'Homeowner')},</p>
  <p>Thank you for submitting your planning assessment. We have received your request and our expert team will begin processing it immediately.</p>
  <h3>What happens next?</h3>
  <ol>{steps}</ol>
  <h3>Your Submission Details</h3>
  <p><strong>Property Type:</strong> {_text(data, 'homeType')}</p>
  <p><strong>Project Type:</strong> {_text(data, 'projectType')}</p>
  <p><strong>Property Address:</strong> {_text(data, 'address')}</p>
  <p><strong>Reference ID:</strong> {ref or reference_id()}</p>
  <p>Need help? Contact our planning experts: <strong>{html.escape(self.cfg.support_email)}</strong></p>
  <p style="color: #9ca3af; font-size: 12px;">This is an automated confirmation. Please do not reply to this email.</p>
</div>
"""
        message = EmailMessage()
        message['Subject'] = CONFIRMATION_SUBJECT
        message['From'] = self.sender
        message['To'] = str(data.get('email') or '')
        message.set_content('Thank you for submitting your planning assessment. We have received your request.')
        message.add_alternative(body, subtype='html')
        return message

    def compose_test_message(self) -> EmailMessage:
        message = EmailMessage()
        message['Subject'] = TEST_SUBJECT
        message['From'] = formataddr((f'{self.cfg.sender_name} Test', str(self.cfg.user or '')))
        message['To'] = str(self.cfg.user or '')
        message.set_content('Your PlanningPass email configuration is working correctly.')
        message.add_alternative(
            '<div style="font-family: Arial, sans-serif; padding: 20px;">'
            '<h2>Email Test Successful!</h2>'
            '<p>Your PlanningPass email configuration is working correctly.</p>'
            f'<p><strong>Test Time:</strong> {datetime.now().strftime("%d/%m/%Y, %H:%M:%S")}</p>'
            '</div>',
            subtype='html',
        )
        return message

    def _connect(self) -> smtplib.SMTP:
        if self._smtp_factory is not None:
            return self._smtp_factory(self.cfg.host, self.cfg.port, timeout=self.cfg.timeout_seconds)
        if self.cfg.use_ssl:
            return smtplib.SMTP_SSL(self.cfg.host, self.cfg.port, timeout=self.cfg.timeout_seconds)
        smtp = smtplib.SMTP(self.cfg.host, self.cfg.port, timeout=self.cfg.timeout_seconds)
        smtp.starttls()
        return smtp

    def send(self, message: EmailMessage) -> str:
        if not self.configured:
            raise NotificationError('Email configuration incomplete')
        if 'Message-ID' not in message:
            message['Message-ID'] = make_msgid()
        try:
            with self._connect() as smtp:
                smtp.login(str(self.cfg.user), str(self.cfg.password))
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f'Failed to send email: {exc}') from exc
        return str(message['Message-ID'])

    def notify(self, data: Mapping[str, Any]) -> bool:
        """Send the submission confirmation; failures are logged, never raised."""
        if not data.get('email'):
            logger.info('Email not sent: no email address provided in form data.')
            return False
        if not self.configured:
            logger.error('Email not sent: missing email credentials in environment variables')
            return False
        try:
            message_id = self.send(self.compose_confirmation(data))
        except NotificationError:
            logger.exception('Error sending confirmation email to %s', data.get('email'))
            return False
        logger.info('Confirmation email sent. Message ID: %s', message_id)
        return True

    def send_test_email(self) -> str:
        message_id = self.send(self.compose_test_message())
        logger.info('Test email sent. Message ID: %s', message_id)
        return message_id
