"""
Email Sender - Delivers composed alerts via SMTP
"""

import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List

import structlog

from .errors import DispatchError
from .models import AlertMessage

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

SMTP_TIMEOUT = 30


class EmailNotifier:
    """Sends alert emails; a no-op when email is disabled or incomplete"""

    def __init__(self, email_config: Dict[str, Any]):
        """
        Initialize notifier

        Args:
            email_config: The 'email' configuration section
        """
        self.smtp_server = email_config.get('smtp_server', 'smtp.gmail.com')
        self.smtp_port = email_config.get('smtp_port', 587)
        self.use_tls = email_config.get('use_tls', True)
        self.sender_email = email_config.get('sender_email') or ''
        self.sender_password = email_config.get('sender_password') or ''
        self.recipient_email = email_config.get('recipient_email') or ''

        if not email_config.get('enabled', False):
            logger.info("Email notifications disabled")
            self.enabled = False
        elif not (self.sender_email and self.sender_password and self.recipient_email):
            logger.warning("Email configuration incomplete. Email notifications disabled.")
            self.enabled = False
        else:
            logger.info("Email notifier initialized", smtp_server=self.smtp_server,
                        smtp_port=self.smtp_port)
            self.enabled = True

    def _recipients(self) -> List[str]:
        """Recipient addresses, accepting a list or a comma-separated string"""
        if isinstance(self.recipient_email, (list, tuple)):
            candidates = self.recipient_email
        else:
            candidates = str(self.recipient_email).split(',')
        return [r.strip() for r in candidates if r and r.strip()]

    def _build(self, message: AlertMessage) -> MIMEMultipart:
        """
        Build the two-part MIME message

        Raises:
            DispatchError: If an address does not parse
        """
        if not EMAIL_PATTERN.match(self.sender_email):
            raise DispatchError(f"Invalid sender email format: {self.sender_email}")

        recipients = self._recipients()
        if not recipients:
            raise DispatchError("No recipient email configured")
        for recipient in recipients:
            if not EMAIL_PATTERN.match(recipient):
                raise DispatchError(f"Invalid recipient email format: {recipient}")

        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = self.sender_email
        msg['To'] = ', '.join(recipients)

        # Plain text first so clients prefer the HTML part
        msg.attach(MIMEText(message.text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(message.html_body, 'html', 'utf-8'))
        return msg

    def _deliver(self, msg: MIMEMultipart):
        """Open an SMTP session and hand the message over"""
        if self.smtp_port == 465:
            with smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, timeout=SMTP_TIMEOUT) as server:
                server.login(self.sender_email, self.sender_password)
                server.send_message(msg)
            return

        with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=SMTP_TIMEOUT) as server:
            if self.use_tls:
                server.starttls()
            server.login(self.sender_email, self.sender_password)
            server.send_message(msg)

    def send(self, message: AlertMessage) -> bool:
        """
        Send a composed alert

        Args:
            message: Alert to deliver

        Returns:
            True if the SMTP server accepted the message
        """
        if not self.enabled:
            logger.info("Email notifications disabled. Skipping alert.", subject=message.subject)
            return False

        try:
            msg = self._build(message)
            self._deliver(msg)
        except DispatchError as e:
            logger.error("Failed to build email message", error=str(e))
            return False
        except Exception as e:
            logger.error("Failed to send email alert", error=str(e))
            return False

        logger.info("Alert email sent successfully", recipient=msg['To'])
        return True
