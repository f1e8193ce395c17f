"""Delivery of sign-up verification codes."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from acadpilot.core import config

logger = logging.getLogger(__name__)

SUBJECT = 'Your Acad Co-Pilot verification code'


class DeliveryError(Exception):
    """The code could not be handed to the mail transport."""


class CodeSender(Protocol):
    def send(self, email: str, code: str) -> None: ...


def build_message(email: str, code: str, sender: str) -> EmailMessage:
    message = EmailMessage()
    message['Subject'] = SUBJECT
    message['From'] = sender
    message['To'] = email
    message.set_content(
        f'Your verification code is {code}.\n\n'
        f'It expires in {config.VERIFICATION_CODE_TTL_MINUTES} minutes. '
        'If you did not request it, you can ignore this email.\n'
    )
    return message


class LoggingCodeSender:
    """Development sender: writes the code to the application log."""

    def send(self, email: str, code: str) -> None:
        logger.warning('Verification code for %s is %s (MAIL_BACKEND=log)', email, code)


class SmtpCodeSender:
    def __init__(
        self,
        host: str,
        port: int,
        username: str = '',
        password: str = '',
        use_tls: bool = True,
        sender: str = config.MAIL_FROM,
        timeout: float = config.SMTP_TIMEOUT_SECONDS,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    def send(self, email: str, code: str) -> None:
        message = build_message(email, code, self.sender)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f'SMTP delivery to {self.host}:{self.port} failed') from exc


def build_code_sender() -> CodeSender:
    if config.MAIL_BACKEND == 'smtp':
        return SmtpCodeSender(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
        )
    return LoggingCodeSender()
