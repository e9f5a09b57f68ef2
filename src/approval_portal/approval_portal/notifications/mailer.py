from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SMTPConfig:
    server: str
    port: int
    user: str
    password: str
    use_tls: bool = True
    sender_name: str = ""
    timeout: int = 20


class SMTPMailer(Mailer):
    """Sends one message per recipient through the configured relay.

    Failures propagate to the caller; nothing is retried here.
    """

    def __init__(self, config: SMTPConfig):
        self._config = config

    def _sender(self) -> str:
        if self._config.sender_name:
            return f"{self._config.sender_name} <{self._config.user}>"
        return self._config.user

    def send(self, *, to: str, subject: str, html: str) -> None:
        cfg = self._config
        msg = MIMEMultipart("alternative")
        msg["From"] = self._sender()
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        if cfg.use_tls:
            server = smtplib.SMTP(cfg.server, cfg.port, timeout=cfg.timeout)
            try:
                server.ehlo()
                server.starttls()
                if cfg.user:
                    server.login(cfg.user, cfg.password)
                server.send_message(msg)
            finally:
                server.quit()
        else:
            server = smtplib.SMTP_SSL(cfg.server, cfg.port, timeout=cfg.timeout)
            try:
                if cfg.user:
                    server.login(cfg.user, cfg.password)
                server.send_message(msg)
            finally:
                server.quit()
        logger.info("Mail sent to %s: %s", to, subject)
