"""Mail notifier (sendmail or SMTP)."""

import shutil
import smtplib
import subprocess
from email.message import EmailMessage
from email.utils import formataddr

from cronlock.adapters.base import Notifier
from cronlock.core.jobs.config import JobConfig
from cronlock.utils.host import get_host
from cronlock.utils.logging import ContextLogger, get_default_logger

SENDMAIL_FALLBACK = "/usr/sbin/sendmail"
SMTP_TIMEOUT_SECONDS = 30


class MailNotifier(Notifier):
    """
    Mails job failures to the job's ``recipients``.

    Transport is chosen by ``config.mailer``:
        - "sendmail": pipes the message to ``sendmail -t -i``
        - "smtp": connects to ``smtp_host:smtp_port``; ``smtp_security``
          "ssl" uses implicit TLS, "tls" upgrades with STARTTLS
    """

    def __init__(self, logger: ContextLogger | None = None) -> None:
        self.logger = logger or get_default_logger()

    def build_message(self, job_name: str, config: JobConfig, message: str) -> EmailMessage:
        host = get_host()
        sender = config.smtp_sender or f"cronlock@{host}"

        msg = EmailMessage()
        msg["Subject"] = f"[{host}] '{job_name}' needs some attention!"
        msg["From"] = formataddr((config.smtp_sender_name, sender))
        msg["To"] = ", ".join(config.recipients)
        msg.set_content(message)
        return msg

    def notify(self, job_name: str, config: JobConfig, message: str) -> bool:
        if not config.recipients:
            return False

        msg = self.build_message(job_name, config, message)
        try:
            if config.mailer == "smtp":
                self._send_smtp(msg, config)
            else:
                self._send_sendmail(msg)
        except Exception as e:
            self.logger.warning(
                "Failed to send notification",
                job_name=job_name,
                mailer=config.mailer,
                error=str(e),
            )
            return False

        self.logger.debug("Notification sent", job_name=job_name, mailer=config.mailer)
        return True

    def _send_sendmail(self, msg: EmailMessage) -> None:
        binary = shutil.which("sendmail") or SENDMAIL_FALLBACK
        subprocess.run(
            [binary, "-t", "-i"],
            input=msg.as_bytes(),
            check=True,
            timeout=SMTP_TIMEOUT_SECONDS,
        )

    def _send_smtp(self, msg: EmailMessage, config: JobConfig) -> None:
        if not config.smtp_host:
            raise ValueError("'smtp_host' is required for the smtp mailer")

        smtp_class = smtplib.SMTP_SSL if config.smtp_security == "ssl" else smtplib.SMTP
        with smtp_class(config.smtp_host, config.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
            if config.smtp_security == "tls":
                server.starttls()
            if config.smtp_username and config.smtp_password:
                server.login(config.smtp_username, config.smtp_password)
            server.send_message(msg)
