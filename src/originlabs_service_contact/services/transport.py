import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Protocol, cast

from aiosmtplib import SMTP, SMTPException

from ..core.errors import MailTransportError
from ..core.logging_utils import log_context
from ..core.settings import EmailProtocol, SMTPSettings
from ..models import RenderedMessage

_logger = logging.getLogger(__name__)


def compose_email(
    from_: Address,
    to: Address,
    subject: str,
    content_text: str,
    content_html: str | None = None,
    reply_to: Address | None = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = from_
    msg["To"] = to
    if reply_to:
        msg["Reply-To"] = reply_to

    msg["Subject"] = subject

    msg.set_content(content_text)
    if content_html:
        msg.add_alternative(content_html, subtype="html")
    return msg


@asynccontextmanager
async def create_email_session(
    settings: SMTPSettings,
) -> AsyncIterator[SMTP]:
    async with SMTP(
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        # FROM https://aiosmtplib.readthedocs.io/en/stable/usage.html#starttls-connections
        # TLS and STARTTLS are mutually exclusive: use_tls=True against a STARTTLS server fails on connect
        use_tls=settings.SMTP_PROTOCOL == EmailProtocol.TLS,
        start_tls=settings.SMTP_PROTOCOL == EmailProtocol.STARTTLS,
        timeout=settings.SMTP_TIMEOUT,
    ) as smtp:
        if settings.has_credentials:
            assert settings.SMTP_USERNAME  # nosec
            assert settings.SMTP_PASSWORD  # nosec
            await smtp.login(
                settings.SMTP_USERNAME,
                settings.SMTP_PASSWORD.get_secret_value(),
            )

        yield cast(SMTP, smtp)


class MailTransport(Protocol):
    async def send(self, message: RenderedMessage) -> None:
        """Delivers one message in a single attempt

        Raises:
            MailTransportError: if the message could not be delivered
        """


class SMTPMailTransport:
    """Sends e-mails through the SMTP relay configured at startup

    Opens a new session per message. No retries.
    """

    def __init__(self, settings: SMTPSettings) -> None:
        self.settings = settings

    async def send(self, message: RenderedMessage) -> None:
        email_msg = compose_email(
            from_=message.from_,
            to=message.to,
            subject=message.subject,
            content_text=message.text_body,
            content_html=message.html_body,
            reply_to=message.reply_to,
        )
        try:
            with log_context(
                _logger,
                logging.DEBUG,
                "send '%s' via %s:%s",
                message.subject,
                self.settings.SMTP_HOST,
                self.settings.SMTP_PORT,
            ):
                async with create_email_session(self.settings) as smtp:
                    await smtp.send_message(email_msg)

        except (SMTPException, OSError, TimeoutError) as err:
            # NOTE: aiosmtplib errors never include the password
            raise MailTransportError(
                subject=message.subject,
                recipient=message.to.addr_spec,
                smtp_host=self.settings.SMTP_HOST,
                smtp_port=self.settings.SMTP_PORT,
                reason=f"{type(err).__name__}: {err}",
            ) from err
