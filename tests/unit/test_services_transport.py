# pylint: disable=redefined-outer-name
# pylint: disable=unused-argument
# pylint: disable=unused-variable
# pylint: disable=too-many-arguments

from email.headerregistry import Address
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiosmtplib import SMTPAuthenticationError, SMTPConnectError, SMTPRecipientsRefused
from conftest import EnvVarsDict
from originlabs_service_contact.core.errors import MailTransportError
from originlabs_service_contact.core.settings import SMTPSettings
from originlabs_service_contact.models import RenderedMessage
from originlabs_service_contact.services.transport import (
    SMTPMailTransport,
    compose_email,
)
from pytest_mock import MockerFixture


@pytest.fixture
def smtp_settings(smtp_environment: EnvVarsDict) -> SMTPSettings:
    return SMTPSettings.create_from_envs()


@pytest.fixture
def mock_smtp_cls(mocker: MockerFixture) -> MagicMock:
    mock_cls = mocker.patch("originlabs_service_contact.services.transport.SMTP")
    mock_cls.return_value.__aenter__.return_value = mocker.AsyncMock()
    mock_cls.return_value.__aexit__.return_value = False
    return mock_cls


@pytest.fixture
def mock_smtp(mock_smtp_cls: MagicMock) -> AsyncMock:
    return mock_smtp_cls.return_value.__aenter__.return_value


@pytest.fixture
def message() -> RenderedMessage:
    return RenderedMessage(
        subject="Neue Projektanfrage von Max Mustermann",
        html_body="<!DOCTYPE html><html><body><p>Hallo</p></body></html>",
        text_body="Hallo",
        from_=Address(display_name="Origin Labs Website", addr_spec="website@origin-labs.de"),
        to=Address(addr_spec="info@origin-labs.de"),
        reply_to=Address(display_name="Max Mustermann", addr_spec="max@example.com"),
    )


def test_compose_email(message: RenderedMessage):
    msg = compose_email(
        from_=message.from_,
        to=message.to,
        subject=message.subject,
        content_text=message.text_body,
        content_html=message.html_body,
        reply_to=message.reply_to,
    )

    assert msg["From"] == "Origin Labs Website <website@origin-labs.de>"
    assert msg["To"] == "info@origin-labs.de"
    assert msg["Reply-To"] == "Max Mustermann <max@example.com>"
    assert msg["Subject"] == message.subject

    assert msg.is_multipart()
    assert msg.get_content_type() == "multipart/alternative"
    html_part = msg.get_body(preferencelist=("html",))
    assert html_part
    assert "<p>Hallo</p>" in html_part.get_content()
    text_part = msg.get_body(preferencelist=("plain",))
    assert text_part
    assert text_part.get_content().strip() == "Hallo"


def test_compose_email_without_reply_to(message: RenderedMessage):
    msg = compose_email(
        from_=message.from_,
        to=message.reply_to,
        subject="Ihre Anfrage bei Origin Labs",
        content_text=message.text_body,
    )
    assert "Reply-To" not in msg
    assert not msg.is_multipart()


async def test_send_message(
    smtp_settings: SMTPSettings,
    mock_smtp_cls: MagicMock,
    mock_smtp: AsyncMock,
    message: RenderedMessage,
):
    transport = SMTPMailTransport(smtp_settings)
    await transport.send(message)

    mock_smtp_cls.assert_called_once_with(
        hostname=smtp_settings.SMTP_HOST,
        port=smtp_settings.SMTP_PORT,
        use_tls=False,
        start_tls=True,
        timeout=smtp_settings.SMTP_TIMEOUT,
    )

    assert smtp_settings.SMTP_PASSWORD
    mock_smtp.login.assert_awaited_once_with(
        smtp_settings.SMTP_USERNAME, smtp_settings.SMTP_PASSWORD.get_secret_value()
    )

    mock_smtp.send_message.assert_awaited_once()
    sent = mock_smtp.send_message.call_args.args[0]
    assert sent["To"] == "info@origin-labs.de"
    assert sent["Reply-To"] == "Max Mustermann <max@example.com>"


async def test_send_without_credentials(
    mock_smtp_cls: MagicMock, mock_smtp: AsyncMock, message: RenderedMessage
):
    transport = SMTPMailTransport(
        SMTPSettings.model_validate({"SMTP_HOST": "localhost", "SMTP_PORT": 1025})
    )
    await transport.send(message)

    assert mock_smtp_cls.call_args.kwargs["start_tls"] is False
    assert mock_smtp_cls.call_args.kwargs["use_tls"] is False
    mock_smtp.login.assert_not_called()
    mock_smtp.send_message.assert_awaited_once()


async def test_connection_failure_raises_transport_error(
    smtp_settings: SMTPSettings, mock_smtp_cls: MagicMock, message: RenderedMessage
):
    mock_smtp_cls.return_value.__aenter__.side_effect = SMTPConnectError(
        "Error connecting to smtp.example.com on port 587"
    )

    transport = SMTPMailTransport(smtp_settings)
    with pytest.raises(MailTransportError) as exc_info:
        await transport.send(message)

    error = exc_info.value
    assert isinstance(error.__cause__, SMTPConnectError)
    assert "smtp.example.com:587" in f"{error}"
    assert "info@origin-labs.de" in f"{error}"


@pytest.mark.parametrize(
    "send_error",
    [
        SMTPAuthenticationError(535, "Authentication credentials invalid"),
        SMTPRecipientsRefused([]),
        ConnectionRefusedError("Connection refused"),
        TimeoutError(),
    ],
    ids=lambda e: type(e).__name__,
)
async def test_send_failures_never_expose_credentials(
    smtp_settings: SMTPSettings,
    mock_smtp: AsyncMock,
    message: RenderedMessage,
    send_error: Exception,
):
    mock_smtp.send_message.side_effect = send_error

    transport = SMTPMailTransport(smtp_settings)
    with pytest.raises(MailTransportError) as exc_info:
        await transport.send(message)

    # single attempt
    mock_smtp.send_message.assert_awaited_once()

    assert smtp_settings.SMTP_PASSWORD
    password = smtp_settings.SMTP_PASSWORD.get_secret_value()
    assert password not in f"{exc_info.value}"
    assert password not in f"{exc_info.value.error_context()}"


async def test_unexpected_errors_are_not_wrapped(
    smtp_settings: SMTPSettings, mock_smtp: AsyncMock, message: RenderedMessage
):
    mock_smtp.send_message.side_effect = RuntimeError("bug")

    transport = SMTPMailTransport(smtp_settings)
    with pytest.raises(RuntimeError, match="bug"):
        await transport.send(message)
