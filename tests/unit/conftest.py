# pylint: disable=redefined-outer-name
# pylint: disable=unused-argument
# pylint: disable=unused-variable
# pylint: disable=too-many-arguments

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import httpx
import originlabs_service_contact
import pytest
from faker import Faker
from fastapi import FastAPI
from originlabs_service_contact.core.application import create_app
from originlabs_service_contact.core.errors import MailTransportError
from originlabs_service_contact.core.settings import ApplicationSettings
from originlabs_service_contact.models import AgencyData
from originlabs_service_contact.services.rendering import ContactEmailRenderer
from originlabs_service_contact.services.transport import SMTPMailTransport
from pytest_mock import MockerFixture
from typer.testing import CliRunner

EnvVarsDict = dict[str, str]


def setenvs_from_dict(
    monkeypatch: pytest.MonkeyPatch, envs: dict[str, Any]
) -> EnvVarsDict:
    env_vars = {key: f"{value}" for key, value in envs.items()}
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture(scope="session")
def installed_package_dir() -> Path:
    dirpath = Path(originlabs_service_contact.__file__).resolve().parent
    assert dirpath.exists()
    return dirpath


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


#
# environment
#


@pytest.fixture
def smtp_environment(monkeypatch: pytest.MonkeyPatch, faker: Faker) -> EnvVarsDict:
    return setenvs_from_dict(
        monkeypatch,
        {
            "SMTP_HOST": "smtp.example.com",
            "SMTP_PORT": 587,
            "SMTP_PROTOCOL": "STARTTLS",
            "SMTP_USERNAME": "website@origin-labs.de",
            "SMTP_PASSWORD": faker.password(length=12),
        },
    )


@pytest.fixture
def app_environment(
    monkeypatch: pytest.MonkeyPatch, smtp_environment: EnvVarsDict
) -> EnvVarsDict:
    return {
        **smtp_environment,
        **setenvs_from_dict(
            monkeypatch,
            {
                "CONTACT_LOGLEVEL": "DEBUG",
                "CONTACT_AGENCY_INBOX": "info@origin-labs.de",
            },
        ),
    }


@pytest.fixture
def app_settings(app_environment: EnvVarsDict) -> ApplicationSettings:
    return ApplicationSettings.create_from_envs()


#
# submissions
#


@pytest.fixture
def submission_payload(faker: Faker) -> dict[str, Any]:
    # as posted by the website's contact form
    return {
        "name": faker.name(),
        "email": faker.email(),
        "company": faker.company(),
        "phone": faker.phone_number(),
        "service": "webapp",
        "budget": "medium",
        "message": f"{faker.sentence()}\n\n{faker.sentence()}",
    }


@pytest.fixture
def minimal_submission_payload() -> dict[str, Any]:
    return {
        "name": "Max Mustermann",
        "email": "max@example.com",
        "company": "",
        "phone": "",
        "service": "webapp",
        "budget": "",
        "message": "Hallo",
    }


@pytest.fixture
def submitted_at() -> datetime:
    # Monday, 19 October 2026 14:30 in Berlin (CEST, UTC+2)
    return datetime(2026, 10, 19, 12, 30, tzinfo=UTC)


#
# services
#


@pytest.fixture
def agency_data() -> AgencyData:
    return AgencyData(
        display_name="Origin Labs",
        inbox_email="info@origin-labs.de",
        sender_email="website@origin-labs.de",
        postal_address="Karl-Marx-Weg 20 | 06242 Krumpa",
        homepage_url="https://origin-labs.de",
    )


@pytest.fixture
def renderer(agency_data: AgencyData) -> ContactEmailRenderer:
    return ContactEmailRenderer(agency_data, display_timezone="Europe/Berlin")


@pytest.fixture
def mock_transport(mocker: MockerFixture) -> AsyncMock:
    return mocker.AsyncMock(spec=SMTPMailTransport)


@pytest.fixture
def transport_error() -> MailTransportError:
    return MailTransportError(
        subject="Neue Projektanfrage von Max Mustermann",
        recipient="info@origin-labs.de",
        smtp_host="smtp.example.com",
        smtp_port=587,
        reason="SMTPConnectError: Connection refused",
    )


#
# web app
#


@pytest.fixture
def app(app_settings: ApplicationSettings, mock_transport: AsyncMock) -> FastAPI:
    return create_app(app_settings, mail_transport=mock_transport)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
        headers={"Content-Type": "application/json"},
    ) as client:
        yield client
