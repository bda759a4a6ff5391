import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .._meta import (
    API_VERSION,
    API_VTAG,
    APP_NAME,
    APP_SHUTDOWN_BANNER_MSG,
    APP_STARTED_BANNER_MSG,
    SUMMARY,
)
from ..api.rest.routes import setup_rest_api
from ..models import AgencyData
from ..services.dispatcher import SubmissionDispatcher
from ..services.rendering import ContactEmailRenderer
from ..services.transport import MailTransport, SMTPMailTransport
from .settings import ApplicationSettings

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def _banners_lifespan(_: FastAPI) -> AsyncIterator[None]:
    print(APP_STARTED_BANNER_MSG, flush=True)  # noqa: T201
    yield
    print(APP_SHUTDOWN_BANNER_MSG, flush=True)  # noqa: T201


def create_agency_data(settings: ApplicationSettings) -> AgencyData:
    return AgencyData(
        display_name=settings.CONTACT_AGENCY_NAME,
        inbox_email=settings.CONTACT_AGENCY_INBOX,
        sender_email=settings.sender_email,
        postal_address=settings.CONTACT_AGENCY_POSTAL_ADDRESS,
        homepage_url=settings.CONTACT_AGENCY_HOMEPAGE_URL,
    )


def create_app(
    settings: ApplicationSettings | None = None,
    *,
    mail_transport: MailTransport | None = None,
) -> FastAPI:
    settings = settings or ApplicationSettings.create_from_envs()
    _logger.debug("Creating app with %s", settings.model_dump_json(indent=1))

    app = FastAPI(
        title=APP_NAME,
        description=SUMMARY,
        version=API_VERSION,
        openapi_url=f"/api/{API_VTAG}/openapi.json",
        docs_url="/doc",
        redoc_url=None,
        lifespan=_banners_lifespan,
    )

    # STATE
    app.state.settings = settings
    # NOTE: bad SMTP credentials are only detected on the first send
    app.state.mail_transport = mail_transport or SMTPMailTransport(
        settings.CONTACT_SMTP
    )
    app.state.renderer = ContactEmailRenderer(
        create_agency_data(settings),
        display_timezone=settings.CONTACT_DISPLAY_TIMEZONE,
    )
    app.state.dispatcher = SubmissionDispatcher(
        transport=app.state.mail_transport,
        renderer=app.state.renderer,
    )

    # PLUGINS SETUP
    setup_rest_api(app)

    return app
