import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Final
from urllib.parse import urlparse

import arrow
from jinja2 import (
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateError,
    select_autoescape,
)

from ..core.errors import TemplateRenderError
from ..models import (
    AgencyData,
    BudgetRange,
    RenderedEmails,
    RenderedMessage,
    ServiceKind,
    SubmissionInput,
    parse_email_address,
)
from ._templates import (
    EVENT_CONTACT_CONFIRMATION,
    EVENT_CONTACT_NOTIFICATION,
    get_email_template_name,
)

_logger = logging.getLogger(__name__)


SERVICE_LABELS: Final[dict[str, str]] = {
    ServiceKind.WEBSITE: "Website",
    ServiceKind.WEBAPP: "Webapp",
    ServiceKind.MOBILE: "Mobile App",
    ServiceKind.OTHER: "Sonstiges",
}

BUDGET_LABELS: Final[dict[str, str]] = {
    BudgetRange.SMALL: "Unter 2.000 EUR",
    BudgetRange.MEDIUM: "2.000 - 10.000 EUR",
    BudgetRange.LARGE: "10.000 - 50.000 EUR",
    BudgetRange.ENTERPRISE: "Über 50.000 EUR",
}

BUDGET_NOT_SPECIFIED: Final[str] = "Nicht angegeben"

# e.g. Montag, 19. Oktober 2026 um 14:30
_SUBMITTED_AT_FORMAT: Final[str] = "dddd, D. MMMM YYYY [um] HH:mm"
_SUBMITTED_AT_LOCALE: Final[str] = "de"


def create_render_environment_from_package(**kwargs) -> Environment:
    return Environment(
        loader=PackageLoader("originlabs_service_contact", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        **kwargs,
    )


def create_render_environment_from_folder(top_dir: Path) -> Environment:
    assert top_dir.exists()  # nosec
    assert top_dir.is_dir()  # nosec
    return Environment(
        loader=FileSystemLoader(top_dir),
        autoescape=select_autoescape(["html", "xml"]),
    )


def get_service_label(service: str) -> str:
    return SERVICE_LABELS.get(service, service)


def get_budget_label(budget: str | None) -> str:
    if budget is None:
        return BUDGET_NOT_SPECIFIED
    return BUDGET_LABELS.get(budget, budget)


def format_submitted_at(now: datetime, timezone: str) -> str:
    # NOTE: naive datetimes are taken as UTC
    return (
        arrow.get(now)
        .to(timezone)
        .format(_SUBMITTED_AT_FORMAT, locale=_SUBMITTED_AT_LOCALE)
    )


def _get_homepage_label(homepage_url: str) -> str:
    host = urlparse(homepage_url).netloc or homepage_url
    return host if host.startswith("www.") else f"www.{host}"


def _as_single_line(text: str) -> str:
    return " ".join(text.split())


class ContactEmailRenderer:
    """Renders the notification to the agency and the confirmation to the visitor

    Rendering is pure: the same submission and timestamp produce the same messages
    """

    def __init__(
        self,
        agency: AgencyData,
        *,
        env: Environment | None = None,
        display_timezone: str = "Europe/Berlin",
    ) -> None:
        self.agency = agency
        self.env = env or create_render_environment_from_package()
        self.display_timezone = display_timezone

    def _render_template(self, template_name: str, data: dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(data)
        except TemplateError as err:
            raise TemplateRenderError(
                template_name=template_name, reason=f"{err}"
            ) from err

    def _render_parts(
        self, event_name: str, data: dict[str, Any]
    ) -> tuple[str, str, str]:
        subject = self._render_template(
            get_email_template_name(event_name, "subject", "txt"), data
        )
        text_body = self._render_template(
            get_email_template_name(event_name, "content", "txt"), data
        )
        html_body = self._render_template(
            get_email_template_name(event_name, "content", "html"), data
        )
        return _as_single_line(subject), text_body, html_body

    def render(self, submission: SubmissionInput, now: datetime) -> RenderedEmails:
        data = {
            "agency": self.agency,
            "submission": submission,
            "service_label": get_service_label(submission.service),
            "budget_label": get_budget_label(submission.budget),
            "submitted_at": format_submitted_at(now, self.display_timezone),
            "homepage_label": _get_homepage_label(self.agency.homepage_url),
        }

        visitor = parse_email_address(
            submission.email, display_name=_as_single_line(submission.name)
        )

        subject, text_body, html_body = self._render_parts(
            EVENT_CONTACT_NOTIFICATION, data
        )
        notification = RenderedMessage(
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            from_=parse_email_address(
                self.agency.sender_email,
                display_name=f"{self.agency.display_name} Website",
            ),
            to=parse_email_address(self.agency.inbox_email),
            reply_to=visitor,
        )

        subject, text_body, html_body = self._render_parts(
            EVENT_CONTACT_CONFIRMATION, data
        )
        confirmation = RenderedMessage(
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            from_=parse_email_address(
                self.agency.sender_email,
                display_name=self.agency.display_name,
            ),
            to=visitor,
        )

        return RenderedEmails(notification=notification, confirmation=confirmation)
