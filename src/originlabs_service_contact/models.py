from dataclasses import dataclass
from email.errors import HeaderParseError
from email.headerregistry import Address
from enum import StrEnum, auto
from typing import Annotated, Final, Literal, NamedTuple, Self

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

# NOTE: syntactic check only, i.e. `local@domain.tld` without whitespaces
EMAIL_PATTERN: Final[str] = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

_RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def parse_email_address(addr_spec: str, display_name: str = "") -> Address:
    """Parses an address as it will appear in the e-mail headers

    Raises:
        ValueError: if the address cannot be used in a header, e.g. a non-ASCII
            local part or a comma
    """
    try:
        return Address(display_name=display_name, addr_spec=addr_spec)
    except (ValueError, HeaderParseError) as err:
        msg = f"{addr_spec!r} cannot be used as e-mail address: {err}"
        raise ValueError(msg) from err


class ServiceKind(StrEnum):
    WEBSITE = auto()
    WEBAPP = auto()
    MOBILE = auto()
    OTHER = auto()


class BudgetRange(StrEnum):
    SMALL = auto()
    MEDIUM = auto()
    LARGE = auto()
    ENTERPRISE = auto()


class SubmissionInput(BaseModel):
    """A validated contact-form submission

    Only services.validation creates instances. Any instance is complete
    and its email can be used as Reply-To and To header.
    """

    name: _RequiredStr
    email: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, pattern=EMAIL_PATTERN)
    ]
    service: Annotated[
        _RequiredStr,
        Field(description="Requested service. Usually a ServiceKind code"),
    ]
    message: Annotated[
        str,
        Field(
            min_length=1,
            description="Visitor's message. Kept as typed, line breaks included",
        ),
    ]
    company: str | None = None
    phone: str | None = None
    budget: Annotated[
        str | None,
        Field(description="Budget range. Usually a BudgetRange code"),
    ] = None

    @field_validator("email")
    @classmethod
    def _check_usable_in_headers(cls, value: str) -> str:
        # the pattern alone lets through e.g. `jörg@example.de` or `max,muster@example.com`
        parse_email_address(value)
        return value

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        strict=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Max Mustermann",
                    "email": "max@example.com",
                    "service": "webapp",
                    "message": "Hallo",
                },
                {
                    "name": "Erika Musterfrau",
                    "email": "erika@example.com",
                    "company": "Muster GmbH",
                    "phone": "+49 345 123456",
                    "service": "website",
                    "budget": "medium",
                    "message": "Wir brauchen eine neue Website.\nBis Ende des Jahres.",
                },
            ]
        },
    )


@dataclass(frozen=True)
class AgencyData:
    display_name: str
    inbox_email: str
    sender_email: str
    postal_address: str
    homepage_url: str


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html_body: str
    text_body: str
    from_: Address
    to: Address
    reply_to: Address | None = None


class RenderedEmails(NamedTuple):
    notification: RenderedMessage
    confirmation: RenderedMessage


class ErrorKind(StrEnum):
    VALIDATION_ERROR = "ValidationError"
    DISPATCH_ERROR = "DispatchError"
    INTERNAL_ERROR = "InternalError"


class DispatchState(StrEnum):
    RECEIVED = "Received"
    VALIDATED = "Validated"
    RENDERED = "Rendered"
    NOTIFICATION_SENT = "NotificationSent"
    CONFIRMATION_SENT = "ConfirmationSent"
    DONE = "Done"
    ERROR = "Error"


@dataclass(frozen=True)
class DispatchOutcome:
    status: Literal["ok", "error"]
    user_message: str
    reason: ErrorKind | None = None

    @classmethod
    def ok(cls, user_message: str) -> Self:
        return cls(status="ok", user_message=user_message)

    @classmethod
    def error(cls, reason: ErrorKind, user_message: str) -> Self:
        return cls(status="error", user_message=user_message, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"
