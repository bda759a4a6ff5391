import logging
from enum import Enum
from functools import cached_property
from typing import Annotated, Any, Self, cast

from arrow.parser import ParserError, TzinfoParser
from pydantic import AliasChoices, Field, PositiveFloat, field_validator, model_validator
from pydantic.types import SecretStr

from ..models import parse_email_address
from ._settings_base import BaseCustomSettings, LogLevel, MixinLoggingSettings, PortInt


class EmailProtocol(str, Enum):
    UNENCRYPTED = "UNENCRYPTED"
    TLS = "TLS"
    STARTTLS = "STARTTLS"


class SMTPSettings(BaseCustomSettings):
    """Settings for Simple Mail Transfer Protocol (SMTP)

    NOTE: These settings are only intended to login and access an email server.
    Sender and recipients of the contact e-mails are configured in ApplicationSettings
    """

    SMTP_HOST: str
    SMTP_PORT: PortInt
    SMTP_PROTOCOL: EmailProtocol = Field(
        EmailProtocol.UNENCRYPTED,
        description="Select between TLS, STARTTLS Secure Mode or unencrypted communication",
    )
    SMTP_USERNAME: str | None = Field(None, min_length=1)
    SMTP_PASSWORD: SecretStr | None = Field(None, min_length=1)
    SMTP_TIMEOUT: PositiveFloat = Field(
        30.0,
        description="Timeout in seconds for every network operation against the SMTP server",
    )

    @model_validator(mode="after")
    def _both_credentials_must_be_set(self) -> Self:
        username = self.SMTP_USERNAME
        password = self.SMTP_PASSWORD

        if username is None and password or username and password is None:
            msg = "Please provide both SMTP_USERNAME and SMTP_PASSWORD not just one"
            raise ValueError(msg)

        return self

    @model_validator(mode="after")
    def _enabled_tls_required_authentication(self) -> Self:
        smtp_protocol = self.SMTP_PROTOCOL

        username = self.SMTP_USERNAME
        password = self.SMTP_PASSWORD

        tls_enabled = smtp_protocol == EmailProtocol.TLS
        starttls_enabled = smtp_protocol == EmailProtocol.STARTTLS

        if (tls_enabled or starttls_enabled) and not (username or password):
            msg = "when using SMTP_PROTOCOL other than UNENCRYPTED username and password are required"
            raise ValueError(msg)
        return self

    @property
    def has_credentials(self) -> bool:
        return self.SMTP_USERNAME is not None and self.SMTP_PASSWORD is not None


class ApplicationSettings(BaseCustomSettings, MixinLoggingSettings):
    CONTACT_LOGLEVEL: Annotated[
        LogLevel,
        Field(
            validation_alias=AliasChoices("CONTACT_LOGLEVEL", "LOG_LEVEL", "LOGLEVEL"),
        ),
    ] = LogLevel.INFO

    CONTACT_LOG_FORMAT_LOCAL_DEV_ENABLED: Annotated[
        bool,
        Field(
            validation_alias=AliasChoices(
                "CONTACT_LOG_FORMAT_LOCAL_DEV_ENABLED", "LOG_FORMAT_LOCAL_DEV_ENABLED"
            ),
            description="Enables local development log format. WARNING: make sure it is disabled if you want to have structured logs!",
        ),
    ] = False

    CONTACT_LOG_FILTER_MAPPING: Annotated[
        dict[str, list[str]],
        Field(
            default_factory=dict,
            validation_alias=AliasChoices(
                "CONTACT_LOG_FILTER_MAPPING", "LOG_FILTER_MAPPING"
            ),
            description="is a dictionary that maps specific loggers (such as 'uvicorn.access') to a list of log message patterns that should be filtered out.",
        ),
    ]

    CONTACT_SMTP: Annotated[
        SMTPSettings,
        Field(
            default_factory=SMTPSettings.create_from_envs,
            description="SMTP relay used to deliver both contact e-mails",
        ),
    ]

    CONTACT_AGENCY_NAME: Annotated[
        str, Field(min_length=1, description="Display name used in e-mails")
    ] = "Origin Labs"

    CONTACT_AGENCY_INBOX: Annotated[
        str,
        Field(
            min_length=3,
            description="Internal inbox that receives the notification of every new request",
        ),
    ] = "info@origin-labs.de"

    CONTACT_SENDER_EMAIL: Annotated[
        str | None,
        Field(
            description="Sender address of both e-mails. Defaults to SMTP_USERNAME and then to CONTACT_AGENCY_INBOX",
        ),
    ] = None

    CONTACT_AGENCY_POSTAL_ADDRESS: str = "Karl-Marx-Weg 20 | 06242 Krumpa"

    CONTACT_AGENCY_HOMEPAGE_URL: str = "https://origin-labs.de"

    CONTACT_DISPLAY_TIMEZONE: Annotated[
        str, Field(description="Timezone used to display the submission time")
    ] = "Europe/Berlin"

    @cached_property
    def log_level(self) -> int:
        return cast(int, getattr(logging, self.CONTACT_LOGLEVEL.value))

    @property
    def sender_email(self) -> str:
        return (
            self.CONTACT_SENDER_EMAIL
            or self.CONTACT_SMTP.SMTP_USERNAME
            or self.CONTACT_AGENCY_INBOX
        )

    @field_validator("CONTACT_LOGLEVEL", mode="before")
    @classmethod
    def _validate_loglevel(cls, value: Any) -> str:
        return cls.validate_log_level(f"{value}")

    @field_validator("CONTACT_AGENCY_INBOX", "CONTACT_SENDER_EMAIL")
    @classmethod
    def _validate_email_address(cls, value: str | None) -> str | None:
        if value is not None:
            parse_email_address(value)
        return value

    @model_validator(mode="after")
    def _sender_must_be_an_email_address(self) -> Self:
        # SMTP_USERNAME is only a sender candidate, e.g. relays with username `apikey`
        try:
            parse_email_address(self.sender_email)
        except ValueError as err:
            msg = f"Cannot send with sender {self.sender_email!r}. Please set CONTACT_SENDER_EMAIL"
            raise ValueError(msg) from err
        return self

    @field_validator("CONTACT_DISPLAY_TIMEZONE")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            TzinfoParser.parse(value)
        except ParserError as err:
            msg = f"Unknown timezone {value!r}"
            raise ValueError(msg) from err
        return value
