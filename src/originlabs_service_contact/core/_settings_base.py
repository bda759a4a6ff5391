import logging
from enum import StrEnum
from functools import cached_property
from types import UnionType
from typing import Annotated, Any, TypeAlias, Union, get_args, get_origin

from pydantic import Field, ValidationInfo, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

_logger = logging.getLogger(__name__)


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# port number range
PortInt: TypeAlias = Annotated[int, Field(gt=0, lt=65535)]


def _is_nullable(info: FieldInfo) -> bool:
    origin = get_origin(info.annotation)
    return origin in (Union, UnionType) and type(None) in get_args(info.annotation)


class BaseCustomSettings(BaseSettings):
    """
    - Customized configuration for all settings
    - Nested settings (e.g. SMTPSettings) are created from their own env vars
      via `Field(default_factory=...)`

    SEE tests for details.
    """

    @field_validator("*", mode="before")
    @classmethod
    def _parse_none(cls, v, info: ValidationInfo):
        # WARNING: In nullable fields, envs equal to null or none are parsed as None !!
        if (
            info.field_name
            and _is_nullable(cls.model_fields[info.field_name])
            and isinstance(v, str)
            and v.lower() in ("none",)
        ):
            return None
        return v

    model_config = SettingsConfigDict(
        case_sensitive=True,  # All must be capitalized
        extra="forbid",
        frozen=True,
        validate_default=True,
        ignored_types=(cached_property,),
        env_parse_none_str="null",
    )

    @classmethod
    def create_from_envs(cls, **overrides: Any):
        # Identical to the constructor but more explicit at the call site
        return cls(**overrides)


class MixinLoggingSettings:
    @classmethod
    def validate_log_level(cls, value: str) -> LogLevel:
        """Standard implementation for @field_validator("*_LOGLEVEL")"""
        try:
            getattr(logging, value.upper())
        except AttributeError as err:
            msg = f"{value.upper()} is not a valid level"
            raise ValueError(msg) from err
        return LogLevel(value.upper())
