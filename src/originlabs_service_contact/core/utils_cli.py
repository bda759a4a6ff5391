"""Printing of the service settings for the command line

Settings are printed as the environment variables that produce them, i.e.
an `.env` file that can be sourced to start the service
"""

import json
import logging
import os
from collections.abc import Callable
from enum import Enum
from pprint import pformat
from typing import Any, Final

import rich
import typer
from pydantic import SecretStr, ValidationError
from pydantic_core import to_jsonable_python
from pydantic_settings import BaseSettings

# variables read by ApplicationSettings, including its aliases
_SETTINGS_ENV_PREFIXES: Final[tuple[str, ...]] = ("CONTACT_", "SMTP_", "LOG_")
_HIDDEN: Final[str] = "**********"


def _reveal_secrets(obj: Any) -> Any:
    if isinstance(obj, SecretStr):
        return obj.get_secret_value()
    if isinstance(obj, dict):
        return {k: _reveal_secrets(v) for k, v in obj.items()}
    return obj


def _as_env_value(value: Any, *, show_secrets: bool) -> str:
    if isinstance(value, SecretStr):
        return value.get_secret_value() if show_secrets else _HIDDEN
    if isinstance(value, Enum):
        return f"{value.value}"
    if isinstance(value, dict):
        return json.dumps(value)
    if value is None:
        return "null"
    return f"{value}"


def print_as_envfile(
    settings_obj: BaseSettings,
    *,
    show_secrets: bool,
    exclude_unset: bool = False,
    with_descriptions: bool = False,
) -> None:
    for name, field in type(settings_obj).model_fields.items():
        if exclude_unset and name not in settings_obj.model_fields_set:
            continue

        value = getattr(settings_obj, name)
        if isinstance(value, BaseSettings):
            # e.g. CONTACT_SMTP is read from the SMTP_* variables
            typer.echo(f"\n# --- {name} ---")
            print_as_envfile(
                value,
                show_secrets=show_secrets,
                exclude_unset=exclude_unset,
                with_descriptions=with_descriptions,
            )
            continue

        if with_descriptions and field.description:
            typer.echo(f"# {field.description}")
        typer.echo(f"{name}={_as_env_value(value, show_secrets=show_secrets)}")


def print_as_json(
    settings_obj: BaseSettings, *, show_secrets: bool, exclude_unset: bool = False
) -> None:
    data = settings_obj.model_dump(exclude_unset=exclude_unset)
    typer.echo(
        json.dumps(
            _reveal_secrets(data) if show_secrets else data,
            default=to_jsonable_python,
            indent=2,
        )
    )


def log_invalid_settings(logger: logging.Logger, err: ValidationError) -> None:
    """Logs why the settings could not be resolved without leaking passwords"""
    errors = "\n".join(
        f"  {'.'.join(map(str, e['loc']))}: {e['msg']}"
        for e in err.errors(include_url=False, include_input=False)
    )
    environs = {
        k: "***" if "PASSWORD" in k else v
        for k, v in os.environ.items()
        if k.startswith(_SETTINGS_ENV_PREFIXES)
    }
    logger.error(
        "Invalid settings. Typically an environment variable is missing or misspelled:\n%s\nEnvironment:\n%s",
        errors,
        pformat(environs),
    )


def create_version_callback(application_version: str) -> Callable:
    def _version_callback(value: bool):  # noqa: FBT001
        if value:
            rich.print(application_version)
            raise typer.Exit

    def version(
        ctx: typer.Context,
        *,
        version: bool = (  # noqa: ARG001 # pylint: disable=unused-argument
            typer.Option(
                None,
                "--version",
                callback=_version_callback,
                is_eager=True,
            )
        ),
    ):
        """current version"""
        assert ctx  # nosec

    return version
