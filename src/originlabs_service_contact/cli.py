import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from . import web_server
from ._meta import APP_NAME, __version__
from .core.application import create_agency_data
from .core.errors import SubmissionValidationError
from .core.settings import ApplicationSettings, EmailProtocol
from .core.utils_cli import (
    create_version_callback,
    log_invalid_settings,
    print_as_envfile,
    print_as_json,
)
from .services.rendering import ContactEmailRenderer, create_render_environment_from_folder
from .services.validation import validate_submission

_logger = logging.getLogger(__name__)
_console = Console()
_err_console = Console(stderr=True)

_SAMPLE_SUBMISSION = {
    "name": "Max Mustermann",
    "email": "max@example.com",
    "company": "Muster GmbH",
    "phone": "+49 345 123456",
    "service": "webapp",
    "budget": "medium",
    "message": "Hallo,\n\nwir planen ein Kundenportal und freuen uns auf Ihre Rückmeldung.",
}

# SEE setup entrypoint 'originlabs_service_contact.cli:main'
main = typer.Typer(name=APP_NAME)
main.callback()(create_version_callback(__version__))


#
# COMMANDS
#


@main.command()
def settings(
    *,
    as_json: bool = False,
    show_secrets: bool = False,
    verbose: bool = typer.Option(False, help="Adds the description of every variable"),
    exclude_unset: bool = typer.Option(
        False, help="Only lists the variables that were explicitly set"
    ),
):
    """Resolves the settings from the environment and prints them as envfile"""
    try:
        app_settings = ApplicationSettings.create_from_envs()
    except ValidationError as err:
        log_invalid_settings(_logger, err)
        raise typer.Exit(code=1) from err

    if as_json:
        print_as_json(
            app_settings, show_secrets=show_secrets, exclude_unset=exclude_unset
        )
    else:
        print_as_envfile(
            app_settings,
            show_secrets=show_secrets,
            exclude_unset=exclude_unset,
            with_descriptions=verbose,
        )


@main.command()
def echo_dotenv(ctx: typer.Context, *, minimal: bool = True):
    """Echos an example of environment variables file (or dot-envfile)

    Usage sample:

    $ originlabs-service-contact echo-dotenv > .env
    $ cat .env
    $ set -o allexport; source .env; set +o allexport
    """
    assert ctx  # nosec

    app_settings = ApplicationSettings.create_from_envs(
        CONTACT_SMTP={
            "SMTP_HOST": "smtp.ionos.de",
            "SMTP_PORT": 587,
            "SMTP_PROTOCOL": EmailProtocol.STARTTLS,
            "SMTP_USERNAME": "info@origin-labs.de",
            "SMTP_PASSWORD": "replace-with-mailbox-password",
        },
    )

    print_as_envfile(
        app_settings,
        show_secrets=True,
        exclude_unset=minimal,
        with_descriptions=True,
    )


@main.command()
def serve(
    ctx: typer.Context,
    *,
    host: str = "0.0.0.0",  # nosec  # NOSONAR
    port: int = 8000,
    reload: bool = False,
):
    """Starts server with http API"""
    assert ctx  # nosec
    web_server.start(log_level="info", host=host, port=port, reload=reload)


@main.command()
def preview(
    ctx: typer.Context,
    output_dir: Path = typer.Argument(
        Path("."), help="Folder where the rendered e-mails are written"
    ),
    submission_file: Path = typer.Option(
        None,
        "--submission",
        help="JSON file with a contact-form submission. Uses a sample otherwise",
    ),
    templates_dir: Path = typer.Option(
        None, help="Renders with the templates in this folder instead of the packaged ones"
    ),
):
    """Renders both e-mails of a submission into html and txt files for review"""
    assert ctx  # nosec

    raw = (
        json.loads(submission_file.read_text())
        if submission_file
        else _SAMPLE_SUBMISSION
    )
    try:
        submission = validate_submission(raw)
    except SubmissionValidationError as err:
        _err_console.print(f"[bold red]Invalid submission[/bold red]: {err}")
        raise typer.Exit(code=1) from err

    try:
        app_settings = ApplicationSettings.create_from_envs()
    except ValidationError:
        # NOTE: previews need no SMTP relay
        app_settings = ApplicationSettings.create_from_envs(
            CONTACT_SMTP={"SMTP_HOST": "localhost", "SMTP_PORT": 25}
        )

    renderer = ContactEmailRenderer(
        create_agency_data(app_settings),
        env=(
            create_render_environment_from_folder(templates_dir)
            if templates_dir
            else None
        ),
        display_timezone=app_settings.CONTACT_DISPLAY_TIMEZONE,
    )
    emails = renderer.render(submission, datetime.now(UTC))

    output_dir.mkdir(parents=True, exist_ok=True)
    for event, message in emails._asdict().items():
        (output_dir / f"{event}.html").write_text(message.html_body)
        (output_dir / f"{event}.txt").write_text(message.text_body)
        _console.print(
            f"[bold]{event}[/bold]: '{message.subject}' to {message.to} -> {output_dir / event}.html"
        )
