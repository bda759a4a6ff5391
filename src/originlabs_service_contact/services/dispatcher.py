"""Orchestrates one contact-form submission end to end

    Received -> Validated -> Rendered -> NotificationSent -> ConfirmationSent -> Done

Every step up to NotificationSent can end in Error.

The notification to the agency is sent first and must succeed. The confirmation to
the visitor is best-effort: its failure is logged and does not change the outcome.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ..core.errors import (
    MailTransportError,
    SubmissionValidationError,
    create_error_code,
)
from ..core.logging_errors import create_troubleshooting_log_kwargs
from ..core.logging_utils import get_log_record_extra, log_context
from ..core.user_messages import MSG_SUBMISSION_FAILED, MSG_SUBMISSION_SENT
from ..models import DispatchOutcome, DispatchState, ErrorKind
from .rendering import ContactEmailRenderer
from .transport import MailTransport
from .validation import validate_submission

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SubmissionDispatcher:
    def __init__(
        self,
        transport: MailTransport,
        renderer: ContactEmailRenderer,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.transport = transport
        self.renderer = renderer
        self.clock = clock

    async def dispatch(self, raw: Any) -> DispatchOutcome:
        """Validates, renders and sends both e-mails of a submission

        Never raises: every failure is translated into an error outcome
        """
        state = DispatchState.RECEIVED
        try:
            submission = validate_submission(raw)
            state = _transition(state, DispatchState.VALIDATED)

            emails = self.renderer.render(submission, self.clock())
            state = _transition(state, DispatchState.RENDERED)

        except SubmissionValidationError as err:
            _transition(state, DispatchState.ERROR)
            _logger.info(
                "Rejected contact submission [fields=%s]: %s",
                err.error_context().get("fields"),
                err,
            )
            return DispatchOutcome.error(ErrorKind.VALIDATION_ERROR, f"{err}")

        except Exception as err:  # pylint: disable=broad-exception-caught
            return _internal_error(state, err)

        try:
            with log_context(
                _logger, logging.INFO, "sending notification to %s", emails.notification.to
            ):
                await self.transport.send(emails.notification)
            state = _transition(state, DispatchState.NOTIFICATION_SENT)

        except MailTransportError as err:
            _transition(state, DispatchState.ERROR)
            error_code = create_error_code(err)
            _logger.exception(
                **create_troubleshooting_log_kwargs(
                    f"Notification of a new contact request could not be sent [{error_code}]",
                    error=err,
                    error_code=error_code,
                    tip="Check SMTP_* settings and the availability of the SMTP relay",
                )
            )
            return DispatchOutcome.error(ErrorKind.DISPATCH_ERROR, MSG_SUBMISSION_FAILED)

        except Exception as err:  # pylint: disable=broad-exception-caught
            return _internal_error(state, err)

        try:
            with log_context(
                _logger, logging.INFO, "sending confirmation to %s", emails.confirmation.to
            ):
                await self.transport.send(emails.confirmation)
            state = _transition(state, DispatchState.CONFIRMATION_SENT)

        except Exception as err:  # pylint: disable=broad-exception-caught
            # NOTE: best-effort. The agency already has the request
            error_code = create_error_code(err)
            _logger.warning(
                "Confirmation to %s could not be sent [%s]: %s",
                emails.confirmation.to.addr_spec,
                error_code,
                err,
                extra=get_log_record_extra(error_code=error_code),
            )

        _transition(state, DispatchState.DONE)
        return DispatchOutcome.ok(MSG_SUBMISSION_SENT)


def _transition(current: DispatchState, new: DispatchState) -> DispatchState:
    _logger.debug("Submission %s -> %s", current, new)
    return new


def _internal_error(state: DispatchState, err: Exception) -> DispatchOutcome:
    _transition(state, DispatchState.ERROR)
    error_code = create_error_code(err)
    _logger.exception(
        **create_troubleshooting_log_kwargs(
            f"Unexpected failure while dispatching a contact request [{error_code}]",
            error=err,
            error_code=error_code,
            error_context={"state": state},
        )
    )
    return DispatchOutcome.error(ErrorKind.INTERNAL_ERROR, MSG_SUBMISSION_FAILED)
