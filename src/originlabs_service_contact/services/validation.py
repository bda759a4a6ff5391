"""Checks raw contact-form payloads

Only a SubmissionInput returned by `validate_submission` may reach the renderer.
"""

import logging
from collections.abc import Mapping
from typing import Any, Final

from pydantic import ValidationError

from ..core.errors import SubmissionValidationError
from ..core.user_messages import MSG_INVALID_EMAIL, MSG_REQUIRED_FIELDS_MISSING
from ..models import SubmissionInput

_logger = logging.getLogger(__name__)


REQUIRED_FIELDS: Final[tuple[str, ...]] = ("name", "email", "service", "message")
OPTIONAL_FIELDS: Final[tuple[str, ...]] = ("company", "phone", "budget")

# NOTE: message is sent as typed by the visitor (line breaks included)
_VERBATIM_FIELDS: Final[frozenset[str]] = frozenset({"message"})


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _normalize_optional(value: Any) -> Any:
    # the web form posts "" for untouched inputs
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


def validate_submission(raw: Any) -> SubmissionInput:
    """
    Raises:
        SubmissionValidationError: with the message to show to the visitor as `user_msg`
    """
    if not isinstance(raw, Mapping):
        raise SubmissionValidationError(
            user_msg=MSG_REQUIRED_FIELDS_MISSING,
            fields=list(REQUIRED_FIELDS),
            reason=f"Expected a JSON object, got {type(raw).__name__}",
        )

    if missing := [f for f in REQUIRED_FIELDS if _is_blank(raw.get(f))]:
        raise SubmissionValidationError(
            user_msg=MSG_REQUIRED_FIELDS_MISSING, fields=missing
        )

    data = {
        f: raw[f] if f in _VERBATIM_FIELDS else raw[f].strip()
        for f in REQUIRED_FIELDS
    }
    data.update(
        {
            f: value
            for f in OPTIONAL_FIELDS
            if (value := _normalize_optional(raw.get(f))) is not None
        }
    )

    try:
        return SubmissionInput.model_validate(data)
    except ValidationError as err:
        failed = sorted({f"{e['loc'][0]}" for e in err.errors() if e["loc"]})
        _logger.debug("Rejected submission fields %s: %s", failed, err)
        raise SubmissionValidationError(
            user_msg=(
                MSG_INVALID_EMAIL if failed == ["email"] else MSG_REQUIRED_FIELDS_MISSING
            ),
            fields=failed,
        ) from err
