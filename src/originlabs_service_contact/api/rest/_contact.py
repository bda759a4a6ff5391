import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...models import ErrorKind, SubmissionInput
from ...services.dispatcher import SubmissionDispatcher
from ._dependencies import get_dispatcher

_logger = logging.getLogger(__name__)

router = APIRouter()


class ContactSubmitted(BaseModel):
    success: bool = True
    message: str


class ContactError(BaseModel):
    error: str


_STATUS_CODE_BY_REASON: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DISPATCH_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def _read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        _logger.debug("Contact request with a malformed JSON body")
        # NOTE: the validator rejects it as missing required fields
        return None


@router.post(
    "/contact",
    response_model=ContactSubmitted,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ContactError},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ContactError},
    },
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": SubmissionInput.model_json_schema()}
            },
            "required": True,
        }
    },
)
async def submit_contact_request(
    request: Request,
    dispatcher: Annotated[SubmissionDispatcher, Depends(get_dispatcher)],
):
    """Validates a contact-form submission, notifies the agency and confirms to the visitor"""
    outcome = await dispatcher.dispatch(await _read_json_body(request))

    if outcome.is_ok:
        return ContactSubmitted(message=outcome.user_message)

    assert outcome.reason  # nosec
    return JSONResponse(
        content=ContactError(error=outcome.user_message).model_dump(),
        status_code=_STATUS_CODE_BY_REASON[outcome.reason],
    )
