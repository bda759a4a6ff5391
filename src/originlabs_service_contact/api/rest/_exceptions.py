import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ...core.errors import create_error_code
from ...core.logging_errors import create_troubleshooting_log_kwargs
from ...core.user_messages import MSG_SUBMISSION_FAILED

_logger = logging.getLogger(__name__)


async def handle_errors_as_500(request: Request, exception: Exception) -> JSONResponse:
    error_code = create_error_code(exception)
    _logger.exception(
        **create_troubleshooting_log_kwargs(
            f"Unhandled error while processing {request.method} {request.url.path} [{error_code}]",
            error=exception,
            error_code=error_code,
        )
    )
    # NOTE: no traceback, error details or settings cross the boundary
    return JSONResponse(
        content={"error": MSG_SUBMISSION_FAILED},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def set_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, handle_errors_as_500)
