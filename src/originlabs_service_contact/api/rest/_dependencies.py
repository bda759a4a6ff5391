from typing import Annotated, cast

from fastapi import Depends, FastAPI, Request

from ...core.settings import ApplicationSettings
from ...services.dispatcher import SubmissionDispatcher


def get_app(request: Request) -> FastAPI:
    return cast(FastAPI, request.app)


def get_settings(app: Annotated[FastAPI, Depends(get_app)]) -> ApplicationSettings:
    assert app.state.settings  # nosec
    return cast(ApplicationSettings, app.state.settings)


def get_dispatcher(
    app: Annotated[FastAPI, Depends(get_app)],
) -> SubmissionDispatcher:
    assert app.state.dispatcher  # nosec
    return cast(SubmissionDispatcher, app.state.dispatcher)


__all__: tuple[str, ...] = (
    "get_app",
    "get_dispatcher",
    "get_settings",
)
