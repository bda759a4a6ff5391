from fastapi import APIRouter, FastAPI

from . import _contact, _health
from ._exceptions import set_exception_handlers


def setup_rest_api(app: FastAPI) -> None:
    router = APIRouter(prefix="/api")
    router.include_router(_health.router, tags=["health"])
    router.include_router(_contact.router, tags=["contact"])
    app.include_router(router)

    set_exception_handlers(app)
