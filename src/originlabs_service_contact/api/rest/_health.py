from datetime import UTC, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..._meta import API_VERSION
from ...core.settings import ApplicationSettings
from ._dependencies import get_settings

router = APIRouter()


class HealthCheckGet(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: datetime
    version: str
    smtp_host: str
    smtp_credentials: Literal["set", "missing"]


@router.get("/health", response_model=HealthCheckGet)
async def healthcheck(
    settings: Annotated[ApplicationSettings, Depends(get_settings)],
):
    # NOTE: only reports whether credentials are configured, never their values
    return HealthCheckGet(
        timestamp=datetime.now(UTC),
        version=API_VERSION,
        smtp_host=settings.CONTACT_SMTP.SMTP_HOST,
        smtp_credentials="set" if settings.CONTACT_SMTP.has_credentials else "missing",
    )
