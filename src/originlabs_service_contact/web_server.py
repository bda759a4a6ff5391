from typing import Literal

import uvicorn


def start(
    log_level: Literal["info", "debug", "warning", "error"],
    *,
    host: str = "0.0.0.0",  # nosec  # NOSONAR
    port: int = 8000,
    reload: bool = False,
):
    uvicorn.run(
        "originlabs_service_contact.main:app_factory",
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
        factory=True,
    )
