"""Main application to be deployed by uvicorn (or equivalent) server"""

import logging

from fastapi import FastAPI

from .core.application import create_app
from .core.logging_utils import setup_loggers
from .core.settings import ApplicationSettings


def app_factory() -> FastAPI:
    the_settings = ApplicationSettings.create_from_envs()

    logging.basicConfig(level=the_settings.log_level)  # NOSONAR
    logging.root.setLevel(the_settings.log_level)
    setup_loggers(
        log_format_local_dev_enabled=the_settings.CONTACT_LOG_FORMAT_LOCAL_DEV_ENABLED,
        logger_filter_mapping=the_settings.CONTACT_LOG_FILTER_MAPPING,
    )

    return create_app(the_settings)
