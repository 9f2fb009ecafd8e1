"""
Logging setup for the agenda service.

One stdout handler on the root logger. Under a container runtime
(Docker/Kubernetes/Fly.io) or with ENVIRONMENT=production the format drops
the timestamp, since the runtime stamps every line itself.

The agenda engine logs one line per chair per generated day at DEBUG and
has its own level, set from AGENDA_ENGINE_LOG_LEVEL.

Usage:
    from clinic_agenda.utils.logging_config import configure_logging
    configure_logging(level=logging.INFO, engine_level=logging.WARNING)
"""
import os
import sys
import logging
from typing import Optional

ENGINE_LOGGER = "clinic_agenda.services.agenda"

CONTAINER_FORMAT = "[%(name)s] %(levelname)s: %(message)s"

LOCAL_FORMAT = "[%(asctime)s] [%(name)s] %(levelname)s: %(message)s"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "watchfiles")

DOCKERENV_PATH = "/.dockerenv"


def is_containerized(environ=None) -> bool:
    environ = os.environ if environ is None else environ
    return bool(
        environ.get('FLY_APP_NAME') or
        environ.get('KUBERNETES_SERVICE_HOST') or
        os.path.exists(DOCKERENV_PATH)
    )


def choose_format(environment: str = "development", environ=None):
    """(format, datefmt) for the current runtime."""
    if environment == "production" or is_containerized(environ):
        return CONTAINER_FORMAT, None
    return LOCAL_FORMAT, DATE_FORMAT


def configure_logging(
    level: int = logging.INFO,
    force: bool = False,
    engine_level: Optional[int] = None,
    environment: str = "development",
) -> bool:
    """
    Configure logging for the service.

    Args:
        level: Root logging level
        force: Replace handlers that are already installed
        engine_level: Level for the agenda engine loggers (default: same as ``level``)
        environment: ENVIRONMENT setting; production always uses the container format

    Returns:
        True if handlers were installed, False if logging was already set up
    """
    root_logger = logging.getLogger()

    if root_logger.handlers and not force:
        return False

    if force:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    log_format, datefmt = choose_format(environment)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(log_format, datefmt=datefmt))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    logging.getLogger(ENGINE_LOGGER).setLevel(level if engine_level is None else engine_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return True
