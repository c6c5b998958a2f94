"""
Logging setup for the blog API.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where those records go.  ``configure_logging`` is called once by the
application factory, before the first request is served.
"""
import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _parse_level(value: str | int | None) -> int:
    """Map ``"debug"`` / ``"INFO"`` / ``10`` to a logging constant (INFO on junk)."""
    if isinstance(value, int):
        return value
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Install a single stream handler for the ``app`` logger tree and return it.

    Third-party loggers keep their own configuration, except SQLAlchemy's
    engine logger which follows ``DEBUG`` through ``echo`` instead.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "app": {
                    "handlers": ["console"],
                    "level": _parse_level(level),
                    "propagate": False,
                },
            },
        }
    )
    return logging.getLogger("app")
