import sys
from logging.config import dictConfig

# Shared by setup_logging() and uvicorn.run(log_config=...) so server and gateway lines look alike
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(asctime)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(asctime)s [%(name)s] "%(request_line)s" %(status_code)s',
        },
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stderr,
            "level": "INFO",
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": sys.stdout,
            "level": "INFO",
        },
        # Request ids, provider failures and rejected requests
        "gateway": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stdout,
            "level": "DEBUG",
        },
    },
    "loggers": {
        "root": {"handlers": ["stderr"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["stderr"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        # Every gateway module logs under app.*
        "app": {"handlers": ["gateway"], "level": "DEBUG", "propagate": False},
        # The provider SDK logs each HTTP exchange at INFO
        "openai": {"handlers": ["stderr"], "level": "WARNING", "propagate": False},
        "httpx": {"handlers": ["stderr"], "level": "WARNING", "propagate": False},
    },
}


def setup_logging() -> None:
    """Applies LOGGING_CONFIG to the gateway and uvicorn loggers."""
    dictConfig(LOGGING_CONFIG)
