import logging

from app.core.logging import LOGGING_CONFIG, setup_logging


def test_gateway_modules_share_one_logger_tree():
    loggers = LOGGING_CONFIG["loggers"]

    assert loggers["app"] == {"handlers": ["gateway"], "level": "DEBUG", "propagate": False}
    assert "gateway" in LOGGING_CONFIG["handlers"]
    assert not [name for name in loggers if name.startswith("app.")]


def test_provider_sdk_loggers_are_quiet():
    loggers = LOGGING_CONFIG["loggers"]

    assert loggers["openai"]["level"] == "WARNING"
    assert loggers["httpx"]["level"] == "WARNING"


def test_setup_logging_routes_service_loggers():
    setup_logging()

    service_logger = logging.getLogger("app.services.proposal_service")
    assert service_logger.getEffectiveLevel() == logging.DEBUG
    assert logging.getLogger("openai").getEffectiveLevel() == logging.WARNING
    assert [handler.name for handler in logging.getLogger("app").handlers] == ["gateway"]
