import logging

from app.observability.logging import configure_logging


def _json_handler() -> logging.Handler:
    return logging.getLogger("uvicorn").handlers[0]


def test_server_loggers_share_the_root_json_handler(app) -> None:
    handler = _json_handler()
    assert handler in logging.getLogger().handlers

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        assert server_logger.handlers == [handler]
        assert server_logger.propagate is False


def test_configure_logging_only_applies_once(app) -> None:
    handler = _json_handler()
    level = logging.getLogger("uvicorn").level

    configure_logging("DEBUG")

    assert _json_handler() is handler
    assert logging.getLogger("uvicorn").level == level
