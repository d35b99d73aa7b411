import logging
import sys

import structlog

from labrisk.config import Settings

_HANDLER_NAME = "labrisk-stdout"


def setup_logging(settings: Settings) -> None:
    """Configure structlog on top of the standard library root logger.

    Streamlit re-executes the script on every interaction, so the handler is
    installed once and later calls only refresh the level.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())
    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.app_env == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *common_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=common_processors,
        processor=renderer,
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.set_name(_HANDLER_NAME)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    # third-party HTTP loggers stay at WARNING
    for logger_name in ("urllib3", "httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
