# ─────────────────────────────────────────────────────────────────────────────
# Logging Configuration — structlog over stdlib logging
# ─────────────────────────────────────────────────────────────────────────────


import logging
import sys

import structlog

# Third-party loggers that are chatty at INFO (one line per HTTP call)
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for structured logging.

    JSON output emits one parseable object per line with timestamp, level,
    logger name, request ID (when bound) and the event's fields. Console
    output is used for local development (human-readable).

    Stdlib loggers (uvicorn, httpx, the Gemini SDK) are routed through the
    same formatter so all output shares one shape.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

    final_processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_output:
        final_processors.append(structlog.processors.format_exc_info)
    final_processors.append(renderer)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=final_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
