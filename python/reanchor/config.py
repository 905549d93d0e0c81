"""Environment-backed settings and logging setup."""

import logging
import os
import sys

import structlog

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("REANCHOR_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("REANCHOR_LOG_FORMAT", "console").lower()

# Longest slice of model-supplied text echoed into a log line.
LOG_PREVIEW_CHARS = 120

# ---------------------------------------------------------------------------
# Request scopes
# ---------------------------------------------------------------------------
SUBSET_SCOPES = ("focused", "section", "subsection")


def configure_logging(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> None:
    """
    Route all log output to stderr.
    stdout is reserved for command output (JSON edits, prompts, markup).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(stream=sys.stderr, level=numeric_level, force=True)

    renderer = structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def preview(text, limit: int = LOG_PREVIEW_CHARS) -> str:
    return str(text)[:limit]
