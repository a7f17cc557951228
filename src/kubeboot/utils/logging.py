"""Logging for kubeboot.

Events are rendered by structlog onto stderr unless configured otherwise:
``get-credential`` prints its JSON on stdout and a kubectl-style consumer
parses that stream, so nothing else may be written there. Bearer tokens and
service account tokens never reach a log line; fields carrying them are
masked before rendering.
"""

import logging
import sys
from typing import Any, TextIO

import structlog

SECRET_FIELDS = frozenset({"access_token", "token", "ksa_token"})
REDACTED = "**redacted**"


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential values carried in log events."""
    for key in SECRET_FIELDS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _output_stream(output: str) -> TextIO:
    return sys.stdout if output == "stdout" else sys.stderr


def _renderer(format: str) -> Any:
    if format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(level: str = "INFO", format: str = "json", output: str = "stderr") -> None:
    """Route kubeboot's log events.

    Args:
        level: Minimum level name; unknown names fall back to INFO
        format: ``json`` for machine-readable lines, anything else for console
        output: ``stderr`` (default) or ``stdout``
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    stream = _output_stream(output)

    # Third-party libraries (google-auth, urllib3) log through stdlib logging.
    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]
    if format == "json":
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]
    processors.append(_renderer(format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def log_error(
    logger: structlog.BoundLogger,
    error: Exception,
    operation: str | None = None,
    **kwargs: Any,
) -> None:
    """Emit a single ``error_occurred`` event for a fatal error.

    The chained cause, if any, is included so that a failed metadata or API
    call is visible without reading the traceback.
    """
    context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs,
    }
    if operation:
        context["operation"] = operation
    if error.__cause__ is not None:
        context["cause"] = repr(error.__cause__)

    logger.error("error_occurred", **context, exc_info=True)
