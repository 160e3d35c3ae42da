# ABOUTME: Structured logging with correlation IDs for the ContextForge client
# ABOUTME: Configures structlog and redacts credentials before payloads are logged

"""
Structured logging with correlation IDs and credential redaction.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module provides three observability features:

1. STRUCTURED LOGGING: key/value log events (operation, kind, identity)
   rendered as JSON lines or colored console output.

2. CORRELATION IDs: One identifier per reconciliation call, attached to every
   log line that call produces. The orchestration engine may run many
   reconciliations at once; the ID tells their log lines apart.

3. REDACTION: Request payloads are logged at DEBUG level. Gateway payloads
   carry auth_value, and every request may carry a bearer token. redact()
   masks those before anything reaches a log sink.

=============================================================================
CONTEXT VARIABLES (contextvars)
=============================================================================

The correlation ID must follow one reconciliation through the reconciler,
the client and the transport without being passed to every function.
A ContextVar gives each asyncio task its own value:

    async def reconcile_gateway():
        set_correlation_id("")        # fresh ID for this task
        await reconciler.create(...)  # all logs carry it

Two tasks running concurrently never see each other's ID.
"""

from __future__ import annotations

import logging
import re
import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping


# =============================================================================
# CORRELATION ID MANAGEMENT
# =============================================================================

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """
    Correlation ID of the running reconciliation, created on first use.

    If no ID has been set in the current context, an 8-character ID is
    generated from a UUID4, stored, and returned. Subsequent calls in the
    same context return the same value.

    Returns:
        Eight hex characters, e.g. "3f2a9c1e".
    """
    cid = correlation_id.get()
    if not cid:
        cid = str(uuid.uuid4())[:8]
        correlation_id.set(cid)
    return cid


def set_correlation_id(cid: str) -> None:
    """
    Replace the correlation ID of the current task.

    Passing "" makes the next get_correlation_id() call generate a new one,
    which is how every reconciler operation starts.
    """
    correlation_id.set(cid)


def add_correlation_id(
    logger: structlog.types.WrappedLogger,  # noqa: ARG001 - Required by structlog Processor API
    method_name: str,  # noqa: ARG001 - Required by structlog Processor API
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """
    Stamp each log event with the reconciliation's correlation ID.

    This is a STRUCTLOG PROCESSOR: structlog passes every event dictionary
    through a pipeline of these functions before rendering it.

    Args:
        logger: The structlog wrapped logger (unused but required by API)
        method_name: The logging method name (unused but required by API)
        event_dict: Dictionary containing log event data to enrich

    Returns:
        The same event_dict, now carrying "correlation_id".
    """
    event_dict["correlation_id"] = get_correlation_id()
    return event_dict


# =============================================================================
# REDACTION
# =============================================================================

MASK = "***MASKED***"

# Regular expressions that find secrets embedded in free text, such as an
# error body echoing a header back.
SECRET_PATTERNS = [
    (re.compile(r"(token[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+", re.I), rf"\1{MASK}"),
    (re.compile(r"(password[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+", re.I), rf"\1{MASK}"),
    (re.compile(r"(auth_value[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+", re.I), rf"\1{MASK}"),
    (re.compile(r"(bearer\s+)[^\s\"']+", re.I), rf"\1{MASK}"),
]

# Dictionary keys whose values are always masked.
SENSITIVE_KEYS = frozenset(
    [
        "auth_value",
        "token",
        "password",
        "secret",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "credentials",
    ]
)


def redact(data: Any) -> Any:
    """
    Mask sensitive values in a JSON-like structure.

    Recurses through dicts and lists. Dict values under SENSITIVE_KEYS are
    replaced outright; strings are scrubbed with SECRET_PATTERNS. The input
    is never modified; a new structure is returned.

        {"name": "gw", "auth_value": "s3cret"}
            -> {"name": "gw", "auth_value": "***MASKED***"}

    Args:
        data: Any value (dict, list, str, int, None, ...)

    Returns:
        Same structure with sensitive values masked
    """
    if isinstance(data, str):
        masked = data
        for pattern, replacement in SECRET_PATTERNS:
            masked = pattern.sub(replacement, masked)
        return masked

    if isinstance(data, dict):
        return {
            k: MASK if isinstance(k, str) and k.lower() in SENSITIVE_KEYS and v else redact(v)
            for k, v in data.items()
        }

    if isinstance(data, list):
        return [redact(item) for item in data]

    return data


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging.

    PROCESSOR PIPELINE:
    -------------------
    1. merge_contextvars: Adds anything bound with bind_contextvars()
    2. add_log_level: Adds "level" field
    3. TimeStamper: Adds ISO-format timestamp
    4. add_correlation_id: Adds the reconciliation's correlation ID
    5. Renderer: JSON lines or colored console output

    Args:
        level: "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL".
        json_output: If True, output JSON (for log aggregation).
                     If False, output colored text (for terminals).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
