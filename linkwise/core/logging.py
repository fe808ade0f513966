"""
Structured logging module using Loguru

Every record logged through StructuredLogger carries the current run id and
lead url, so one enrichment run can be followed across the log file.
"""

from loguru import logger
from contextvars import ContextVar
from typing import Optional
import json
import sys
from functools import wraps
import asyncio
import time

# Context variables for run tracking
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
lead_url_var: ContextVar[Optional[str]] = ContextVar("lead_url", default=None)


class StructuredLogger:
    """Loguru logger bound to the current run context"""

    @staticmethod
    def bind(**kwargs):
        context = {
            "run_id": run_id_var.get(),
            "lead_url": lead_url_var.get(),
            **kwargs,
        }
        return logger.bind(**{k: v for k, v in context.items() if v is not None})

    @staticmethod
    def log(level: str, message: str, **kwargs):
        StructuredLogger.bind(**kwargs).log(level, message)


def _log_duration(func_name: str, start: float, error: Optional[Exception] = None):
    duration = time.perf_counter() - start
    if error is None:
        StructuredLogger.log(
            "INFO", f"{func_name} finished", function=func_name, duration=duration, status="success"
        )
    else:
        StructuredLogger.log(
            "ERROR",
            f"{func_name} failed",
            function=func_name,
            duration=duration,
            status="error",
            error=str(error),
        )


def log_execution_time(func):
    """Decorator to log how long a function or coroutine took, and whether it raised"""

    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            _log_duration(func.__name__, start, e)
            raise
        _log_duration(func.__name__, start)
        return result

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_duration(func.__name__, start, e)
            raise
        _log_duration(func.__name__, start)
        return result

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper


def log_completion_request(
    model: str,
    purpose: str,
    duration: Optional[float] = None,
    error: Optional[str] = None,
):
    """Log a call to the evaluation service"""
    log_data = {"model": model, "purpose": purpose, "type": "completion"}
    if duration is not None:
        log_data["duration"] = duration

    if error:
        StructuredLogger.log("WARNING", "Completion request failed", error=error, **log_data)
    else:
        StructuredLogger.log("DEBUG", "Completion request completed", **log_data)


def json_formatter(record):
    """Format a log record as one JSON line, run context included"""
    payload = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
        **record["extra"],
    }
    if record["exception"]:
        payload["exception"] = str(record["exception"])

    # Loguru calls format_map on the returned string
    return json.dumps(payload, default=str).replace("{", "{{").replace("}", "}}") + "\n"


def setup_json_logging():
    """Replace the configured sinks with JSON lines on stdout"""
    logger.remove()
    logger.add(sys.stdout, format=json_formatter)


__all__ = [
    "logger",
    "StructuredLogger",
    "log_execution_time",
    "log_completion_request",
    "setup_json_logging",
    "run_id_var",
    "lead_url_var",
]
