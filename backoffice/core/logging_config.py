"""
JSON logging for the backoffice service

One JSON object per line. Records logged while a request is in flight carry
its request and correlation ids; structured fields go in ``extra_fields``.
Account numbers and database credentials never reach the output in clear.
"""

import json
import logging
import re
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

# Loggers that are too chatty at INFO for a request-per-line service
QUIET_LOGGERS = ('uvicorn.access', 'httpx', 'httpcore', 'sqlalchemy.engine')

def mask_account_number(value: Any) -> str:
    """Keep the last four digits: 12345678 -> ****5678"""
    text = str(value)
    if len(text) <= 4:
        return "*" * len(text)
    return "*" * (len(text) - 4) + text[-4:]

class StructuredFormatter(logging.Formatter):
    def __init__(self, service_name: str, environment: str = "development", version: str = "1.0.0"):
        super().__init__()
        self.service = {"name": service_name, "environment": environment, "version": version}

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "@timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request = {
            key: value
            for key, value in (("request_id", request_id_var.get()), ("correlation_id", correlation_id_var.get()))
            if value
        }
        if request:
            entry["request"] = request

        fields = getattr(record, 'extra_fields', None)
        if fields:
            entry["fields"] = fields

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            entry["error"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(entry, default=str)

class SecurityFilter(logging.Filter):
    """Masks account numbers in structured fields and passwords in database URLs"""

    ACCOUNT_NUMBER_FIELDS = ('bank_account_number', 'recipient_account_number')
    URL_PASSWORD = re.compile(r'(://[^:/@\s]+:)[^@\s]+@')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.URL_PASSWORD.sub(r'\1***@', record.msg)

        fields = getattr(record, 'extra_fields', None)
        if isinstance(fields, dict):
            record.extra_fields = {
                key: mask_account_number(value) if key in self.ACCOUNT_NUMBER_FIELDS and value is not None else value
                for key, value in fields.items()
            }
        return True

def setup_logging(
    service_name: str,
    level: str = "INFO",
    environment: str = "development",
    version: str = "1.0.0",
) -> None:
    """Route every logger through one JSON stdout handler"""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(service_name, environment, version))
    handler.addFilter(SecurityFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={'extra_fields': {'level': level.upper(), 'environment': environment}}
    )

class LoggerAdapter(logging.LoggerAdapter):
    """Merges fields bound at creation into every record's extra_fields"""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        if self.extra:
            extra['extra_fields'] = {**self.extra, **extra.get('extra_fields', {})}
        kwargs['extra'] = extra
        return msg, kwargs

def get_logger(name: str, **bound_fields: Any) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), bound_fields)

def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> None:
    request_id_var.set(request_id)
    correlation_id_var.set(correlation_id)

def generate_request_id() -> str:
    return uuid.uuid4().hex

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per finished request and echoes X-Request-ID"""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(request_id, request.headers.get('X-Correlation-ID'))

        logger = get_logger(__name__, method=request.method, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                extra={'extra_fields': {'duration_ms': round((time.perf_counter() - started) * 1000, 2)}}
            )
            raise

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={'extra_fields': {
                'status_code': response.status_code,
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
            }}
        )
        response.headers['X-Request-ID'] = request_id
        return response
