"""
Structured logging configuration.

configure_logging() is called once from create_app(). LOG_FORMAT picks
human-readable text or one JSON object per line; LOG_LEVEL defaults to INFO.
Records emitted while a Flask request is active carry its method and path,
and pipeline identifiers passed via `extra=` are copied into JSON output.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone

# Identifiers callers may attach with logger.info(..., extra={...})
CONTEXT_FIELDS = ('form_id', 'submission_id', 'lead_id', 'content_type', 'content_id', 'job_id')


class RequestContextFilter(logging.Filter):
    """Stamp records with the active request's method and path, if any."""

    def filter(self, record):
        from flask import has_request_context, request

        if has_request_context():
            record.http_method = request.method
            record.http_path = request.path
        else:
            record.http_method = None
            record.http_path = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shippers."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if getattr(record, 'http_path', None):
            entry['request'] = {'method': record.http_method, 'path': record.http_path}
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """`[time] LEVEL logger: message`, with the request path appended when set."""

    def __init__(self):
        super().__init__('[%(asctime)s] %(levelname)s %(name)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record):
        line = super().format(record)
        if getattr(record, 'http_path', None):
            line += f" ({record.http_method} {record.http_path})"
        return line


# Client libraries that log every request at INFO
_QUIET_LOGGERS = (
    'urllib3',
    'openai',
    'httpcore',
    'httpx',
    'rq.worker',
    'sqlalchemy.engine',
    'werkzeug',
)


def _level_from_env():
    level = getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(app=None):
    """
    Replace root handlers with a single stderr handler.

    Environment variables:
        LOG_LEVEL  — Python log level name (default: INFO)
        LOG_FORMAT — "text" (default) or "json"
    """
    level = _level_from_env()
    json_output = os.getenv('LOG_FORMAT', 'text').lower() == 'json'

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app is not None:
        # Flask's own handler would print every app.logger record twice
        app.logger.handlers.clear()
        app.logger.propagate = True
