"""Logging setup with secret redaction.

The oracle client sends an API key in the request URL, and user snippets may
contain tokens or e-mail addresses. Every handler installed here carries a
filter that scrubs those before a record is written.
"""

from __future__ import annotations

import json
import logging
import re


class SecretRedactor:
    """Redact credentials and e-mail addresses from log messages."""

    URL_KEY_PATTERN = re.compile(r"([?&](?:key|api_key|apikey|token)=)[^&\s\"']+", re.IGNORECASE)
    BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]{8,}", re.IGNORECASE)
    HEADER_KEY_PATTERN = re.compile(r"((?:x-goog-api-key|x-api-key)\s*[:=]\s*)\S+", re.IGNORECASE)
    GOOGLE_KEY_PATTERN = re.compile(r"\bAIza[0-9A-Za-z_-]{35}\b")
    EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

    @classmethod
    def redact(cls, message: str) -> str:
        message = cls.URL_KEY_PATTERN.sub(r"\1[KEY_REDACTED]", message)
        message = cls.BEARER_PATTERN.sub(r"\1[TOKEN_REDACTED]", message)
        message = cls.HEADER_KEY_PATTERN.sub(r"\1[KEY_REDACTED]", message)
        message = cls.GOOGLE_KEY_PATTERN.sub("[KEY_REDACTED]", message)
        message = cls.EMAIL_PATTERN.sub("[EMAIL_REDACTED]", message)
        return message


class RedactingFilter(logging.Filter):
    """Logging filter that redacts secrets from the message and its arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = SecretRedactor.redact(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: SecretRedactor.redact(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    SecretRedactor.redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class StructuredLogger:
    """Logger wrapper that appends keyword data as ``[key=value ...]``."""

    def __init__(self, name: str, enable_redaction: bool = True):
        self.logger = logging.getLogger(name)
        self.enable_redaction = enable_redaction

        if enable_redaction and not any(isinstance(f, RedactingFilter) for f in self.logger.filters):
            self.logger.addFilter(RedactingFilter())

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs):
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, kwargs)

    def _log(self, level: int, msg: str, extra_data: dict):
        if extra_data:
            structured = " ".join(f"{k}={v}" for k, v in extra_data.items())
            msg = f"{msg} [{structured}]"
        self.logger.log(level, msg)


def setup_secure_logging(
    log_level: str = "INFO", enable_redaction: bool = True, log_json: bool = False
) -> StructuredLogger:
    """Configure root logging and return the package's structured logger."""
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    handler = logging.StreamHandler()
    if log_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    if enable_redaction:
        # Handler-level so records from every module logger are covered.
        handler.addFilter(RedactingFilter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    return StructuredLogger("decipher_engine", enable_redaction=enable_redaction)
