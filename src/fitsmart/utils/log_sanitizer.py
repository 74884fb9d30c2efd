"""Log sanitization filter to prevent credential and media leakage in logs.

This module provides a logging filter that rewrites records before they are
written, so that logs never carry:
- Reasoning engine API keys (OpenAI, Google)
- Bearer tokens and authorization headers
- Secret-looking key/value pairs
- Inline media (long base64 runs are collapsed to a size marker)

Usage:
    from fitsmart.utils.log_sanitizer import install_log_sanitizer

    # Apply to all loggers at application startup
    install_log_sanitizer()
"""

import logging
import re
from typing import Any, Callable, Union

Replacement = Union[str, Callable[[re.Match], str]]

# Shorter runs are left alone so ids and hashes stay readable
MIN_BASE64_RUN = 200


def _base64_marker(match: re.Match) -> str:
    return f"[BASE64 {len(match.group(0))} chars]"


class LogSanitizationFilter(logging.Filter):
    """Logging filter that redacts credentials and collapses inline media."""

    # Order matters - more specific patterns should come before general ones
    PATTERNS: list[tuple[re.Pattern, Replacement]] = [
        # Inline media payloads (base64, optionally a data URL)
        (re.compile(r'(?:data:[\w/+.-]+;base64,)?[A-Za-z0-9+/]{%d,}={0,2}' % MIN_BASE64_RUN), _base64_marker),

        # OpenAI API keys (sk-... and sk-proj-...)
        (re.compile(r'\bsk-(?:proj-)?[a-zA-Z0-9_-]{20,}'), '[REDACTED_OPENAI_KEY]'),

        # Google API keys (AIza...)
        (re.compile(r'\bAIza[0-9A-Za-z_-]{30,}'), '[REDACTED_GOOGLE_KEY]'),

        # Bearer tokens in Authorization headers
        (re.compile(r'Bearer\s+[a-zA-Z0-9_\-\.]+', re.IGNORECASE), 'Bearer [REDACTED_TOKEN]'),

        # Authorization header values (generic)
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Key fields (api_key=..., x-goog-api-key: ...)
        (re.compile(r'((?:api[_-]?key|x-goog-api-key)["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(secret["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place. Always lets it through."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))
        if record.args:
            record.args = self._sanitize_args(record.args)
        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        """Recursively sanitize log arguments."""
        if isinstance(args, str):
            return self._sanitize(args)
        elif isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        elif isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        elif isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        else:
            str_val = str(args)
            sanitized = self._sanitize(str_val)
            # Only return sanitized string if it changed, otherwise return original
            return sanitized if sanitized != str_val else args


def install_log_sanitizer(logger_name: str | None = None) -> None:
    """Install the sanitization filter.

    Args:
        logger_name: If provided, install only on the named logger.
                    If None, install on the root logger and its handlers.
    """
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return

    root_logger = logging.getLogger()
    root_logger.addFilter(sanitizer)
    # Records from child loggers skip logger filters on the root, handlers see them all
    for handler in root_logger.handlers:
        handler.addFilter(sanitizer)


def sanitize_string(text: str) -> str:
    """Sanitize a string without going through the logging system."""
    return LogSanitizationFilter()._sanitize(text)
