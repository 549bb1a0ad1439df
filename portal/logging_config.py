# Hippies Portal - Logging
# Standard library logging setup with secret masking

import logging
import re
import sys


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class SensitiveDataFilter(logging.Filter):
    """Mask passwords, tokens and api keys before records reach a handler."""

    SENSITIVE_PATTERNS = [
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^"\'\s&,]+)', re.IGNORECASE), r"\1***"),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'\s&,]+)', re.IGNORECASE), r"\1***"),
        (re.compile(r'(api[_-]?key["\']?\s*[:=]\s*["\']?)([^"\'\s&,]+)', re.IGNORECASE), r"\1***"),
    ]

    def _mask(self, value: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once; an existing portal handler is replaced.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_portal_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SensitiveDataFilter())
    handler._portal_handler = True

    root.addHandler(handler)
    root.setLevel(level.upper())
