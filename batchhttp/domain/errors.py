"""Errors raised by the dispatcher before any network activity.

Per-request transport failures are never raised; they are carried in
Outcome.error instead.
"""
from __future__ import annotations


class BatchHttpError(Exception):
    """Base for structural batch failures (bad input, bad configuration)."""


class InvalidInputError(BatchHttpError, ValueError):
    """Raised when a request descriptor or header entry is malformed."""


class InvalidConfigError(BatchHttpError, ValueError):
    """Raised when options are out of range or unknown."""
