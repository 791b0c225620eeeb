"""
Exception types and severity-tagged error logging.
"""
import hashlib
from enum import Enum
from typing import Any, Dict, Optional

from joinery.core.logging import get_logger

logger = get_logger(__name__)


class JoineryError(Exception):
    """Base class for errors raised inside the joinery service."""


class NLUProviderError(JoineryError):
    """The language-model provider failed, timed out or returned nothing usable."""


class ProjectNumberConflict(JoineryError):
    """No free project number could be generated."""


class ErrorSeverity(Enum):
    LOW = "low"           # validation errors, expected failures
    MEDIUM = "medium"     # timeouts, upstream errors the caller recovers from
    HIGH = "high"         # auth failures, store outages
    CRITICAL = "critical"


def _fingerprint(error: Exception, context: Dict[str, Any]) -> str:
    content = f"{type(error).__name__}:{str(error)[:100]}:{context.get('component', '')}"
    return hashlib.md5(content.encode(), usedforsecurity=False).hexdigest()[:8]


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None,
              severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> str:
    """Log an error with a short fingerprint for correlation. Returns the fingerprint."""
    context = context or {}
    fingerprint = _fingerprint(error, context)
    log = logger.error if severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logger.warning
    log(
        "error_logged",
        error_hash=fingerprint,
        error_type=type(error).__name__,
        error=str(error),
        severity=severity.value,
        **context,
    )
    return fingerprint
