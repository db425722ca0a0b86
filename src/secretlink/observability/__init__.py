"""
Observability for secretlink.

Provides logging for the extraction, join and export stages.
"""

from secretlink.observability.logging import (
    LOG_FORMATS,
    LOG_LEVELS,
    HumanReadableFormatter,
    SecretLinkLogger,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "LOG_FORMATS",
    "LOG_LEVELS",
    "HumanReadableFormatter",
    "SecretLinkLogger",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]
