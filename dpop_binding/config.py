"""DPoP validation configuration."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_PERIOD = 60
DEFAULT_CLOCK_SKEW = 5

VALIDITY_PERIOD_ENV = "DPOP_HEADER_VALIDITY_PERIOD"
CLOCK_SKEW_ENV = "DPOP_CLOCK_SKEW"


def parse_validity_period(raw: Optional[str]) -> Optional[int]:
    """
    Parse a validity period in seconds.

    Returns:
        The period, or None if ``raw`` is absent or blank

    Raises:
        ConfigurationError: If ``raw`` is not a positive integer
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid DPoP header validity period: {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"DPoP header validity period must be positive: {value}")
    return value


def resolve_validity_period(raw: Optional[str], default: int = DEFAULT_VALIDITY_PERIOD) -> int:
    """Parse a validity period, falling back to ``default`` when unusable."""
    try:
        value = parse_validity_period(raw)
    except ConfigurationError as e:
        logger.warning("%s; using default of %d seconds", e.message, default)
        return default
    return default if value is None else value


def _resolve_clock_skew(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_CLOCK_SKEW
    try:
        value = int(raw.strip())
    except ValueError:
        value = -1
    if value < 0:
        logger.warning("Invalid DPoP clock skew %r; using default of %d seconds", raw, DEFAULT_CLOCK_SKEW)
        return DEFAULT_CLOCK_SKEW
    return value


@dataclass
class DPoPConfig:
    """DPoP validation configuration."""

    validity_period: int = DEFAULT_VALIDITY_PERIOD
    clock_skew: int = DEFAULT_CLOCK_SKEW

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DPoPConfig":
        """Build a configuration from environment variables."""
        if environ is None:
            environ = os.environ
        return cls(
            validity_period=resolve_validity_period(environ.get(VALIDITY_PERIOD_ENV)),
            clock_skew=_resolve_clock_skew(environ.get(CLOCK_SKEW_ENV)),
        )
