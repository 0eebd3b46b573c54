"""
Shared contract for cloud provider summary collaborators.

Defines the provider-shaped value types returned by collaborators, the
exception hierarchy they raise, and the helper used by bundled collaborators
to turn sub-resource failures into structured section errors.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

VALID_PROVIDERS = ("aws", "azure", "gcp")


class MoneyAmount(BaseModel):
    """An amount in a reporting currency."""

    amount: float
    currency: str = "USD"

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate and normalize currency code."""
        if not v or not v.strip():
            raise ValueError("Currency must be specified")
        return v.upper().strip()


class ServiceCost(BaseModel):
    """Cost attributed to a single service."""

    service: str
    amount: float

    @field_validator("service")
    @classmethod
    def validate_service(cls, v: str) -> str:
        stripped = v.strip()
        return stripped if stripped else "Unknown"


class CostPoint(BaseModel):
    """A single calendar-day cost figure."""

    day: str
    amount: float

    @field_validator("day", mode="before")
    @classmethod
    def validate_day(cls, v: Any) -> Any:
        """Accept date objects and store them as ISO days."""
        if isinstance(v, date):
            return v.isoformat()
        return v


class ProviderAlert(BaseModel):
    """An alert a collaborator has already classified by severity."""

    type: str
    message: str
    severity: Literal["info", "warning", "critical"] = "info"


class SectionError(BaseModel):
    """A partial failure reported by a bundled collaborator."""

    section: str
    message: str


class CloudProviderError(Exception):
    """Base exception for cloud provider errors."""

    pass


class AuthenticationError(CloudProviderError):
    """Authentication-related errors."""

    pass


class ConfigurationError(CloudProviderError):
    """Configuration-related errors."""

    pass


class APIError(CloudProviderError):
    """API-related errors."""

    def __init__(self, message: str, status_code: int | None = None, provider: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider


class RateLimitError(APIError):
    """Rate limiting errors."""

    def __init__(self, message: str, retry_after: int | None = None, provider: str | None = None):
        super().__init__(message, status_code=429, provider=provider)
        self.retry_after = retry_after


class ProviderTimeoutError(APIError):
    """A provider call did not settle before its deadline."""

    def __init__(self, timeout: float, provider: str | None = None):
        super().__init__(f"timed out after {timeout:g}s", status_code=504, provider=provider)
        self.timeout = timeout


class SummaryProvider(ABC):
    """Abstract base class for per-provider summary collaborators."""

    def __init__(self):
        self.provider_name = self._get_provider_name()

    @abstractmethod
    def _get_provider_name(self) -> str:
        """Return the provider name (aws, azure, gcp)."""
        pass


async def gather_sections(
    sections: dict[str, Awaitable[Any]],
) -> tuple[dict[str, Any], list[SectionError]]:
    """
    Run named sub-resource fetches concurrently without ever raising.

    Bundled collaborators use this so that one failing sub-resource becomes
    a null section plus an entry in ``errors`` instead of a rejection.

    Args:
        sections: Mapping of section label to awaitable

    Returns:
        Tuple of (section values, errors in section order)
    """
    labels = list(sections.keys())
    results = await asyncio.gather(*sections.values(), return_exceptions=True)

    values: dict[str, Any] = {}
    errors: list[SectionError] = []
    for label, result in zip(labels, results):
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if isinstance(result, Exception):
            message = str(result) or f"Failed to load {label.lower()}"
            logger.warning(f"Section '{label}' failed: {message}")
            values[label] = None
            errors.append(SectionError(section=label, message=message))
        else:
            values[label] = result

    return values, errors


def describe_failure(error: BaseException) -> str:
    """Human-readable reason for a failed provider call."""
    message = str(error).strip()
    return message or type(error).__name__
