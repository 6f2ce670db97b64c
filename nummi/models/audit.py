"""
Audit Models for nummi

Every significant operation (reading the ledger, refreshing the rate
cache, generating a series) produces an AuditEvent that is written to
the structured log. This provides:
1. Traceability of what a command actually read and computed
2. Debugging information when things go wrong

DESIGN DECISION: Events are plain data. Logging them never changes the
result of the operation that produced them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    LEDGER_READ = "ledger_read"
    LEDGER_VALIDATED = "ledger_validated"
    LEDGER_VALIDATION_FAILED = "ledger_validation_failed"

    # Rates
    RATE_CACHE_HIT = "rate_cache_hit"
    RATE_CACHE_REFRESHED = "rate_cache_refreshed"
    RATE_FETCH_FAILED = "rate_fetch_failed"

    # Aggregation
    SERIES_GENERATED = "series_generated"
    PLOT_RENDERED = "plot_rendered"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant operation creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Correlation - all events of one command invocation
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_read(root, 120, correlation_id)
    """

    @staticmethod
    def ledger_read(
        root: str,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_READ,
            correlation_id=correlation_id,
            description=f"Read {entry_count} entries from {root}",
            details={"root": root, "entry_count": entry_count},
        )

    @staticmethod
    def ledger_validated(
        root: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_VALIDATED,
            correlation_id=correlation_id,
            description=f"Ledger is valid: {root}",
            details={"root": root},
        )

    @staticmethod
    def ledger_validation_failed(
        root: str,
        error: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Ledger is invalid: {root}",
            details={"root": root},
            error_message=error,
        )

    @staticmethod
    def rate_cache_hit(
        path: str,
        currency_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_CACHE_HIT,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Using cached rates from {path}",
            details={"path": path, "currency_count": currency_count},
        )

    @staticmethod
    def rate_cache_refreshed(
        path: str,
        currency_count: int,
        forced: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_CACHE_REFRESHED,
            correlation_id=correlation_id,
            description=f"Rate cache refreshed with {currency_count} currencies",
            details={"path": path, "currency_count": currency_count, "forced": forced},
        )

    @staticmethod
    def rate_fetch_failed(
        error: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Fetching exchange rates failed; cache left untouched",
            error_message=error,
        )

    @staticmethod
    def series_generated(
        month_count: int,
        end: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SERIES_GENERATED,
            correlation_id=correlation_id,
            description=f"Generated {month_count} monthly rows up to {end}",
            details={"month_count": month_count, "end": end},
        )

    @staticmethod
    def plot_rendered(
        output: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLOT_RENDERED,
            correlation_id=correlation_id,
            description=f"Plot written to {output}",
            details={"output": output},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            error_message=error_message,
        )
