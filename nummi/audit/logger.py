"""
Audit Logger

DESIGN DECISION: Every significant operation is logged as a structured
event. This provides:
1. Traceability of what a command read, fetched and computed
2. Debugging capability

The audit logger:
- Writes to stderr so that stdout stays reserved for command output
- Is synchronous, like the rest of nummi
- Supports correlation IDs to tie together the events of one command
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from nummi.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _configure_structlog(json: bool = False) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Route structlog through stdlib logging on import. Until configure_logging()
# installs a handler, stdlib's last-resort handler prints warnings and
# errors to stderr.
_configure_structlog()


def configure_logging(level: str = "warning", json: bool = False) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Minimum level name (debug, info, warning, error, critical)
        json: Render records as JSON lines instead of console text
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )
    _configure_structlog(json)


class AuditLogger:
    """
    Central audit logging service.

    Turns AuditEvents into structured log records at the event's severity.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: Attached to every event logged through the
                    helper methods. A fresh one is created if None.
        """
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("nummi.audit")

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its own severity."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_ledger_read(self, root: str, entry_count: int) -> None:
        self.log(AuditEventBuilder.ledger_read(
            root=root,
            entry_count=entry_count,
            correlation_id=self._correlation_id,
        ))

    def log_ledger_validated(self, root: str) -> None:
        self.log(AuditEventBuilder.ledger_validated(
            root=root,
            correlation_id=self._correlation_id,
        ))

    def log_ledger_validation_failed(self, root: str, error: str) -> None:
        self.log(AuditEventBuilder.ledger_validation_failed(
            root=root,
            error=error,
            correlation_id=self._correlation_id,
        ))

    def log_rate_cache_hit(self, path: str, currency_count: int) -> None:
        self.log(AuditEventBuilder.rate_cache_hit(
            path=path,
            currency_count=currency_count,
            correlation_id=self._correlation_id,
        ))

    def log_rate_cache_refreshed(self, path: str, currency_count: int, forced: bool) -> None:
        self.log(AuditEventBuilder.rate_cache_refreshed(
            path=path,
            currency_count=currency_count,
            forced=forced,
            correlation_id=self._correlation_id,
        ))

    def log_rate_fetch_failed(self, error: str) -> None:
        self.log(AuditEventBuilder.rate_fetch_failed(
            error=error,
            correlation_id=self._correlation_id,
        ))

    def log_series_generated(self, month_count: int, end: str) -> None:
        self.log(AuditEventBuilder.series_generated(
            month_count=month_count,
            end=end,
            correlation_id=self._correlation_id,
        ))

    def log_plot_rendered(self, output: str) -> None:
        self.log(AuditEventBuilder.plot_rendered(
            output=output,
            correlation_id=self._correlation_id,
        ))

    def log_error(self, error_type: str, error_message: str) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            correlation_id=self._correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a command and pass it through all
    subsequent operations.
    """
    return uuid4()
