"""
Data Models Package

This package contains the Pydantic models and the line codec used in nummi.
All data flowing through the system must conform to these schemas.
"""

from nummi.models.entry import (
    BASE_CURRENCY,
    Currency,
    Entry,
    EntryParseError,
    LedgerError,
    ParseErrorKind,
    parse,
    serialize,
)
from nummi.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "BASE_CURRENCY",
    "Currency",
    "Entry",
    "EntryParseError",
    "LedgerError",
    "ParseErrorKind",
    "parse",
    "serialize",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
