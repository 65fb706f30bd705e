"""
Audit Models for the Expense Ledger

Every change to the ledger (and every rejected attempt to change it)
is recorded as an audit event. This provides:
1. Traceability of all writes
2. Debugging information when a total looks wrong
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Derived views
    VIEW_DERIVED = "view_derived"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'view')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Store id of the expense this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list:
        """
        Flatten to a list of strings for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json,
        error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id is not None else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "AuditEvent":
        """Rebuild an event from the columns written by to_row()."""
        def cell(index: int) -> str:
            try:
                return row[index] or ""
            except IndexError:
                return ""

        return cls(
            event_id=UUID(cell(0)),
            timestamp=datetime.fromisoformat(cell(1)),
            event_type=AuditEventType(cell(2)),
            severity=AuditSeverity(cell(3)),
            entity_type=cell(4) or None,
            entity_id=int(cell(5)) if cell(5) else None,
            correlation_id=UUID(cell(6)) if cell(6) else None,
            description=cell(7),
            details=json.loads(cell(8)) if cell(8) else {},
            error_message=cell(9) or None,
            is_user_action=cell(10).lower() == "true",
        )


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, category, amount, correlation_id)
    """

    @staticmethod
    def validation_failed(
        field: str,
        kind: str,
        message: str,
        correlation_id: UUID,
        expense_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense rejected: {message}",
            details={
                "field": field,
                "kind": kind,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_created(
        expense_id: int,
        category: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense saved: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: int,
        category: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} updated: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        found: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            severity=AuditSeverity.INFO if found else AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=(
                f"Expense {expense_id} deleted"
                if found
                else f"Expense {expense_id} not found for deletion"
            ),
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def view_derived(
        time_window: str,
        category_filter: Optional[str],
        record_count: int,
        visible_total: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VIEW_DERIVED,
            severity=AuditSeverity.DEBUG,
            entity_type="view",
            correlation_id=correlation_id,
            description=f"View derived: {time_window} returned {record_count} expenses",
            details={
                "time_window": time_window,
                "category_filter": category_filter,
                "record_count": record_count,
                "visible_total": visible_total,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        expense_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
