"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged, and so is every
rejected attempt to change it. This provides:
1. Traceability of every write
2. Debugging capability when a total looks wrong
3. A history the user can look back on

The audit logger:
- Is async so it sits naturally next to the async store
- Gracefully handles failures (a broken audit store never blocks saving an expense)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_ledger.models.audit import AuditEvent, AuditEventBuilder
from expense_ledger.models.expense import ExpenseRecord, LedgerView, ValidationIssue
from expense_ledger.services.storage import AuditStorageInterface


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_validation_failed(
        self,
        issue: ValidationIssue,
        correlation_id: UUID,
        expense_id: Optional[int] = None,
    ) -> None:
        """Log a rejected form submission."""
        event = AuditEventBuilder.validation_failed(
            field=issue.field,
            kind=issue.kind.value,
            message=issue.message,
            correlation_id=correlation_id,
            expense_id=expense_id,
        )
        await self.log(event)

    async def log_expense_created(
        self,
        record: ExpenseRecord,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_created(
            expense_id=record.id,
            category=record.category,
            amount=str(record.amount),
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_updated(
        self,
        record: ExpenseRecord,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_updated(
            expense_id=record.id,
            category=record.category,
            amount=str(record.amount),
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_deleted(
        self,
        expense_id: int,
        found: bool,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            found=found,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_view_derived(
        self,
        view: LedgerView,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.view_derived(
            time_window=view.time_window.value,
            category_filter=view.category_filter,
            record_count=view.record_count,
            visible_total=str(view.visible_total),
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        expense_id: Optional[int] = None,
    ) -> None:
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
            expense_id=expense_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


    async def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """
        Newest persisted events first.

        Empty when no storage is configured or the read fails.
        """
        if not self._storage:
            return []
        try:
            return await self._storage.get_recent_events(limit)
        except Exception as e:
            self._logger.error("audit_read_failed", error=str(e))
            return []

    async def expense_history(self, expense_id: int) -> list[AuditEvent]:
        """Persisted events for one expense, oldest first."""
        if not self._storage:
            return []
        try:
            return await self._storage.get_events_by_entity("expense", expense_id)
        except Exception as e:
            self._logger.error("audit_read_failed", error=str(e), expense_id=expense_id)
            return []


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one form submission).
    """
    return uuid4()
