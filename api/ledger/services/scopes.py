"""
Date scopes for ledger records.

Sales are keyed by the calendar date of ``created_at`` (truncated before any
comparison); expenses by ``expense_date``. A record without a usable date is
kept only by the unbounded scope and is always reported as an issue.
"""
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Generic, TypeVar

from ledger.schemas.expenses import Expense
from ledger.schemas.sales import Sale
from ledger.schemas.summary import DataQualityIssue

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class DateScope:
    date_from: date | None = None
    date_to: date | None = None

    @classmethod
    def unbounded(cls) -> "DateScope":
        return cls()

    @classmethod
    def day(cls, day: date) -> "DateScope":
        return cls(day, day)

    @classmethod
    def between(cls, date_from: date | None = None, date_to: date | None = None) -> "DateScope":
        return cls(date_from, date_to)

    @classmethod
    def today(cls, today: date) -> "DateScope":
        return cls.day(today)

    @classmethod
    def month_to_date(cls, today: date) -> "DateScope":
        return cls(today.replace(day=1), today)

    @property
    def is_bounded(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @property
    def is_inverted(self) -> bool:
        return (
            self.date_from is not None
            and self.date_to is not None
            and self.date_from > self.date_to
        )

    def contains(self, record_date: date | None) -> bool:
        if not self.is_bounded:
            return True
        if record_date is None:
            return False
        if self.date_from is not None and record_date < self.date_from:
            return False
        if self.date_to is not None and record_date > self.date_to:
            return False
        return True


@dataclass
class ScopedRecords(Generic[RecordT]):
    records: list[RecordT] = field(default_factory=list)
    issues: list[DataQualityIssue] = field(default_factory=list)


def sale_date(sale: Sale, tz: tzinfo | None = None) -> date | None:
    """Calendar date of a sale, optionally seen from the business timezone."""
    created_at = sale.created_at
    if created_at is None:
        return None
    if tz is not None and created_at.tzinfo is not None:
        created_at = created_at.astimezone(tz)
    return created_at.date()


def _apply_scope(
    records: Iterable[RecordT],
    scope: DateScope,
    date_of: Callable[[RecordT], date | None],
    record_type: str,
    date_field: str,
) -> ScopedRecords[RecordT]:
    result: ScopedRecords[RecordT] = ScopedRecords()
    for record in records:
        record_date = date_of(record)
        if record_date is None:
            excluded = scope.is_bounded
            issue = DataQualityIssue(
                record_type=record_type,
                record_id=getattr(record, "id", None),
                field=date_field,
                message=f"Missing or invalid {date_field}"
                + ("; excluded from date range" if excluded else ""),
            )
            logger.warning(
                "Data quality: %s %s has no usable %s",
                record_type,
                issue.record_id,
                date_field,
            )
            result.issues.append(issue)
            if excluded:
                continue
        if scope.contains(record_date):
            result.records.append(record)
    return result


def filter_sales(
    sales: Iterable[Sale], scope: DateScope, tz: tzinfo | None = None
) -> ScopedRecords[Sale]:
    return _apply_scope(sales, scope, lambda sale: sale_date(sale, tz), "sale", "created_at")


def filter_expenses(expenses: Iterable[Expense], scope: DateScope) -> ScopedRecords[Expense]:
    return _apply_scope(
        expenses, scope, lambda expense: expense.expense_date, "expense", "expense_date"
    )
