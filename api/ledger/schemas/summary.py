from datetime import date

from pydantic import BaseModel

from ledger.schemas.expenses import ExpenseOut


class DataQualityIssue(BaseModel):
    record_type: str
    record_id: str | None
    field: str
    message: str


class ScopeOut(BaseModel):
    date_from: date | None
    date_to: date | None


class CashSummary(BaseModel):
    day: date
    currency: str
    revenue: float
    cost_of_goods: float
    surcharge_total: float
    expense_total: float
    net_profit: float
    expenses: list[ExpenseOut]
    issues: list[DataQualityIssue]


class DashboardSummary(BaseModel):
    scope: ScopeOut
    currency: str
    revenue: float
    pending_total: float
    shipped_total: float
    cost_of_goods: float
    surcharge_total: float
    expense_total: float
    net_profit: float
    issues: list[DataQualityIssue]
