from collections.abc import Iterable
from datetime import date, tzinfo

from ledger.schemas.expenses import Expense, ExpenseOut
from ledger.schemas.sales import LedgerItem, LedgerRow, Sale
from ledger.schemas.summary import CashSummary, DashboardSummary, ScopeOut
from ledger.services.aggregator import (
    ZERO,
    bucket_by_status,
    item_price,
    rollup,
    sale_cost_of_goods,
    sale_profit,
)
from ledger.services.scopes import DateScope, filter_expenses, filter_sales


def expense_out(expense: Expense) -> ExpenseOut:
    return ExpenseOut(
        id=expense.id,
        description=expense.description,
        amount=float(expense.amount),
        expense_date=expense.expense_date,
    )


def ledger_row(sale: Sale) -> LedgerRow:
    items_subtotal = sum((item_price(item) for item in sale.items), ZERO)
    return LedgerRow(
        id=sale.id,
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        total=float(sale.total),
        dtf_cost=float(sale.dtf_cost),
        status=sale.status,
        created_at=sale.created_at,
        items=[
            LedgerItem(
                id=item.id,
                product_name=item.product_name,
                qty=item.quantity,
                unit_price=float(item.unit_price),
                unit_cost=float(item.unit_cost),
            )
            for item in sale.items
        ],
        items_subtotal=float(items_subtotal),
        discount=float(items_subtotal - sale.total),
        cost_of_goods=float(sale_cost_of_goods(sale)),
        profit=float(sale_profit(sale)),
    )


def ledger_rows(sales: Iterable[Sale]) -> list[LedgerRow]:
    return [ledger_row(sale) for sale in sales]


def daily_cash(
    sales: Iterable[Sale],
    expenses: Iterable[Expense],
    day: date,
    currency: str,
    tz: tzinfo | None = None,
) -> CashSummary:
    scope = DateScope.day(day)
    scoped_sales = filter_sales(sales, scope, tz)
    scoped_expenses = filter_expenses(expenses, scope)
    totals = rollup(scoped_sales.records, scoped_expenses.records)

    return CashSummary(
        day=day,
        currency=currency,
        revenue=float(totals.revenue),
        cost_of_goods=float(totals.cost_of_goods),
        surcharge_total=float(totals.surcharge_total),
        expense_total=float(totals.expense_total),
        net_profit=float(totals.net_profit),
        expenses=[expense_out(expense) for expense in scoped_expenses.records],
        issues=scoped_sales.issues + scoped_expenses.issues,
    )


def dashboard(
    sales: Iterable[Sale],
    expenses: Iterable[Expense],
    scope: DateScope,
    currency: str,
    tz: tzinfo | None = None,
) -> DashboardSummary:
    scoped_sales = filter_sales(sales, scope, tz)
    scoped_expenses = filter_expenses(expenses, scope)
    totals = rollup(scoped_sales.records, scoped_expenses.records)
    buckets = bucket_by_status(scoped_sales.records)

    return DashboardSummary(
        scope=ScopeOut(date_from=scope.date_from, date_to=scope.date_to),
        currency=currency,
        revenue=float(totals.revenue),
        pending_total=float(buckets.pending_total),
        shipped_total=float(buckets.shipped_total),
        cost_of_goods=float(totals.cost_of_goods),
        surcharge_total=float(totals.surcharge_total),
        expense_total=float(totals.expense_total),
        net_profit=float(totals.net_profit),
        issues=scoped_sales.issues + scoped_expenses.issues,
    )
