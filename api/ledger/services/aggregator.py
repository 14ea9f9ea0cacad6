"""
Ledger rollups.

Every profit figure in the service goes through ``sale_profit``; the aggregate
``net_profit`` is the sum of per-sale profit minus expenses, so the itemized
ledger and the summary views cannot disagree.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from ledger.schemas.expenses import Expense
from ledger.schemas.sales import Sale, SaleItem, SaleStatus

ZERO = Decimal("0")


def item_cost(item: SaleItem) -> Decimal:
    return item.unit_cost * item.quantity


def item_price(item: SaleItem) -> Decimal:
    return item.unit_price * item.quantity


def sale_cost_of_goods(sale: Sale) -> Decimal:
    return sum((item_cost(item) for item in sale.items), ZERO)


def sale_profit(sale: Sale) -> Decimal:
    return sale.total - sale_cost_of_goods(sale) - sale.dtf_cost


@dataclass(frozen=True)
class StatusBuckets:
    pending_total: Decimal = ZERO
    shipped_total: Decimal = ZERO


@dataclass(frozen=True)
class Rollup:
    revenue: Decimal = ZERO
    cost_of_goods: Decimal = ZERO
    surcharge_total: Decimal = ZERO
    expense_total: Decimal = ZERO
    net_profit: Decimal = ZERO


def bucket_by_status(sales: Iterable[Sale]) -> StatusBuckets:
    totals = {status: ZERO for status in SaleStatus}
    for sale in sales:
        totals[sale.status] += sale.total
    return StatusBuckets(
        pending_total=totals[SaleStatus.PENDING],
        shipped_total=totals[SaleStatus.SHIPPED],
    )


def rollup(sales: Iterable[Sale], expenses: Iterable[Expense]) -> Rollup:
    sales = list(sales)
    expense_total = sum((expense.amount for expense in expenses), ZERO)
    return Rollup(
        revenue=sum((sale.total for sale in sales), ZERO),
        cost_of_goods=sum((sale_cost_of_goods(sale) for sale in sales), ZERO),
        surcharge_total=sum((sale.dtf_cost for sale in sales), ZERO),
        expense_total=expense_total,
        net_profit=sum((sale_profit(sale) for sale in sales), ZERO) - expense_total,
    )
